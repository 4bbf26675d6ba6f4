"""Errors raised by the CHIP-8 interpreter."""


class Chip8Error(Exception):
    """Base class for interpreter errors."""


class RomTooLarge(Chip8Error):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"ROM is too large ({size} bytes, limit is {limit} bytes)")
        self.size = size
        self.limit = limit


class StackFault(Chip8Error):
    """Call stack misuse; the machine halts at the faulting instruction."""

    reason = "stack fault"

    def __init__(self, pc: int):
        super().__init__(f"{self.reason} at 0x{pc:03X}")
        self.pc = pc


class StackOverflow(StackFault):
    reason = "stack overflow"


class StackUnderflow(StackFault):
    reason = "stack underflow"
