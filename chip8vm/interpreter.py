"""Stateful interpreter facade over the functional CHIP-8 core."""

from typing import Optional

import jax
import numpy as np

from chip8vm import emulator
from chip8vm.constants import FAULT_NONE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW, NUM_KEYS
from chip8vm.errors import RomTooLarge, StackFault, StackOverflow, StackUnderflow
from chip8vm.logging import InterpreterLogger
from chip8vm.quirks import Quirks
from chip8vm.state import EmulatorState, create_state

_FAULTS = {
    FAULT_STACK_OVERFLOW: StackOverflow,
    FAULT_STACK_UNDERFLOW: StackUnderflow,
}


class Interpreter:
    """A single CHIP-8 machine driven by an external scheduler.

    The caller invokes :meth:`step` at any rate, and :meth:`tick` plus
    ``set_draw_permit(True)`` once per 60 Hz refresh. Every mutation goes
    through this object; :attr:`state` holds the current immutable
    :class:`EmulatorState` for inspection.

    Args:
        quirks: Interpreter variant
        seed: Seed of the random number generator used by CXNN
        logger: Logger for lifecycle events (a default one is created if omitted)
    """

    def __init__(
        self,
        quirks: Quirks = Quirks(),
        seed: int = 0,
        logger: Optional[InterpreterLogger] = None,
    ):
        self.logger = logger or InterpreterLogger()
        self.state: EmulatorState = create_state(jax.random.PRNGKey(seed), quirks)
        self.cycles = 0
        self._program = b""

    @property
    def quirks(self) -> Quirks:
        return self.state.quirks

    def load_program(self, data: bytes, source: Optional[str] = None) -> None:
        """Reset the machine and load a program image at 0x200.

        Raises:
            RomTooLarge: the image is larger than 4096 - 0x200 bytes. The
                current machine is left as it was.
        """
        data = bytes(data)
        try:
            state = emulator.load_program(self.state, data)
        except RomTooLarge as e:
            self.logger.log_program_rejected(e, source)
            raise
        self.state = state
        self.cycles = 0
        self._program = data
        self.logger.log_program_loaded(len(data), source)

    def load_rom(self, path: str) -> None:
        """Read a ROM file and load it."""
        with open(path, 'rb') as f:
            data = f.read()
        self.load_program(data, source=str(path))

    def reset(self) -> None:
        """Restart the current program from a freshly initialised machine."""
        self.load_program(self._program)

    @property
    def halted(self) -> bool:
        return int(self.state.fault) != FAULT_NONE

    def _fault_error(self) -> StackFault:
        return _FAULTS[int(self.state.fault)](int(self.state.pc))

    def step(self) -> None:
        """Run one fetch-decode-execute cycle.

        Raises:
            StackOverflow: a call was made with 16 return addresses stacked
            StackUnderflow: a return was made with an empty stack
        """
        if self.halted:
            raise self._fault_error()

        self.state = emulator.cycle(self.state)
        self.cycles += 1

        if self.halted:
            error = self._fault_error()
            self.logger.log_fault(error, self.cycles)
            raise error

    def run(self, cycles: int) -> None:
        """Call :meth:`step` ``cycles`` times."""
        for _ in range(cycles):
            self.step()

    def tick(self) -> None:
        """Advance the delay and sound timers by one 60 Hz period."""
        self.state = emulator.tick(self.state)

    def set_key(self, index: int, pressed: bool) -> None:
        if not 0 <= index < NUM_KEYS:
            self.logger.log_ignored_key(index)
            return
        self.state = emulator.set_key(self.state, index, pressed)

    def set_draw_permit(self, ready: bool) -> None:
        self.state = emulator.set_draw_permit(self.state, ready)

    def snapshot_display(self) -> np.ndarray:
        """Read-only copy of the framebuffer, a bool array indexed ``[x, y]``."""
        snapshot = np.array(self.state.display, dtype=np.bool_)
        snapshot.flags.writeable = False
        return snapshot

    def is_tone_playing(self) -> bool:
        return emulator.is_tone_playing(self.state)

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def registers(self) -> np.ndarray:
        registers = np.array(self.state.V, dtype=np.uint8)
        registers.flags.writeable = False
        return registers

    @property
    def waiting_for_key(self) -> bool:
        return bool(self.state.waiting_for_key)

    @property
    def waiting_for_draw(self) -> bool:
        return bool(self.state.waiting_for_draw)
