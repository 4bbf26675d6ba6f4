"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
from chex import dataclass


class Op(enum.IntEnum):
    """Closed set of operation kinds an instruction word can decode to."""
    UNKNOWN = 0
    SYS = enum.auto()           # 0NNN
    CLS = enum.auto()           # 00E0
    RET = enum.auto()           # 00EE
    JP = enum.auto()            # 1NNN
    CALL = enum.auto()          # 2NNN
    SE_IMM = enum.auto()        # 3XNN
    SNE_IMM = enum.auto()       # 4XNN
    SE_REG = enum.auto()        # 5XY0
    LD_IMM = enum.auto()        # 6XNN
    ADD_IMM = enum.auto()       # 7XNN
    LD_REG = enum.auto()        # 8XY0
    OR = enum.auto()            # 8XY1
    AND = enum.auto()           # 8XY2
    XOR = enum.auto()           # 8XY3
    ADD_REG = enum.auto()       # 8XY4
    SUB = enum.auto()           # 8XY5
    SHR = enum.auto()           # 8XY6
    SUBN = enum.auto()          # 8XY7
    SHL = enum.auto()           # 8XYE
    SNE_REG = enum.auto()       # 9XY0
    LD_I = enum.auto()          # ANNN
    JP_OFFSET = enum.auto()     # BNNN
    RND = enum.auto()           # CXNN
    DRW = enum.auto()           # DXYN
    SKP = enum.auto()           # EX9E
    SKNP = enum.auto()          # EXA1
    LD_VX_DT = enum.auto()      # FX07
    LD_VX_K = enum.auto()       # FX0A
    LD_DT_VX = enum.auto()      # FX15
    LD_ST_VX = enum.auto()      # FX18
    ADD_I_VX = enum.auto()      # FX1E
    LD_F_VX = enum.auto()       # FX29
    LD_B_VX = enum.auto()       # FX33
    LD_MEM_VX = enum.auto()     # FX55
    LD_VX_MEM = enum.auto()     # FX65


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op member
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


# Secondary selectors for the opcode families that share a first nibble
_ALU_OPS = {
    0x0: Op.LD_REG, 0x1: Op.OR, 0x2: Op.AND, 0x3: Op.XOR, 0x4: Op.ADD_REG,
    0x5: Op.SUB, 0x6: Op.SHR, 0x7: Op.SUBN, 0xE: Op.SHL,
}

_KEY_OPS = {0x9E: Op.SKP, 0xA1: Op.SKNP}

_MISC_OPS = {
    0x07: Op.LD_VX_DT, 0x0A: Op.LD_VX_K, 0x15: Op.LD_DT_VX, 0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX, 0x29: Op.LD_F_VX, 0x33: Op.LD_B_VX, 0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}

_SINGLE_OPS = {
    0x1: Op.JP, 0x2: Op.CALL, 0x3: Op.SE_IMM, 0x4: Op.SNE_IMM, 0x6: Op.LD_IMM,
    0x7: Op.ADD_IMM, 0xA: Op.LD_I, 0xB: Op.JP_OFFSET, 0xC: Op.RND, 0xD: Op.DRW,
}


def classify(raw, opcode, n, nn):
    """Map instruction fields to an Op member (first matching pattern wins)."""
    patterns = [
        (raw == 0x00E0, Op.CLS),
        (raw == 0x00EE, Op.RET),
        (opcode == 0x0, Op.SYS),
        ((opcode == 0x5) & (n == 0x0), Op.SE_REG),
        ((opcode == 0x9) & (n == 0x0), Op.SNE_REG),
    ]
    patterns += [(opcode == nibble, op) for nibble, op in _SINGLE_OPS.items()]
    patterns += [((opcode == 0x8) & (n == selector), op) for selector, op in _ALU_OPS.items()]
    patterns += [((opcode == 0xE) & (nn == selector), op) for selector, op in _KEY_OPS.items()]
    patterns += [((opcode == 0xF) & (nn == selector), op) for selector, op in _MISC_OPS.items()]

    conditions = [jnp.asarray(condition) for condition, _ in patterns]
    choices = [int(op) for _, op in patterns]
    return jnp.select(conditions, choices, default=int(Op.UNKNOWN))


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    opcode = (instruction & 0xF000) >> 12
    n = instruction & 0x000F
    nn = instruction & 0x00FF
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction, opcode, n, nn),
        opcode=opcode,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=n,
        nn=nn,
        nnn=instruction & 0x0FFF
    )
