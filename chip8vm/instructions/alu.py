"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.quirks import Quirks

# Each ALU function returns (result, flag); a flag of None leaves VF untouched.


def _flag(condition) -> jnp.ndarray:
    return jnp.astype(condition, jnp.uint8)


def _logic_flag(quirks: Quirks):
    return jnp.zeros((), dtype=jnp.uint8) if quirks.logic_resets_vf else None


def alu_set(vx, vy, quirks: Quirks):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy, quirks: Quirks):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _logic_flag(quirks)


def alu_and(vx, vy, quirks: Quirks):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _logic_flag(quirks)


def alu_xor(vx, vy, quirks: Quirks):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _logic_flag(quirks)


def alu_add(vx, vy, quirks: Quirks):
    """8XY4 - Add: VX += VY, set carry flag."""
    total = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    return jnp.astype(total & 0xFF, jnp.uint8), _flag(total > 0xFF)


def alu_sub_xy(vx, vy, quirks: Quirks):
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    return vx - vy, _flag(vx >= vy)


def alu_shift_right(vx, vy, quirks: Quirks):
    """8XY6 - Shift right: VX = VY >> 1 (VX >> 1 without shift_uses_vy)."""
    source = vy if quirks.shift_uses_vy else vx
    return source >> 1, source & 1


def alu_sub_yx(vx, vy, quirks: Quirks):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    return vy - vx, _flag(vy >= vx)


def alu_shift_left(vx, vy, quirks: Quirks):
    """8XYE - Shift left: VX = VY << 1 (VX << 1 without shift_uses_vy)."""
    source = vy if quirks.shift_uses_vy else vx
    return source << 1, source >> 7


def make_alu_instruction(alu_fn):
    """Factory for 8XYN instructions. VF is written last, so 8FYN ends with the flag."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, flag = alu_fn(vx, vy, state.quirks)

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    alu_instruction.__doc__ = alu_fn.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
