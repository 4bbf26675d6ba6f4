"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MASK, FLAG_REGISTER

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def draw_sprite(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    The origin wraps modulo the screen size. Sprite pixels past the right or
    bottom edge are clipped, or wrapped around with the ``sprite_wrap`` quirk.
    VF is 1 if any lit pixel was turned off, 0 otherwise.
    """
    sprite_x = state.V[instruction.x] % SCREEN_WIDTH
    sprite_y = state.V[instruction.y] % SCREEN_HEIGHT

    col_offset = xx - sprite_x
    row_offset = yy - sprite_y
    if state.quirks.sprite_wrap:
        col_offset = col_offset % SCREEN_WIDTH
        row_offset = row_offset % SCREEN_HEIGHT

    covered = (col_offset >= 0) & (col_offset < 8) & (row_offset >= 0) & (row_offset < instruction.n)
    col_offset = jnp.where(covered, col_offset, 0)
    row_offset = jnp.where(covered, row_offset, 0)

    sprite_bytes = state.memory[(state.I + row_offset) & ADDRESS_MASK]
    sprite = jnp.astype((sprite_bytes >> (7 - col_offset)) & 1, jnp.bool_) & covered

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    With ``display_wait`` the draw consumes the draw permit; without one the
    instruction is retried on the next cycle.
    """
    if not state.quirks.display_wait:
        return draw_sprite(state, instruction)

    def draw_action(state):
        state = draw_sprite(state, instruction)
        return state.replace(draw_ready=jnp.array(False), waiting_for_draw=jnp.array(False))

    def wait_action(state):
        return state.replace(pc=state.pc - 2, waiting_for_draw=jnp.array(True))

    return jax.lax.cond(state.draw_ready, draw_action, wait_action, state)
