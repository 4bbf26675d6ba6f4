"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, create_state
from chip8vm.decode import Op, decode
from chip8vm.constants import PROGRAM_START, MAX_PROGRAM_SIZE, ADDRESS_MASK, NUM_KEYS, FAULT_NONE
from chip8vm.errors import RomTooLarge
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    Op.UNKNOWN: no_op,
    Op.SYS: no_op,
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REG: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_OFFSET: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key,
    Op.SKNP: execute_skip_if_not_key,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_VX_K: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I_VX: execute_add_to_index,
    Op.LD_F_VX: execute_font_character,
    Op.LD_B_VX: execute_bcd_conversion,
    Op.LD_MEM_VX: execute_store_registers,
    Op.LD_VX_MEM: execute_load_registers,
}

assert set(HANDLERS) == set(Op), "every Op needs exactly one handler"

# Branch i of the switch handles Op(i)
_BRANCHES = [HANDLERS[op] for op in sorted(Op)]


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.op, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance the program counter."""
    instruction = _pack_u16(
        state.memory[state.pc & ADDRESS_MASK],
        state.memory[(state.pc + 1) & ADDRESS_MASK]
    )
    return state.replace(pc=state.pc + 2), instruction


def is_blocked(state: EmulatorState) -> jnp.ndarray:
    """True while the machine is halted or suspended on a wait with nothing to resume it."""
    halted = state.fault != FAULT_NONE
    key_wait = state.waiting_for_key & ~jnp.any(state.keypad)
    draw_wait = state.waiting_for_draw & ~state.draw_ready
    return halted | key_wait | draw_wait


def _fetch_and_execute(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


@jax.jit
def cycle(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute step."""
    return jax.lax.cond(is_blocked(state), lambda s: s, _fetch_and_execute, state)


def _run_instruction(state, _):
    return cycle(state), None


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles in a single compiled loop."""
    state, _ = jax.lax.scan(_run_instruction, state, length=n)
    return state


def _count_down(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer)


@jax.jit
def tick(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers (60 Hz), never below zero.

    The buzzer stays on for the whole period in which the sound timer was
    non-zero, so a sound timer of N sounds for N ticks.
    """
    return state.replace(
        tone_active=state.sound_timer > 0,
        delay_timer=_count_down(state.delay_timer),
        sound_timer=_count_down(state.sound_timer),
    )


def is_tone_playing(state: EmulatorState) -> bool:
    """Buzzer output, to be re-read by the caller after every tick."""
    return bool(state.tone_active)


def set_key(state: EmulatorState, index: int, pressed: bool) -> EmulatorState:
    """Latch the state of one keypad key. Indices outside 0-F are ignored."""
    if not 0 <= index < NUM_KEYS:
        return state
    return state.replace(keypad=state.keypad.at[index].set(bool(pressed)))


def set_draw_permit(state: EmulatorState, ready: bool) -> EmulatorState:
    """Grant or withdraw the once-per-refresh sprite draw permit."""
    return state.replace(draw_ready=jnp.asarray(bool(ready)))


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Reset the machine and copy a program image to 0x200.

    Raises:
        RomTooLarge: the image does not fit; no state is modified.
    """
    if len(data) > MAX_PROGRAM_SIZE:
        raise RomTooLarge(len(data), MAX_PROGRAM_SIZE)

    state = create_state(state.rng, state.quirks)
    if not data:
        return state
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
