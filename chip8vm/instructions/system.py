"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FAULT_STACK_UNDERFLOW
from chip8vm.stack import pop, is_empty


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation (0NNN and undefined instructions)."""
    return state


def raise_fault(state: EmulatorState, code: int) -> EmulatorState:
    """Halt on the faulting instruction, leaving every other field untouched."""
    return state.replace(pc=state.pc - 2, fault=jnp.asarray(code, dtype=jnp.uint8))


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def return_action(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: raise_fault(state, FAULT_STACK_UNDERFLOW),
        return_action,
        state
    )
