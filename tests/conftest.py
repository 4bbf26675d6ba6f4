"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, Quirks, QUIRK_PRESETS, Interpreter
from chip8vm.logging import InterpreterLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state (default quirks) for each test."""
    return create_state()


@pytest.fixture
def modern_state():
    """Provide a fresh state with the modern quirk preset."""
    return create_state(quirks=QUIRK_PRESETS["modern"])


@pytest.fixture
def wrap_state():
    """Provide a fresh state whose sprites wrap around the screen edges."""
    return create_state(quirks=Quirks(sprite_wrap=True))


@pytest.fixture
def interpreter():
    """Provide an interpreter with a quiet logger."""
    return Interpreter(logger=InterpreterLogger(log_level="CRITICAL"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def grant_draw(state):
    """Helper to hand out the once-per-refresh draw permit."""
    return state.replace(draw_ready=jnp.array(True))


def set_registers(state, **values):
    """Helper to set registers by name, e.g. set_registers(state, V1=0x10, VF=1)."""
    V = state.V
    for name, value in values.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
