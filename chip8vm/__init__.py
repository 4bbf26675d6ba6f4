"""CHIP-8 interpreter package."""

from chip8vm.constants import *
from chip8vm.quirks import Quirks, QUIRK_PRESETS, quirks_from_config
from chip8vm.state import EmulatorState, create_state
from chip8vm.decode import Op, DecodedInstruction, decode
from chip8vm.emulator import (
    execute, fetch, cycle, run_cycles, tick, set_key, set_draw_permit,
    is_tone_playing, load_program, load_rom
)
from chip8vm.errors import Chip8Error, RomTooLarge, StackFault, StackOverflow, StackUnderflow
from chip8vm.interpreter import Interpreter
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, batch_render, save_screenshot, create_video

__all__ = [
    "EmulatorState",
    "create_state",
    "Quirks",
    "QUIRK_PRESETS",
    "quirks_from_config",
    "Op",
    "DecodedInstruction",
    "decode",
    "fetch",
    "execute",
    "cycle",
    "run_cycles",
    "tick",
    "set_key",
    "set_draw_permit",
    "is_tone_playing",
    "load_program",
    "load_rom",
    "Interpreter",
    "Chip8Error",
    "RomTooLarge",
    "StackFault",
    "StackOverflow",
    "StackUnderflow",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "batch_render",
    "save_screenshot",
    "create_video",
]
