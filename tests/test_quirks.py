"""Tests for quirk presets and config parsing."""

import pytest
from chip8vm import Quirks, QUIRK_PRESETS, quirks_from_config, create_state


def test_default_is_cosmac():
    assert quirks_from_config() == QUIRK_PRESETS["cosmac"]
    assert quirks_from_config({}) == Quirks()


def test_modern_preset():
    quirks = quirks_from_config({"preset": "modern"})

    assert not quirks.shift_uses_vy
    assert not quirks.logic_resets_vf
    assert quirks.jump_uses_vx
    assert not quirks.load_store_increments_index
    assert not quirks.display_wait


def test_override_on_top_of_preset():
    quirks = quirks_from_config({"preset": "modern", "sprite_wrap": True})

    assert quirks.sprite_wrap
    assert quirks.jump_uses_vx


def test_null_preset_falls_back_to_cosmac():
    assert quirks_from_config({"preset": None, "display_wait": False}) == Quirks(display_wait=False)


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown quirk preset"):
        quirks_from_config({"preset": "superchip"})


def test_unknown_option():
    with pytest.raises(ValueError, match="shift_quirk"):
        quirks_from_config({"shift_quirk": True})


def test_quirks_are_hashable_static_fields():
    """Quirks live in the static part of the state so jit specialises on them."""
    state = create_state(quirks=QUIRK_PRESETS["modern"])

    assert hash(QUIRK_PRESETS["modern"]) == hash(state.quirks)
    assert state.quirks == QUIRK_PRESETS["modern"]
