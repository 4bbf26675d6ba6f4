"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
import pytest
from chip8vm import execute, create_state, Quirks
from conftest import setup_sprite_in_memory, grant_draw


def draw(state, x, y, address, height, instruction=0xD010):
    """Point V0/V1/I at a sprite and draw it with the given height."""
    state = execute(state, 0x6000 | x)
    state = execute(state, 0x6100 | y)
    state = execute(state, 0xA000 | address)
    return execute(grant_draw(state), instruction | height)


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xC0, 0xC0])

        state = draw(state, 10, 5, 0x300, 2)

        assert state.display[10, 5] == 1
        assert state.display[11, 5] == 1
        assert state.display[10, 6] == 1
        assert state.display[11, 6] == 1
        assert state.display[12, 5] == 0
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])

        state = draw(state, 20, 10, 0x400, 1)
        assert state.display[20, 10] == 1
        assert state.V[15] == 0

        state = execute(grant_draw(state), 0xD011)
        assert state.display[20, 10] == 0
        assert state.V[15] == 1

    def test_xor_self_cancellation(self, fresh_state):
        """Drawing the same sprite twice erases it and reports a collision."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0x3C, 0x42, 0x81, 0xFF])

        state = draw(state, 30, 12, 0x500, 4)
        assert jnp.sum(state.display) > 0

        state = execute(grant_draw(state), 0xD014)
        assert jnp.sum(state.display) == 0
        assert state.V[15] == 1

    def test_partial_overlap_keeps_other_pixels(self, fresh_state):
        """Only overlapping pixels turn off; the rest are lit."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0])

        state = draw(state, 0, 0, 0x500, 1)
        state = draw(state, 2, 0, 0x500, 1)

        lit = [int(state.display[x, 0]) for x in range(8)]
        assert lit == [1, 1, 0, 0, 1, 1, 0, 0]
        assert state.V[15] == 1

    def test_flag_cleared_without_collision(self, fresh_state):
        """VF is reset to 0 before drawing."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])
        state = execute(state, 0x6F01)

        state = draw(state, 5, 5, 0xB00, 1)

        assert state.V[15] == 0

    def test_zero_height_draws_nothing(self, fresh_state):
        """DXY0 - No rows drawn."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = draw(state, 0, 0, 0x300, 0)
        assert jnp.sum(state.display) == 0


class TestScreenBoundaries:
    """Test sprite clipping and wrapping."""

    def test_right_edge_clipping(self, fresh_state):
        """Pixels past x=63 are clipped."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])

        state = draw(state, 60, 0, 0x600, 1)

        assert all(state.display[x, 0] == 1 for x in range(60, 64))
        assert all(state.display[x, 0] == 0 for x in range(0, 4))

    def test_bottom_edge_clipping(self, fresh_state):
        """Rows past y=31 are clipped."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])

        state = draw(state, 0, 30, 0x700, 3)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert state.display[0, 0] == 0

    def test_right_edge_wrapping(self, wrap_state):
        """With sprite_wrap, pixels past x=63 reappear at the left."""
        state = setup_sprite_in_memory(wrap_state, 0x600, [0xFF])

        state = draw(state, 60, 0, 0x600, 1)

        assert all(state.display[x, 0] == 1 for x in [60, 61, 62, 63, 0, 1, 2, 3])
        assert jnp.sum(state.display) == 8

    def test_bottom_edge_wrapping(self, wrap_state):
        """With sprite_wrap, rows past y=31 reappear at the top."""
        state = setup_sprite_in_memory(wrap_state, 0x700, [0x80, 0x80, 0x80])

        state = draw(state, 0, 30, 0x700, 3)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert state.display[0, 0] == 1

    @pytest.mark.parametrize("quirks", [Quirks(), Quirks(sprite_wrap=True)])
    def test_coordinate_wrapping(self, quirks):
        """The origin wraps modulo the screen size under both edge policies."""
        state = setup_sprite_in_memory(create_state(quirks=quirks), 0x800, [0x80])

        state = draw(state, 70, 37, 0x800, 1)  # (70 % 64, 37 % 32) = (6, 5)

        assert state.display[6, 5] == 1


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are read from memory."""
        state = setup_sprite_in_memory(fresh_state, 0x900, [0x80, 0x40, 0x20, 0x10, 0x08])

        state = draw(state, 10, 8, 0x900, 3)

        assert state.display[10, 8] == 1
        assert state.display[11, 9] == 1
        assert state.display[12, 10] == 1
        assert state.display[13, 11] == 0

    def test_font_glyph(self, fresh_state):
        """Draw the built-in glyph for 0."""
        state = execute(fresh_state, 0x6200)
        state = execute(state, 0xF229)  # I = glyph 0
        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0xD015)

        rows = [[int(state.display[x, y]) for x in range(4)] for y in range(5)]
        assert rows == [
            [1, 1, 1, 1],
            [1, 0, 0, 1],
            [1, 0, 0, 1],
            [1, 0, 0, 1],
            [1, 1, 1, 1],
        ]


class TestDrawPermit:
    """Test draw rate limiting."""

    def test_draw_consumes_permit(self, fresh_state):
        """A successful draw uses up the permit."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = draw(state, 0, 0, 0x300, 1)

        assert not state.draw_ready
        assert not state.waiting_for_draw

    def test_draw_without_permit_is_deferred(self, fresh_state):
        """Without a permit nothing is drawn and the instruction repeats."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = state.replace(draw_ready=jnp.array(False), pc=state.pc + 2)  # as if fetched

        state = execute(state, 0xD011)

        assert jnp.sum(state.display) == 0
        assert state.pc == 0x200
        assert state.waiting_for_draw

    def test_draw_ignores_permit_without_display_wait(self):
        """With display_wait off every draw goes through."""
        state = create_state(quirks=Quirks(display_wait=False))
        state = setup_sprite_in_memory(state, 0x300, [0x80])
        state = state.replace(draw_ready=jnp.array(False))

        state = execute(state, 0xA300)
        state = execute(state, 0xD011)
        state = execute(state, 0xD011)

        assert state.display[0, 0] == 0
        assert state.V[15] == 1
