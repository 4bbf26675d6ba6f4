"""Tests for framebuffer rendering helpers."""

import cv2
import numpy as np
import pytest
from PIL import Image
from chip8vm import chip8_display_to_rgb, create_color_scheme, batch_render, save_screenshot, create_video
from chip8vm.logging import ConsoleLogger


@pytest.fixture
def display():
    pixels = np.zeros((64, 32), dtype=np.bool_)
    pixels[3, 1] = True
    return pixels


def test_rgb_shape_and_colors(display):
    rgb = chip8_display_to_rgb(display, scale=1)

    assert rgb.shape == (32, 64, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[1, 3]) == (255, 255, 255)
    assert tuple(rgb[3, 1]) == (0, 0, 0)


def test_rgb_upscaling(display):
    rgb = chip8_display_to_rgb(display, scale=4)

    assert rgb.shape == (128, 256, 3)
    assert (rgb[4:8, 12:16] == 255).all()


def test_custom_colors(display):
    on_color, off_color = create_color_scheme("amber")
    rgb = chip8_display_to_rgb(display, scale=1, on_color=on_color, off_color=off_color)

    assert tuple(rgb[1, 3]) == (255, 176, 0)
    assert tuple(rgb[0, 0]) == off_color


def test_unknown_color_scheme():
    with pytest.raises(ValueError, match="Unknown color scheme"):
        create_color_scheme("sepia")


def test_save_screenshot(display, tmp_path):
    path = tmp_path / "screen.png"

    save_screenshot(display, str(path), scale=2)

    with Image.open(path) as image:
        assert image.size == (128, 64)
        assert image.getpixel((6, 2)) == (255, 255, 255)


def test_video_rejects_wrong_shape(tmp_path):
    with pytest.raises(ValueError, match="Expected display shape"):
        create_video(np.zeros((2, 32, 64), dtype=np.bool_), str(tmp_path / "out.mp4"))


def read_video(path):
    """Decode every frame of a video file."""
    capture = cv2.VideoCapture(str(path))
    frames = []
    try:
        ok, frame = capture.read()
        while ok:
            frames.append(frame)
            ok, frame = capture.read()
    finally:
        capture.release()
    return frames


@pytest.mark.parametrize("persistence", [True, False])
def test_create_video_writes_frames(display, tmp_path, persistence):
    path = tmp_path / "out.mp4"
    frames = [display, ~display, display, np.zeros_like(display)]

    create_video(frames, str(path), fps=30, scale=2, persistence=persistence)

    assert path.exists()
    decoded = read_video(path)
    assert len(decoded) == len(frames)
    assert decoded[0].shape == (64, 128, 3)


def test_create_video_reports_saved_file(display, tmp_path, capsys):
    path = tmp_path / "out.mp4"
    logger = ConsoleLogger(use_colors=False, show_timestamps=False)

    create_video([display] * 3, str(path), fps=30, scale=1, logger=logger)

    output = capsys.readouterr().out
    assert "Video saved" in output
    assert "3 frames" in output


class TestBatchRender:
    """Test grid rendering of several framebuffers."""

    def test_grid_layout(self, display):
        grid = batch_render([display] * 3, scale=1, padding=5)

        # 3 tiles -> 2 x 2 grid
        assert grid.shape == (32 * 2 + 5, 64 * 2 + 5, 4)
        assert grid.dtype == np.uint8

    def test_tiles_are_opaque_and_gaps_transparent(self, display):
        grid = batch_render([display] * 3, scale=1, padding=5)

        assert tuple(grid[1, 3]) == (255, 255, 255, 255)
        assert tuple(grid[0, 0]) == (0, 0, 0, 255)
        assert grid[0, 64:69, 3].max() == 0  # padding column
        assert grid[37:, 69:, 3].max() == 0  # unused fourth cell

    def test_single_display(self, display):
        grid = batch_render(np.stack([display]), scale=2)

        assert grid.shape == (64, 128, 4)
        assert (grid[..., :3] == chip8_display_to_rgb(display, scale=2)).all()

    def test_color_scheme(self, display):
        grid = batch_render([display], scale=1, color_scheme="classic")
        assert tuple(grid[1, 3, :3]) == (0, 255, 0)

    def test_empty_batch(self):
        with pytest.raises(ValueError, match="non-empty batch"):
            batch_render([])
