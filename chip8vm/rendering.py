"""CHIP-8 rendering utilities for frontends and recordings."""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.logging import ConsoleLogger


def chip8_display_to_rgb(
    display: np.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32) indexed [x, y]
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: white)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)

    # (64 width, 32 height) -> image rows first
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "white",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("white", "classic", "amber", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def batch_render(
    displays: Sequence[np.ndarray], scale: int = 4, color_scheme: str = "white", padding: int = 5
) -> np.ndarray:
    """Lay out several framebuffers in a near-square grid.

    Args:
        displays: Framebuffers of shape (64, 32), e.g. successive snapshots
        scale: Upscaling factor for each framebuffer
        color_scheme: Color scheme name
        padding: Transparent gap between framebuffers in pixels

    Returns:
        RGBA array; padding and unused grid cells are fully transparent
    """
    displays = np.asarray(displays, dtype=np.bool_)
    if len(displays.shape) != 3 or displays.shape[0] == 0:
        raise ValueError(f"Expected a non-empty batch of displays, got shape {displays.shape}")

    count = displays.shape[0]
    on_color, off_color = create_color_scheme(color_scheme)

    grid_cols = int(np.ceil(np.sqrt(count)))
    grid_rows = int(np.ceil(count / grid_cols))

    tile_height, tile_width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    grid_height = grid_rows * tile_height + (grid_rows - 1) * padding
    grid_width = grid_cols * tile_width + (grid_cols - 1) * padding
    grid_image = np.zeros((grid_height, grid_width, 4), dtype=np.uint8)

    for i, display in enumerate(displays):
        row, col = divmod(i, grid_cols)
        y_start = row * (tile_height + padding)
        x_start = col * (tile_width + padding)
        tile = grid_image[y_start:y_start + tile_height, x_start:x_start + tile_width]
        tile[..., :3] = chip8_display_to_rgb(display, scale, on_color, off_color)
        tile[..., 3] = 255

    return grid_image


def save_screenshot(display: np.ndarray, filename: str, scale: int = 8, color_scheme: str = "white") -> None:
    """Write one framebuffer to an image file (format from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    Image.fromarray(chip8_display_to_rgb(display, scale, on_color, off_color)).save(filename)


def create_video(
        frames: Sequence[np.ndarray],
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "white",
        persistence: bool = True,
        logger: Optional[ConsoleLogger] = None,
) -> None:
    """Save a sequence of framebuffers as an MP4 video.

    Args:
        frames: Framebuffers of shape (64, 32), one per refresh
        filename: Output MP4 file
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading)
        logger: Where to report the saved file
    """
    displays = np.asarray(frames, dtype=np.bool_)
    if len(displays.shape) != 3 or displays.shape[1:] != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(
            f"Expected display shape (N, {SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {displays.shape}"
        )

    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme))

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    # Phosphor glow buffer
    glow = np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.float32)
    decay = 0.8

    try:
        for frame_display in displays:
            if persistence:
                glow = np.clip(glow * decay + frame_display.astype(np.float32), 0.0, 1.0)
                pixel_values = glow.T
            else:
                pixel_values = frame_display.T.astype(np.float32)

            frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
            for c in range(3):
                frame[:, :, c] = off_color[c] + pixel_values * (on_color[c] - off_color[c])

            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()

    if logger is not None:
        duration = len(displays) / fps
        logger.info(f"Video saved: {filename} ({len(displays)} frames, {fps} FPS, {duration:.1f}s)")
