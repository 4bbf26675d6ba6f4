"""
CHIP-8 frontend: pygame window, keyboard and buzzer around the interpreter core.

    python main.py rom=path/to/game.ch8
    python main.py rom=game.ch8 quirks.preset=modern display.color_scheme=amber
    python main.py rom=game.ch8 headless.enabled=true headless.record=run.mp4
"""

import time

import hydra
import numpy as np
import pygame
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from chip8vm import Interpreter, Chip8Error, StackFault, quirks_from_config
from chip8vm.logging import InterpreterLogger, progress_bar
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, save_screenshot, create_video

KEY_MAP = {
    pygame.K_0: 0x0, pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3,
    pygame.K_4: 0x4, pygame.K_5: 0x5, pygame.K_6: 0x6, pygame.K_7: 0x7,
    pygame.K_8: 0x8, pygame.K_9: 0x9, pygame.K_a: 0xA, pygame.K_b: 0xB,
    pygame.K_c: 0xC, pygame.K_d: 0xD, pygame.K_e: 0xE, pygame.K_f: 0xF,
}


def square_wave(frequency: int, amplitude: int, sample_rate: int) -> np.ndarray:
    """One second of a mono 16-bit square wave."""
    half_period = max(1, sample_rate // frequency // 2)
    phase = (np.arange(sample_rate) // half_period) % 2
    return np.where(phase == 0, amplitude, -amplitude).astype(np.int16)


def run_frame(interpreter: Interpreter, instructions_per_frame: int):
    """Run one 60 Hz period: the instruction burst, then the timer tick and draw permit."""
    interpreter.run(instructions_per_frame)
    interpreter.tick()
    interpreter.set_draw_permit(True)


def draw_overlay_text(surface, text_lines, position, font, text_color=(255, 255, 0), alpha=120):
    """Draw text with semi-transparent background overlay"""
    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill((0, 0, 0))
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        surface.blit(font.render(line, True, text_color), (x + 8, y + 4 + i * line_height))


def run_headless(interpreter: Interpreter, cfg: DictConfig, logger: InterpreterLogger):
    """Run a fixed number of frames without a window, optionally recording them."""
    frames = []
    start_time = time.time()

    with progress_bar(cfg.headless.frames) as bar:
        for _ in range(cfg.headless.frames):
            try:
                run_frame(interpreter, cfg.display.instructions_per_frame)
            except StackFault:
                break
            if cfg.headless.record:
                frames.append(interpreter.snapshot_display())
            bar.update(1)

    logger.log_run_summary(interpreter.cycles, time.time() - start_time)

    if cfg.headless.screenshot:
        path = to_absolute_path(cfg.headless.screenshot)
        save_screenshot(interpreter.snapshot_display(), path, cfg.display.scale, cfg.display.color_scheme)
        logger.info(f"Screenshot saved: {path}")
    if cfg.headless.record:
        if frames:
            create_video(frames, to_absolute_path(cfg.headless.record), fps=cfg.display.fps,
                         scale=cfg.display.scale, color_scheme=cfg.display.color_scheme, logger=logger)
        else:
            logger.warning(f"No frames recorded, skipping {cfg.headless.record}")


def run_window(interpreter: Interpreter, cfg: DictConfig, logger: InterpreterLogger):
    """Interactive loop: keyboard in, pixels and tone out."""
    scale = cfg.display.scale
    on_color, off_color = create_color_scheme(cfg.display.color_scheme)

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption("CHIP-8")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 18)

    tone = None
    if cfg.audio.enabled:
        pygame.mixer.init(frequency=cfg.audio.sample_rate, size=-16, channels=1)
        tone = pygame.sndarray.make_sound(
            square_wave(cfg.audio.frequency, cfg.audio.amplitude, cfg.audio.sample_rate)
        )
    tone_on = False

    running = True
    paused = False
    show_debug = cfg.display.debug_overlay
    start_time = time.time()

    logger.info("Controls: 0-9/A-F=keypad, ESC=Quit, P=Pause, R=Reset, F1=Debug")

    while running:
        clock.tick(cfg.display.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_F1:
                    show_debug = not show_debug
                elif event.key == pygame.K_r:
                    interpreter.reset()
                elif event.key in KEY_MAP:
                    interpreter.set_key(KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    interpreter.set_key(KEY_MAP[event.key], False)

        if not paused and not interpreter.halted:
            try:
                run_frame(interpreter, cfg.display.instructions_per_frame)
            except StackFault:
                paused = True

        if tone is not None and interpreter.is_tone_playing() != tone_on:
            tone_on = not tone_on
            if tone_on:
                tone.play(loops=-1)
            else:
                tone.stop()

        rgb = chip8_display_to_rgb(interpreter.snapshot_display(), scale, on_color, off_color)
        screen.blit(pygame.surfarray.make_surface(rgb.swapaxes(0, 1)), (0, 0))

        if show_debug:
            status = "HALTED" if interpreter.halted else ("PAUSED" if paused else "RUNNING")
            draw_overlay_text(screen, [
                f"PC: 0x{interpreter.pc:03X}  I: 0x{interpreter.index:03X}",
                f"Cycles: {interpreter.cycles}",
                " ".join(f"{v:02X}" for v in interpreter.registers),
                f"Status: {status}",
            ], (5, 5), font)

        pygame.display.flip()

    logger.log_run_summary(interpreter.cycles, time.time() - start_time)
    pygame.quit()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = InterpreterLogger(log_level=cfg.log_level)
    quirks = quirks_from_config(OmegaConf.to_container(cfg.quirks))
    interpreter = Interpreter(quirks=quirks, seed=cfg.seed, logger=logger)

    try:
        interpreter.load_rom(to_absolute_path(cfg.rom))
    except OSError as e:
        logger.error(f"Could not read {cfg.rom}: {e}")
        return
    except Chip8Error:
        return

    if cfg.headless.enabled:
        run_headless(interpreter, cfg, logger)
    else:
        run_window(interpreter, cfg, logger)


if __name__ == "__main__":
    main()
