"""
pygame frontend: window, glow renderer, keyboard and the main loop.

Keyboard layout (QWERTY -> CHIP-8 hex keypad):

    1 2 3 4        1 2 3 C
    Q W E R   ->   4 5 6 D
    A S D F        7 8 9 E
    Z X C V        A 0 B F
"""

import logging
import time
from pathlib import Path
from typing import Optional, Set, Tuple

import numpy as np
import pygame

from .config import COLOR_SCHEMES, EmulatorConfig
from .constants import DISPLAY_H, DISPLAY_W
from .disassembler import disassemble
from .engine import Engine
from .errors import Chip8Error
from .keypad import Keypad
from .rom import read_rom
from .timers import TimerTicker

logger = logging.getLogger(__name__)

GLOW_UPSCALE = 4                        # Internal upscale for glow blur
BLOOM_STRENGTH = 0.55                   # Glow intensity (0.0-1.0)
BLUR_RADIUS = 1                         # Box blur passes (0-3)
STATUS_H = 25

BG_COLOR = (15, 15, 25)
STATUS_BG = (20, 20, 35)
TEXT_DIM = (120, 120, 140)
BEEP_COLOR = (255, 100, 150)

KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def held_keys(pressed) -> Set[int]:
    """Translate a pygame pressed-key table into logical keypad indices"""
    return {chip8_key for pg_key, chip8_key in KEY_MAP.items() if pressed[pg_key]}


def box_blur(arr: np.ndarray, passes: int = 1) -> np.ndarray:
    """Fast box blur using rolling averages"""
    a = arr.astype(np.float32)
    for _ in range(passes):
        a = (np.roll(a, 1, axis=1) + a + np.roll(a, -1, axis=1)) / 3.0
        a = (np.roll(a, 1, axis=0) + a + np.roll(a, -1, axis=0)) / 3.0
    return a


def colorize(intensity: np.ndarray, color: Tuple[int, int, int]) -> np.ndarray:
    """(h, w) intensities in [0, 1] -> (w, h, 3) uint8 array for surfarray"""
    rgb = intensity.T[:, :, np.newaxis] * np.asarray(color, dtype=np.float32)
    return np.clip(rgb, 0, 255).astype(np.uint8)


class GlowRenderer:
    """Phosphor glow/bloom over the 64x32 bitmap"""

    def __init__(self, scale: int, fg_color: Tuple[int, int, int]):
        self.scale = scale
        self.fg_color = fg_color
        self.final_size = (DISPLAY_W * scale, DISPLAY_H * scale)

    def render(self, bitmap: np.ndarray) -> Tuple[pygame.Surface, pygame.Surface]:
        """Returns (base_surface, glow_surface) for a (height, width) 0/1 bitmap"""
        base = bitmap.astype(np.float32)

        up = np.kron(base, np.ones((GLOW_UPSCALE, GLOW_UPSCALE), dtype=np.float32))
        glow = np.clip(box_blur(up, passes=1 + BLUR_RADIUS) * BLOOM_STRENGTH, 0.0, 1.0)

        base_surf = pygame.surfarray.make_surface(colorize(base, self.fg_color))
        glow_surf = pygame.surfarray.make_surface(colorize(glow, self.fg_color))

        return (pygame.transform.scale(base_surf, self.final_size),
                pygame.transform.smoothscale(glow_surf, self.final_size))

    def create_background(self) -> pygame.Surface:
        """CRT-style background with scanlines"""
        surf = pygame.Surface(self.final_size)
        surf.fill(BG_COLOR)
        line = tuple(c + 5 for c in BG_COLOR)
        for y in range(0, self.final_size[1], 2):
            pygame.draw.line(surf, line, (0, y), (self.final_size[0], y))
        return surf


class StatusBar:
    """Bottom status bar"""

    def __init__(self, y: int, width: int):
        self.rect = pygame.Rect(0, y, width, STATUS_H)
        self.text = "Ready"

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, beep: bool):
        pygame.draw.rect(surface, STATUS_BG, self.rect)
        surface.blit(font.render(self.text, True, TEXT_DIM), (10, self.rect.y + 5))
        if beep:
            label = font.render("BEEP", True, BEEP_COLOR)
            surface.blit(label, (self.rect.right - label.get_width() - 10, self.rect.y + 5))


class Chip8App:
    """Windowed driver around an :class:`Engine`"""

    def __init__(self, config: EmulatorConfig, rom_path: Path):
        self.config = config
        self.rom_path = Path(rom_path)

        self.engine = Engine(config.quirks)
        self.keypad = Keypad()
        self.ticker: Optional[TimerTicker] = None

        self.running = False
        self.paused = False
        self.halted = False
        self.show_debug = False
        self.sound_on = False
        self.redraw = True
        self._surfaces = None

    def _load(self):
        self.engine.reset()
        self.engine.load_program(read_rom(self.rom_path))
        self.halted = False
        self.redraw = True
        self.status.text = f"Loaded: {self.rom_path.stem}"

    def _setup_window(self):
        pygame.init()
        pygame.display.set_caption(f"Meow Machine - {self.rom_path.stem}")

        self.renderer = GlowRenderer(self.config.scale, COLOR_SCHEMES[self.config.color])
        w, h = self.renderer.final_size
        self.screen = pygame.display.set_mode((w, h + STATUS_H))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)
        self.background = self.renderer.create_background()
        self.status = StatusBar(h, w)

    def handle_events(self):
        """Process window and control-key events"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_p:
                    self.paused = not self.paused
                    self.status.text = "Paused" if self.paused else "Running"
                elif event.key == pygame.K_F1:
                    self.show_debug = not self.show_debug
                elif event.key == pygame.K_F5:
                    try:
                        self._load()
                    except Chip8Error as e:
                        logger.error("Reload failed: %s", e)
                        self.status.text = f"Reload failed: {e}"
                        self.halted = True

    def refresh_input(self):
        self.keypad.update(held_keys(pygame.key.get_pressed()))

    def run_cycles(self, count: int):
        """Step the engine; an engine error halts emulation"""
        for _ in range(count):
            try:
                out = self.engine.step(self.keypad.is_held)
            except Chip8Error as e:
                logger.error("Emulation halted: %s", e)
                self.status.text = f"Halted: {e}"
                self.halted = True
                return
            self.redraw |= out.redraw
            self.sound_on = out.sound_on

    def render(self):
        self.screen.blit(self.background, (0, 0))
        if self.redraw or self._surfaces is None:
            self._surfaces = self.renderer.render(self.engine.graphics.pixels)
        base_surf, glow_surf = self._surfaces
        self.screen.blit(glow_surf, (0, 0), special_flags=pygame.BLEND_ADD)
        self.screen.blit(base_surf, (0, 0), special_flags=pygame.BLEND_MAX)

        if self.show_debug:
            self._render_debug()

        self.status.draw(self.screen, self.font, self.sound_on)
        pygame.display.flip()
        self.redraw = False

    def _render_debug(self):
        """Register dump and current instruction"""
        r = self.engine.registers
        lines = r.dump().splitlines()
        try:
            opcode = self.engine.current_opcode()
            lines.append(f"OP: ${opcode:04X} "
                         f"{disassemble(opcode, self.config.quirks.use_source_register_in_jump)}")
        except Chip8Error:
            lines.append("OP: <out of bounds>")

        overlay = pygame.Surface((220, 18 * len(lines) + 10), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        x = self.screen.get_width() - overlay.get_width() - 10
        self.screen.blit(overlay, (x, 10))
        for i, line in enumerate(lines):
            text = self.font.render(line, True, COLOR_SCHEMES[self.config.color])
            self.screen.blit(text, (x + 5, 15 + i * 18))

    def run(self):
        """Main loop"""
        self._setup_window()
        input_interval = 1.0 / self.config.input_hz
        last_input = 0.0
        self.running = True
        try:
            self._load()
            self.ticker = TimerTicker(self.engine.timer_events, self.config.timer_hz)
            self.ticker.start()

            while self.running:
                self.handle_events()

                now = time.monotonic()
                if now - last_input >= input_interval:
                    self.refresh_input()
                    last_input = now

                if not self.paused and not self.halted:
                    self.run_cycles(self.config.cycles_per_frame)

                self.render()
                self.clock.tick(60)
        finally:
            if self.ticker is not None:
                self.ticker.stop()
            pygame.quit()


def run_windowed(config: EmulatorConfig, rom_path: Path):
    Chip8App(config, rom_path).run()
