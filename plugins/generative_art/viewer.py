"""
Interactive Pygame Viewer for Generative Sketches

Drives a SketchSimulator at the window's size, feeding it the mouse as
a normalized pointer and blitting the rendered frame every tick. The
window is resizable; resizes are handed to the simulator and applied
at the next frame boundary.

Controls:
  1-6         Select preset
  TAB         Next preset
  P           Toggle preview / full quality
  SPACE       Pause / Resume
  R           Reinitialize current preset
  [ / ]       Select parameter
  - / =       Decrease / increase selected parameter
  S           Save screenshot
  H           Toggle HUD overlay
  Q / ESC     Quit
"""

import os
import time
import numpy as np
import pygame

from .engine_base import Quality
from .presets import PRESET_ORDER, get_preset
from .simulator import SketchSimulator

HUD_COLOR = (210, 215, 225)
SLIDER_STEPS = 40


class Viewer:
    """Pygame window around a SketchSimulator."""

    def __init__(self, width=800, height=600, start_preset="resonance",
                 quality=Quality.full):
        self.width = width
        self.height = height
        self.sim = SketchSimulator(start_preset, width, height, quality)
        self.running = True
        self.show_hud = True
        self.slider_index = 0
        self.fps_history = []
        self.hud_font = None

    # -----------------------------------------------------------------------
    # Input
    # -----------------------------------------------------------------------

    def _update_pointer(self):
        """Latest mouse position, normalized and clamped to [0, 1]."""
        if not pygame.mouse.get_focused():
            return
        mx, my = pygame.mouse.get_pos()
        px = min(max(mx / max(self.width, 1), 0.0), 1.0)
        py = min(max(my / max(self.height, 1), 0.0), 1.0)
        self.sim.set_pointer(px, py)

    def _slider_defs(self):
        return self.sim.engine.get_slider_defs()

    def _nudge_slider(self, direction):
        defs = self._slider_defs()
        if not defs:
            return
        sdef = defs[self.slider_index % len(defs)]
        current = self.sim.engine.settings()[sdef["key"]]
        step = sdef.get("step", (sdef["max"] - sdef["min"]) / SLIDER_STEPS)
        value = min(max(current + direction * step, sdef["min"]), sdef["max"])
        if "step" in sdef:
            value = int(round(value))
        self.sim.set_runtime_params(**{sdef["key"]: value})

    def _apply_preset_index(self, idx):
        if 0 <= idx < len(PRESET_ORDER):
            self.sim.apply_preset(PRESET_ORDER[idx])
            self.slider_index = 0

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.sim.paused = not self.sim.paused

        elif key == pygame.K_r:
            self.sim.reseed()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_p:
            target = Quality.full if self.sim.quality == Quality.preview else Quality.preview
            self.sim.set_quality(target)

        elif key == pygame.K_TAB:
            idx = PRESET_ORDER.index(self.sim.preset_key)
            self._apply_preset_index((idx + 1) % len(PRESET_ORDER))

        elif key == pygame.K_s:
            self._save_screenshot()

        elif key == pygame.K_LEFTBRACKET:
            self.slider_index -= 1

        elif key == pygame.K_RIGHTBRACKET:
            self.slider_index += 1

        elif key == pygame.K_MINUS:
            self._nudge_slider(-1)

        elif key == pygame.K_EQUALS:
            self._nudge_slider(1)

        elif pygame.K_1 <= key <= pygame.K_9:
            self._apply_preset_index(key - pygame.K_1)

    # -----------------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------------

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return

        preset = get_preset(self.sim.preset_key)
        line = (f"{self.sim.engine.engine_label} - {preset['name']}  |  "
                f"Frame: {self.sim.frame:,}  |  {self.sim.quality.value}  |  "
                f"{self.width}x{self.height}  |  FPS: {fps:.0f}")
        if self.sim.paused:
            line = "[PAUSED]  " + line

        defs = self._slider_defs()
        lines = [line]
        if defs:
            sdef = defs[self.slider_index % len(defs)]
            value = self.sim.engine.settings()[sdef["key"]]
            lines.append(f"{sdef['section']} / {sdef['label']}: {value:{sdef['fmt']}}  [-/=]")

        padding = 6
        bg_height = 20 * len(lines) + 4
        bg_surface = pygame.Surface((self.width, bg_height), pygame.SRCALPHA)
        bg_surface.fill((0, 0, 0, 140))
        screen.blit(bg_surface, (0, 0))
        for row, text in enumerate(lines):
            text_surface = self.hud_font.render(text, True, HUD_COLOR)
            screen.blit(text_surface, (padding + 4, padding + row * 20))

    def _save_screenshot(self):
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(screenshots_dir, f"sketch_{self.sim.preset_key}_{timestamp}.png")
        latest_path = os.path.join(screenshots_dir, "latest.png")

        rgb = self.sim.canvas.to_rgb()
        surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1).copy())
        pygame.image.save(surface, path)
        pygame.image.save(surface, latest_path)
        print(f"[sketch] screenshot saved: {path}")

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption("Generative Sketches")
        clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("menlo", 13)

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE:
                    self.width, self.height = max(event.w, 1), max(event.h, 1)
                    screen = pygame.display.set_mode((self.width, self.height),
                                                     pygame.RESIZABLE)
                    self.sim.request_resize(self.width, self.height)
                elif event.type == pygame.KEYDOWN:
                    self._handle_keydown(event)

            self._update_pointer()
            rgb = self.sim.render()

            surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1).copy())
            screen.blit(surface, (0, 0))

            frame_time = time.time() - frame_start
            self.fps_history.append(frame_time)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)

            self._draw_hud(screen, avg_fps)

            pygame.display.flip()
            clock.tick(60)

        pygame.quit()
