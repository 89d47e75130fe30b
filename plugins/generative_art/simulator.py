"""
SketchSimulator - Headless Frame Driver

Owns one sketch engine plus everything the engine must not decide for
itself: the latest pointer sample, the quality flag, the frame counter,
and when a resize is allowed to happen.

Resizes and quality switches are requested at any time but applied only
at the start of the next step(), so reinitialize() never interleaves with
advance(). Pointer input is sampled, not queued: the most recent
position wins.

Usage:
    from generative_art.simulator import SketchSimulator
    sim = SketchSimulator('lorenz', 640, 480)
    sim.set_pointer(0.4, 0.6)
    frame = sim.render()  # (H, W, 3) uint8
"""

from .attractor import AttractorIntegrator
from .contours import ContourField
from .engine_base import Quality
from .presets import PRESET_ORDER, get_preset
from .render import Canvas
from .resonance import SpringWaveGrid

# Engine class registry
ENGINE_CLASSES = {
    "resonance": SpringWaveGrid,
    "attractor": AttractorIntegrator,
    "topology": ContourField,
}


class SketchSimulator:
    """Headless host for a single sketch engine.

    Args:
        preset_key: Initial preset name (e.g. 'resonance', 'lorenz')
        width, height: Canvas size in pixels
        quality: Quality.full or Quality.preview
    """

    def __init__(self, preset_key="resonance", width=800, height=600,
                 quality=Quality.full):
        self.width = width
        self.height = height
        self.quality = Quality(quality)
        self.pointer = (0.5, 0.5)
        self.frame = 0
        self.paused = False
        self._pending_size = None
        self._pending_quality = None

        self.preset_key = None
        self.engine_name = None
        self.engine = None
        self.canvas = Canvas(width, height)

        self.apply_preset(preset_key)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def apply_preset(self, key):
        """Switch to a named preset, building a fresh engine."""
        preset = get_preset(key)
        if preset is None:
            raise ValueError(f"Unknown preset: {key!r}. Available: {PRESET_ORDER}")
        engine_name = preset["engine"]
        if engine_name not in ENGINE_CLASSES:
            raise ValueError(f"Unknown engine: {engine_name!r}. "
                             f"SketchSimulator supports: {list(ENGINE_CLASSES.keys())}")

        self.engine = ENGINE_CLASSES[engine_name](
            self.width, self.height, self.quality, **preset["options"])
        self.preset_key = key
        self.engine_name = engine_name
        self.canvas.clear()
        print(f"[sketch] preset {key} ({self.engine.engine_label}) "
              f"{self.width}x{self.height} {self.quality.value}")

    def set_pointer(self, x, y):
        """Record the latest normalized pointer position (no clamping)."""
        self.pointer = (x, y)

    def request_resize(self, width, height):
        """Schedule a canvas resize for the next frame boundary."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self._pending_size = (int(width), int(height))

    def set_quality(self, quality):
        """Schedule a quality switch (grids are re-sized) for the next frame."""
        quality = Quality(quality)
        if quality != self.quality:
            self._pending_quality = quality

    def set_runtime_params(self, **kwargs):
        """Forward option overrides to the engine.

        Structural options (grid size, resolution, trail count) take effect
        through a reinitialize at the next frame boundary.
        """
        self.engine.configure(**kwargs)
        if any(k in self.engine.structural_options for k in kwargs):
            self._pending_size = self._pending_size or (self.width, self.height)

    def reseed(self):
        """Rebuild the engine state at the current size on the next frame."""
        self._pending_size = self._pending_size or (self.width, self.height)

    def _apply_pending(self):
        size = self._pending_size
        quality = self._pending_quality
        if size is None and quality is None:
            return
        self._pending_size = None
        self._pending_quality = None
        if size is not None:
            self.width, self.height = size
        if quality is not None:
            self.quality = quality
        self.engine.reinitialize(self.width, self.height, self.quality)
        if (self.canvas.width, self.canvas.height) != (self.width, self.height):
            self.canvas.resize(self.width, self.height)
        else:
            self.canvas.clear()
        print(f"[sketch] reinitialized {self.engine_name} at "
              f"{self.width}x{self.height} {self.quality.value}")

    def step(self):
        """Run one frame: apply deferred resizes, then advance the engine.

        Returns:
            The engine's drawable state for this frame
        """
        self._apply_pending()
        if self.paused:
            return None
        self.frame += 1
        return self.engine.advance(self.pointer, self.quality)

    def render(self, bloom_sigma=2.0, bloom_intensity=0.35):
        """Advance one frame and return an (H, W, 3) uint8 RGB array.

        While paused the last composited frame is returned unchanged.
        """
        if self.step() is not None:
            self.canvas.draw_engine(self.engine)
        return self.canvas.to_rgb(bloom_sigma, bloom_intensity)

    def render_float(self, bloom_sigma=2.0, bloom_intensity=0.35):
        """Advance one frame and return an (H, W, 3) float32 array in [0, 1]."""
        if self.step() is not None:
            self.canvas.draw_engine(self.engine)
        return self.canvas.to_float(bloom_sigma=bloom_sigma, bloom_intensity=bloom_intensity)

    @property
    def stats(self):
        stats = dict(self.engine.stats)
        stats["preset"] = self.preset_key
        stats["host_frame"] = self.frame
        return stats
