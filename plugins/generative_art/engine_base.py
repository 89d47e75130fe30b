"""
Abstract Base Class for Generative Sketch Engines

All sketch engines (spring-wave grid, strange attractor, contour field)
implement this interface so the simulator and viewer can drive any of
them interchangeably from a single per-frame callback.

An engine never schedules itself. The host calls reinitialize() on
startup/resize and advance() once per rendered frame.
"""

import enum
from abc import ABC, abstractmethod


class Quality(str, enum.Enum):
    """Discrete quality flag supplied by the frame driver."""
    preview = "preview"
    full = "full"


class Node:
    """Read-only snapshot of one spring-grid mass point."""

    __slots__ = ("origin", "position", "velocity", "phase")

    def __init__(self, origin, position, velocity, phase):
        self.origin = origin
        self.position = position
        self.velocity = velocity
        self.phase = phase

    def __repr__(self):
        return (f"Node(origin={self.origin}, position={self.position}, "
                f"velocity={self.velocity}, phase={self.phase:.4f})")


class WaveSource:
    """Read-only snapshot of one transient wave emitter."""

    __slots__ = ("x", "y", "age", "strength")

    def __init__(self, x, y, age, strength):
        self.x = x
        self.y = y
        self.age = age
        self.strength = strength

    @property
    def position(self):
        return (self.x, self.y)

    def __repr__(self):
        return (f"WaveSource(x={self.x:.1f}, y={self.y:.1f}, "
                f"age={self.age:.3f}, strength={self.strength:.4f})")


class SketchEngine(ABC):
    """Base class for per-frame generative sketch engines."""

    engine_name = ""   # e.g. "resonance", "attractor"
    engine_label = ""  # e.g. "Resonance", "Strange Attractor"

    # Options that size grids/containers; only read at reinitialize()
    structural_options = ()

    def __init__(self, width=800, height=600, quality=Quality.full, **options):
        self.width = 0
        self.height = 0
        self.quality = Quality(quality)
        self.frame = 0
        self._overrides = {}
        self.configure(**options)
        self.reinitialize(width, height, quality)

    # -----------------------------------------------------------------------
    # Configuration
    # -----------------------------------------------------------------------

    @classmethod
    @abstractmethod
    def default_options(cls, quality):
        """Return the default option dict for a quality mode."""

    def configure(self, **options):
        """Override named options. Unknown names raise ValueError."""
        known = self.default_options(Quality.full)
        for key, val in options.items():
            if key not in known:
                raise ValueError(
                    f"Unknown option {key!r} for {self.engine_name}. "
                    f"Supported: {sorted(known)}")
            self._overrides[key] = val

    def settings(self, quality=None):
        """Snapshot of the effective options for a quality mode (by value)."""
        q = Quality(quality) if quality is not None else self.quality
        merged = dict(self.default_options(q))
        merged.update(self._overrides)
        return merged

    def get_params(self):
        """Return dict of current effective parameter values."""
        return self.settings()

    def set_params(self, **params):
        """Alias of configure() kept for host code symmetry."""
        self.configure(**params)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def _check_size(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    @abstractmethod
    def reinitialize(self, width, height, quality=Quality.full):
        """Rebuild all size-dependent state for a new canvas size."""

    @abstractmethod
    def advance(self, pointer, quality=None):
        """Advance one frame. Returns this frame's drawable state."""

    def pointer_world(self, pointer):
        """Map a normalized pointer (x, y) to canvas coordinates (no clamping)."""
        return pointer[0] * self.width, pointer[1] * self.height

    # -----------------------------------------------------------------------
    # Drawables (consumed by render.Canvas)
    # -----------------------------------------------------------------------

    @abstractmethod
    def line_layers(self):
        """Return list of (segments (N, 4), alpha (N,) in 0-255, width)."""

    def point_layers(self):
        """Return list of (points (N, 2), alpha (N,) in 0-255, radius)."""
        return []

    # Fraction of the previous frame kept when the host composites frames.
    # 0.0 means the canvas is cleared every frame.
    persistence = 0.0

    @property
    def stats(self):
        """Return current engine statistics."""
        return {"frame": self.frame, "width": self.width, "height": self.height,
                "quality": self.quality.value}

    @classmethod
    @abstractmethod
    def get_slider_defs(cls):
        """Return list of slider definitions for host UIs.

        Each entry is a dict:
            {"key": "damping", "label": "Damping", "section": "SPRINGS",
             "min": 0.80, "max": 0.99, "default": 0.94, "fmt": ".3f"}
        """
