"""
Wave Source Manager

Bounded FIFO of transient circular wave emitters feeding the
spring-wave grid. Sources are spawned by pointer movement (and
periodically in preview mode), age as a phase driver, decay
exponentially, and are dropped once too weak or once the FIFO is full.
"""

import math
import numpy as np

from .buffers import RingBuffer
from .engine_base import Quality, WaveSource

# Column layout of each ring row
X, Y, AGE, STRENGTH = range(4)


class WaveSourceManager:
    """Strict-FIFO wave emitter queue backed by a RingBuffer."""

    def __init__(self, max_sources=6, threshold=0.02, strength_gain=3.0,
                 ambient_interval=90, ambient_strength=0.4, epsilon=0.01,
                 seed=None):
        """
        Args:
            max_sources: FIFO capacity (oldest evicted first)
            threshold: Normalized pointer delta needed to spawn a source
            strength_gain: Pointer delta -> strength multiplier (clamped to 1)
            ambient_interval: Frames between ambient sources in preview mode
            ambient_strength: Strength of ambient sources
            epsilon: Sources weaker than this are dropped after ageing
            seed: Seed for ambient source placement
        """
        self._ring = RingBuffer(max_sources, 4)
        self.threshold = threshold
        self.strength_gain = strength_gain
        self.ambient_interval = ambient_interval
        self.ambient_strength = ambient_strength
        self.epsilon = epsilon
        self._rng = np.random.default_rng(seed)
        self.last_pointer = (0.5, 0.5)
        self.width = 1.0
        self.height = 1.0

    @property
    def max_sources(self):
        return self._ring.capacity

    def __len__(self):
        return len(self._ring)

    def set_capacity(self, max_sources):
        """Change FIFO capacity, keeping the newest sources."""
        self._ring.resize(int(max_sources))

    def reset(self, width, height, pointer=(0.5, 0.5)):
        """Drop all sources and bind to a new canvas size."""
        self._ring.clear()
        self.width = width
        self.height = height
        self.last_pointer = (pointer[0], pointer[1])

    def push(self, x, y, strength=1.0):
        """Add a source at canvas position (x, y). Evicts the oldest when full."""
        self._ring.push((x, y, 0.0, strength))

    def maybe_trigger(self, pointer, frame_index, quality=Quality.full):
        """Spawn sources from pointer movement and, in preview, on a timer.

        Args:
            pointer: Normalized (x, y) pointer position
            frame_index: Host frame counter (drives ambient spawning)
            quality: Quality flag; preview adds ambient sources

        Returns:
            Number of sources spawned this call
        """
        return (self.trigger_pointer(pointer)
                + self.trigger_ambient(frame_index, quality))

    def trigger_pointer(self, pointer):
        """Push a source at the pointer if it moved past the threshold."""
        px, py = pointer
        lx, ly = self.last_pointer
        delta = math.sqrt((px - lx) ** 2 + (py - ly) ** 2)
        if delta <= self.threshold:
            return 0
        strength = min(delta * self.strength_gain, 1.0)
        self.push(px * self.width, py * self.height, strength)
        self.last_pointer = (px, py)
        return 1

    def trigger_ambient(self, frame_index, quality=Quality.full):
        """In preview, push a source at a random spot every ambient_interval frames."""
        if (Quality(quality) != Quality.preview or self.ambient_interval <= 0
                or frame_index % self.ambient_interval != 0):
            return 0
        # Ambient sources stay inside the central 60% of the canvas
        x = self._rng.uniform(self.width * 0.2, self.width * 0.8)
        y = self._rng.uniform(self.height * 0.2, self.height * 0.8)
        self.push(x, y, self.ambient_strength)
        return 1

    def tick(self, wave_speed, wave_decay):
        """Age every source, decay its strength, drop the ones below epsilon."""
        if not len(self._ring):
            return
        slots = self._ring.slots()
        data = self._ring.data
        data[slots, AGE] += wave_speed
        data[slots, STRENGTH] *= wave_decay
        alive = data[slots, STRENGTH] >= self.epsilon
        if not alive.all():
            self._ring.keep(alive)

    def as_array(self):
        """Live sources as an (N, 4) array of x, y, age, strength (oldest first)."""
        return self._ring.ordered()

    def active_sources(self):
        """Live sources as WaveSource snapshots, oldest first."""
        return [WaveSource(float(r[X]), float(r[Y]), float(r[AGE]), float(r[STRENGTH]))
                for r in self._ring.ordered()]
