"""
Attractor - Strange Attractor Integrator

Several trajectories of a chaotic 3-variable ODE (Lorenz or Rossler)
are advanced with classical 4th-order Runge-Kutta at a fixed step dt.
Each rendered frame takes a fixed number of sub-steps (a quality-mode
constant, never derived from wall-clock time), and every sub-step is
appended to a bounded ring-buffer trail per trajectory.

Trails are viewed through a pointer-driven rotation (yaw about Z, then
pitch about X) that eases toward its target every frame, followed by a
simple perspective divide.

Integration is deterministic: identical seeds, parameters, dt and step
counts give bit-identical trails.
"""

import math
import numpy as np

from .buffers import RingBuffer
from .engine_base import SketchEngine, Quality
from .presets import quality_defaults
from .smoothing import SmoothedParameter

AXIS_LENGTH = 20.0


def lorenz(state, sigma=10.0, rho=28.0, beta=8.0 / 3.0):
    """Lorenz right-hand side for (..., 3) states."""
    x, y, z = state[..., 0], state[..., 1], state[..., 2]
    return np.stack([sigma * (y - x), x * (rho - z) - y, x * y - beta * z], axis=-1)


def rossler(state, a=0.2, b=0.2, c=5.7):
    """Rossler right-hand side for (..., 3) states."""
    x, y, z = state[..., 0], state[..., 1], state[..., 2]
    return np.stack([-y - z, x + a * y, b + z * (x - c)], axis=-1)


SYSTEMS = {
    "lorenz": lorenz,
    "rossler": rossler,
}


def rk4_step(f, state, dt):
    """One classical Runge-Kutta step of size dt."""
    k1 = f(state)
    k2 = f(state + k1 * (dt * 0.5))
    k3 = f(state + k2 * (dt * 0.5))
    k4 = f(state + k3 * dt)
    return state + (k1 + 2.0 * k2 + 2.0 * k3 + k4) * (dt / 6.0)


def rotate(states, pitch, yaw):
    """Rotate (N, 3) states about Z by yaw, then about X by pitch."""
    states = np.asarray(states, dtype=np.float64).reshape(-1, 3)
    x, y, z = states[:, 0], states[:, 1], states[:, 2]
    cz, sz = math.cos(yaw), math.sin(yaw)
    x, y = x * cz - y * sz, x * sz + y * cz
    cx, sx = math.cos(pitch), math.sin(pitch)
    y, z = y * cx - z * sx, y * sx + z * cx
    return np.stack([x, y, z], axis=-1)


def project(states, pitch, yaw, center, render_scale=8.0, fov=300.0, z_scale=0.5):
    """Rotate and perspective-project states to screen space.

    Returns (N, 3) array of screen x, screen y and depth, where
    depth = fov / (fov + z * z_scale) is the perspective factor.
    """
    r = rotate(states, pitch, yaw)
    depth = fov / (fov + r[:, 2] * z_scale)
    sx = center[0] + r[:, 0] * render_scale * depth
    sy = center[1] + r[:, 1] * render_scale * depth
    return np.stack([sx, sy, depth], axis=-1)


def _remap(v, a0, a1, b0, b1):
    return b0 + (v - a0) * (b1 - b0) / (a1 - a0)


class AttractorIntegrator(SketchEngine):

    engine_name = "attractor"
    engine_label = "Strange Attractor"
    structural_options = ("trail_count",)

    def __init__(self, width=800, height=600, quality=Quality.full, **options):
        self.trails = []
        self._state = np.zeros((0, 3))
        self.yaw = SmoothedParameter(0.0)
        self.pitch = SmoothedParameter(0.0)
        super().__init__(width, height, quality, **options)

    @classmethod
    def default_options(cls, quality):
        return quality_defaults(cls.engine_name, quality)

    def configure(self, **options):
        system = options.get("system")
        if system is not None and system not in SYSTEMS:
            raise ValueError(f"Unknown ODE system: {system!r}. "
                             f"Supported: {list(SYSTEMS.keys())}")
        super().configure(**options)

    @property
    def persistence(self):
        return 1.0 - self.settings()["fade"]

    def reinitialize(self, width, height, quality=Quality.full):
        """Reset trails to their seeds and the view to its rest angles."""
        self._check_size(width, height)
        self.quality = Quality(quality)
        s = self.settings()
        self.yaw.snap(0.0)
        self.pitch.snap(0.0)
        self.frame = 0
        return self.initialize(int(s["trail_count"]))

    def initialize(self, trail_count, seed_offsets=None):
        """Seed trail_count trajectories.

        Trajectory i starts at (0.1 + o, 0.1 + 0.3 o, 0.1 + 0.7 o) with
        o = seed_offsets[i] (default: i * seed_spacing).

        Returns:
            List of RingBuffer trails, each holding its seed point
        """
        s = self.settings()
        if seed_offsets is None:
            seed_offsets = [i * s["seed_spacing"] for i in range(trail_count)]
        if len(seed_offsets) != trail_count:
            raise ValueError(f"Expected {trail_count} seed offsets, got {len(seed_offsets)}")
        o = np.asarray(seed_offsets, dtype=np.float64)
        self._state = np.stack([0.1 + o, 0.1 + o * 0.3, 0.1 + o * 0.7], axis=-1).reshape(-1, 3)
        capacity = int(s["max_trail_length"])
        self.trails = []
        for row in self._state:
            trail = RingBuffer(capacity, 3)
            trail.push(row)
            self.trails.append(trail)
        return self.trails

    def integrate(self, steps, settings=None):
        """Take `steps` RK4 sub-steps on every trajectory, recording each one."""
        s = settings if settings is not None else self.settings()
        f = SYSTEMS[s["system"]]
        dt = s["dt"]
        for _ in range(int(steps)):
            self._state = rk4_step(f, self._state, dt)
            for trail, row in zip(self.trails, self._state):
                trail.push(row)
        return self.trails

    @staticmethod
    def view_targets(pointer):
        """(pitch, yaw) the view eases toward for a normalized pointer."""
        px, py = pointer
        return (py - 0.5) * math.pi * 0.5 + math.pi * 0.1, (px - 0.5) * math.pi * 0.8

    def aim(self, pointer, settings=None):
        """Ease the view angles one frame toward the pointer-derived targets."""
        s = settings if settings is not None else self.settings()
        pitch, yaw = self.view_targets(pointer)
        self.yaw.set_target(yaw)
        self.pitch.set_target(pitch)
        self.yaw.update(s["smoothing"])
        self.pitch.update(s["smoothing"])

    def advance(self, pointer, quality=None, steps_per_frame=None):
        """Ease the view, integrate one frame of sub-steps, return the trails."""
        q = Quality(quality) if quality is not None else self.quality
        s = self.settings(q)
        self.frame += 1
        capacity = int(s["max_trail_length"])
        for trail in self.trails:
            trail.resize(capacity)
        self.aim(pointer, s)
        steps = s["steps_per_frame"] if steps_per_frame is None else steps_per_frame
        return self.integrate(steps, s)

    def project(self, states, pitch=None, yaw=None, pointer=None):
        """Project states with the given angles (default: current eased view).

        If pointer is given, unspecified angles are the current view eased
        one frame toward it. The stored view is left untouched; only
        advance() moves it.
        """
        s = self.settings()
        cur_pitch = self.pitch.get_value()
        cur_yaw = self.yaw.get_value()
        if pointer is not None:
            target_pitch, target_yaw = self.view_targets(pointer)
            cur_pitch += (target_pitch - cur_pitch) * s["smoothing"]
            cur_yaw += (target_yaw - cur_yaw) * s["smoothing"]
        pitch = cur_pitch if pitch is None else pitch
        yaw = cur_yaw if yaw is None else yaw
        return project(states, pitch, yaw, (self.width / 2.0, self.height / 2.0),
                       s["render_scale"], s["fov"], s["z_scale"])

    def polylines(self):
        """Projected (N, 3) screen-space polyline per trail, oldest point first."""
        return [self.project(trail.ordered()) for trail in self.trails]

    # -----------------------------------------------------------------------
    # Drawables
    # -----------------------------------------------------------------------

    def _rotated_z(self, states):
        return rotate(states, self.pitch.get_value(), self.yaw.get_value())[:, 2]

    def line_layers(self):
        layers = []
        for trail in self.trails:
            pts = trail.ordered()
            n = len(pts)
            if n < 2:
                continue
            proj = self.project(pts)
            z = self._rotated_z(pts)
            segs = np.concatenate([proj[:-1, :2], proj[1:, :2]], axis=-1)
            age_fade = np.sqrt(np.arange(1, n) / n)
            avg_z = (z[:-1] + z[1:]) / 2
            depth_fade = _remap(avg_z, -30.0, 50.0, 1.2, 0.4)
            alpha = np.clip(age_fade * depth_fade * 0.6 * 255.0, 0.0, 255.0)
            weight = np.maximum(0.3, _remap(avg_z, -30.0, 50.0, 2.0, 0.5))
            layers.append((segs, alpha, weight))

        # Faint coordinate axes through the origin
        axes = self.project(np.array([
            [0.0, 0.0, 0.0],
            [AXIS_LENGTH, 0.0, 0.0],
            [0.0, AXIS_LENGTH, 0.0],
            [0.0, 0.0, AXIS_LENGTH],
        ]))
        origin = axes[0, :2]
        segs = np.array([np.concatenate([origin, end[:2]]) for end in axes[1:]])
        layers.append((segs, np.full(3, 15.0), 0.5))
        return layers

    def point_layers(self):
        if not self.trails:
            return []
        heads = np.array([trail.newest() for trail in self.trails])
        proj = self.project(heads)[:, :2]
        n = len(proj)
        return [
            (proj, np.full(n, 20.0), 4.0),
            (proj, np.full(n, 60.0), 2.0),
            (proj, np.full(n, 150.0), 1.0),
        ]

    @property
    def stats(self):
        stats = super().stats
        stats.update({
            "system": self.settings()["system"],
            "trails": len(self.trails),
            "points": sum(len(t) for t in self.trails),
            "yaw": self.yaw.get_value(),
            "pitch": self.pitch.get_value(),
        })
        return stats

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "steps_per_frame", "label": "Sub-steps", "section": "INTEGRATION",
             "min": 1, "max": 20, "default": 5, "fmt": ".0f", "step": 1},
            {"key": "dt", "label": "Step size", "section": "INTEGRATION",
             "min": 0.001, "max": 0.02, "default": 0.005, "fmt": ".4f"},
            {"key": "max_trail_length", "label": "Trail length", "section": "TRAILS",
             "min": 50, "max": 2000, "default": 800, "fmt": ".0f", "step": 50},
            {"key": "render_scale", "label": "Scale", "section": "VIEW",
             "min": 2.0, "max": 20.0, "default": 8.0, "fmt": ".1f"},
        ]
