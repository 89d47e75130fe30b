"""
Resonance - Spring-Wave Grid Engine

A 2D lattice of mass points tied to their rest positions by springs.
Each tick the grid is pushed by:
- Interfering circular waves from a bounded FIFO of decaying sources
- Springs pulling every node back to its origin
- 4-neighbour coupling on relative displacement (structural propagation)
- Soft repulsion away from the pointer

then damped and integrated with semi-implicit Euler (velocity first,
position from the updated velocity).

All per-node work is vectorised over (rows, cols) numpy arrays.
"""

import numpy as np

from .engine_base import SketchEngine, Quality, Node
from .presets import quality_defaults
from .waves import WaveSourceManager, X, Y, AGE, STRENGTH

EPSILON = 1e-6
RING_SEGMENTS = 48


class NodeGrid:
    """Structure-of-arrays node storage, rows x cols.

    origin/position/velocity are (rows, cols, 2) arrays of (x, y);
    phase is (rows, cols) and holds the last computed wave displacement.
    """

    def __init__(self, width, height, rows, cols):
        self.rows = rows
        self.cols = cols
        spacing_x = width / (cols + 1)
        spacing_y = height / (rows + 1)
        xs = spacing_x * np.arange(1, cols + 1)
        ys = spacing_y * np.arange(1, rows + 1)
        gx, gy = np.meshgrid(xs, ys)
        self.origin = np.stack([gx, gy], axis=-1)
        self.position = self.origin.copy()
        self.velocity = np.zeros_like(self.origin)
        self.phase = np.zeros((rows, cols), dtype=np.float64)

    @property
    def shape(self):
        return (self.rows, self.cols)

    def __len__(self):
        return self.rows * self.cols

    def displacement(self):
        return self.position - self.origin

    def node(self, i, j):
        """Snapshot of the node at row i, column j."""
        return Node(
            origin=tuple(self.origin[i, j].tolist()),
            position=tuple(self.position[i, j].tolist()),
            velocity=tuple(self.velocity[i, j].tolist()),
            phase=float(self.phase[i, j]),
        )

    def nodes(self):
        """All nodes as a row-major list of lists of snapshots."""
        return [[self.node(i, j) for j in range(self.cols)] for i in range(self.rows)]


class SpringWaveGrid(SketchEngine):

    engine_name = "resonance"
    engine_label = "Resonance"
    structural_options = ("cols", "rows")

    def __init__(self, width=800, height=600, quality=Quality.full, **options):
        self.grid = None
        self.waves = WaveSourceManager()
        super().__init__(width, height, quality, **options)

    @classmethod
    def default_options(cls, quality):
        return quality_defaults(cls.engine_name, quality)

    def reinitialize(self, width, height, quality=Quality.full):
        """Rebuild an evenly spaced grid at rest and restart the wave queue."""
        self._check_size(width, height)
        self.quality = Quality(quality)
        s = self.settings()
        self.grid = NodeGrid(width, height, int(s["rows"]), int(s["cols"]))
        self.waves = WaveSourceManager(
            max_sources=int(s["max_wave_sources"]),
            threshold=s["trigger_threshold"],
            ambient_interval=int(s["ambient_interval"]),
            ambient_strength=s["ambient_strength"],
            seed=s["seed"],
        )
        self.waves.reset(width, height)
        self.frame = 0
        if s["seed_sources"]:
            self.waves.push(width * 0.3, height * 0.3, 0.5)
            self.waves.push(width * 0.7, height * 0.7, 0.5)
        return self.grid

    # -----------------------------------------------------------------------
    # Per-frame update
    # -----------------------------------------------------------------------

    def advance(self, pointer, quality=None):
        """Advance one tick. Mutates and returns the NodeGrid."""
        q = Quality(quality) if quality is not None else self.quality
        s = self.settings(q)
        self.frame += 1

        waves = self.waves
        waves.set_capacity(int(s["max_wave_sources"]))
        waves.threshold = s["trigger_threshold"]
        waves.ambient_interval = int(s["ambient_interval"])
        waves.ambient_strength = s["ambient_strength"]
        # Pointer sources age with the rest this tick; ambient ones start at age 0
        waves.trigger_pointer(pointer)
        waves.tick(s["wave_speed"], s["wave_decay"])
        waves.trigger_ambient(self.frame, q)

        g = self.grid
        wave_z = self.wave_field(waves.as_array(), s)
        g.phase[:] = wave_z

        vel = g.velocity
        disp = g.displacement()
        vel[..., 1] += wave_z * s["wave_gain"]
        vel -= disp * s["spring_strength"]
        vel += self._coupling(disp) * s["coupling"]
        vel += self._repulsion(pointer, s)

        vel *= s["damping"]
        g.position += vel
        return g

    def wave_field(self, sources, s):
        """Sum of decaying circular waves at every node origin, (rows, cols)."""
        g = self.grid
        if len(sources) == 0:
            return np.zeros(g.shape)
        dx = g.origin[..., 0, None] - sources[:, X]
        dy = g.origin[..., 1, None] - sources[:, Y]
        dist = np.sqrt(dx * dx + dy * dy)
        amplitude = sources[:, STRENGTH] * np.exp(-dist * s["wave_falloff"]) * s["wave_amplitude"]
        return (np.sin(dist * s["wave_frequency"] - sources[:, AGE]) * amplitude).sum(axis=-1)

    @staticmethod
    def _coupling(disp):
        """Neighbour pull on relative displacement; edges omit missing neighbours.

        Vertical neighbours act on y, horizontal neighbours act on x.

        Every node reads the same pre-tick displacement snapshot. A
        sequential in-place sweep would instead see already-updated
        neighbours above and to the left; this update does not depend
        on visiting order.
        """
        out = np.zeros_like(disp)
        dy = disp[..., 1]
        dx = disp[..., 0]
        out[1:, :, 1] += dy[:-1] - dy[1:]
        out[:-1, :, 1] += dy[1:] - dy[:-1]
        out[:, 1:, 0] += dx[:, :-1] - dx[:, 1:]
        out[:, :-1, 0] += dx[:, 1:] - dx[:, :-1]
        return out

    def _repulsion(self, pointer, s):
        """Push nodes inside the repulsion radius away from the pointer."""
        g = self.grid
        mx, my = self.pointer_world(pointer)
        sep = g.position - np.array([mx, my])
        dist = np.sqrt((sep * sep).sum(axis=-1))
        near = (dist < s["repulsion_radius"]) & (dist > EPSILON)
        scale = np.zeros_like(dist)
        k = s["repulsion_softening"]
        d = dist[near]
        scale[near] = k / (d * d + k) / d
        return sep * scale[..., None]

    # -----------------------------------------------------------------------
    # Drawables
    # -----------------------------------------------------------------------

    def edges(self):
        """Edge primitives for the current state.

        Returns list of (kind, segments (N, 4), weight (N,), alpha (N,))
        for "horizontal", "vertical" and (optionally) "diagonal" pairs.
        """
        g = self.grid
        s = self.settings()
        base = s["connection_alpha"]
        pos = g.position
        org = g.origin
        abs_phase = np.abs(g.phase)
        disp = np.sqrt((g.displacement() ** 2).sum(axis=-1))
        out = []

        for kind, a, b, axis in (
            ("horizontal", np.s_[:, :-1], np.s_[:, 1:], 0),
            ("vertical", np.s_[:-1, :], np.s_[1:, :], 1),
        ):
            avg_phase = (abs_phase[a] + abs_phase[b]) / 2
            stretch = np.abs(pos[a][..., axis] - pos[b][..., axis]
                             - (org[a][..., axis] - org[b][..., axis]))
            weight = np.minimum(0.5 + stretch * 0.1 + avg_phase * 0.02, 2.0)
            alpha = np.minimum(base + disp[a] * 0.8 + avg_phase * 0.5, 80.0)
            segs = np.concatenate([pos[a], pos[b]], axis=-1).reshape(-1, 4)
            out.append((kind, segs, weight.ravel(), alpha.ravel()))

        if s["diagonals"]:
            a, b = np.s_[:-1, :-1], np.s_[1:, 1:]
            alpha = np.minimum(base * 0.3 + abs_phase[a] * 0.5 * 0.3, 30.0)
            segs = np.concatenate([pos[a], pos[b]], axis=-1).reshape(-1, 4)
            out.append(("diagonal", segs, np.full(len(segs), 0.3), alpha.ravel()))
        return out

    def line_layers(self):
        layers = [(segs, alpha, weight) for _, segs, weight, alpha in self.edges()]

        # Expanding rings marking each live source
        sources = self.waves.as_array()
        if len(sources):
            theta = np.linspace(0.0, 2.0 * np.pi, RING_SEGMENTS + 1)
            radius = sources[:, AGE, None] * 7.5
            xs = sources[:, X, None] + radius * np.cos(theta)
            ys = sources[:, Y, None] + radius * np.sin(theta)
            segs = np.stack([xs[:, :-1], ys[:, :-1], xs[:, 1:], ys[:, 1:]], axis=-1)
            alpha = np.repeat(sources[:, STRENGTH] * 30.0, RING_SEGMENTS)
            layers.append((segs.reshape(-1, 4), alpha, 1.0))
        return layers

    def point_layers(self):
        g = self.grid
        pts = g.position.reshape(-1, 2)
        speed = np.sqrt((g.velocity ** 2).sum(axis=-1)).ravel()
        abs_phase = np.abs(g.phase).ravel()
        alpha = 30.0 + speed * 15.0 + abs_phase * 2.0
        glow = abs_phase > 3.0
        return [
            (pts[glow], np.minimum(alpha[glow] * 0.3, 40.0), 3.0),
            (pts, np.minimum(alpha, 120.0), 1.25),
        ]

    @property
    def stats(self):
        stats = super().stats
        disp = np.sqrt((self.grid.displacement() ** 2).sum(axis=-1))
        stats.update({
            "nodes": len(self.grid),
            "sources": len(self.waves),
            "mean_displacement": float(disp.mean()),
            "max_phase": float(np.abs(self.grid.phase).max()),
        })
        return stats

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "spring_strength", "label": "Spring", "section": "SPRINGS",
             "min": 0.005, "max": 0.08, "default": 0.025, "fmt": ".3f"},
            {"key": "damping", "label": "Damping", "section": "SPRINGS",
             "min": 0.80, "max": 0.99, "default": 0.94, "fmt": ".3f"},
            {"key": "wave_speed", "label": "Wave speed", "section": "WAVES",
             "min": 0.02, "max": 0.40, "default": 0.1, "fmt": ".2f"},
            {"key": "wave_decay", "label": "Wave decay", "section": "WAVES",
             "min": 0.95, "max": 0.999, "default": 0.985, "fmt": ".3f"},
            {"key": "max_wave_sources", "label": "Sources", "section": "WAVES",
             "min": 1, "max": 12, "default": 6, "fmt": ".0f", "step": 1},
        ]
