"""
Topology - Scalar Field Iso-Contours

A height field built from multi-octave value noise drifting in time,
plus a gaussian hill under the pointer, is re-sampled every frame and
cut into evenly spaced iso-levels with marching squares.

Marching squares classifies each cell's corners against the level into
a 4-bit code (tl=8, tr=4, br=2, bl=1). Codes 0 and 15 emit nothing,
codes 5 and 10 are saddles, all others emit one segment between two
linearly interpolated edge crossings.

Saddles are resolved by the average of the four corners: if it is at
or above the level the high corners are treated as joined through the
cell centre. This is the plain centre-average rule, not the asymptotic
decider, and the segment layout below depends on it.
"""

import math
import numpy as np

from .engine_base import SketchEngine, Quality
from .noise import ValueNoise
from .presets import quality_defaults

# Edge identifiers
TOP, RIGHT, BOTTOM, LEFT = range(4)

INTERP_EPSILON = 1e-4
FLAT_EPSILON = 1e-12
BORDER_MARGIN = 20.0

# code -> edge pairs joined by a segment
SEGMENT_TABLE = {
    1: ((LEFT, BOTTOM),),
    14: ((LEFT, BOTTOM),),
    2: ((BOTTOM, RIGHT),),
    13: ((BOTTOM, RIGHT),),
    3: ((LEFT, RIGHT),),
    12: ((LEFT, RIGHT),),
    4: ((TOP, RIGHT),),
    11: ((TOP, RIGHT),),
    6: ((TOP, BOTTOM),),
    9: ((TOP, BOTTOM),),
    7: ((LEFT, TOP),),
    8: ((LEFT, TOP),),
}

# saddle code -> (pairs when centre >= level, pairs when centre < level)
SADDLE_TABLE = {
    5: (((LEFT, TOP), (BOTTOM, RIGHT)), ((LEFT, BOTTOM), (TOP, RIGHT))),
    10: (((TOP, RIGHT), (LEFT, BOTTOM)), ((LEFT, TOP), (BOTTOM, RIGHT))),
}


def interpolate(v1, v2, level, eps=INTERP_EPSILON):
    """Fraction along v1->v2 where the level is crossed (0.5 if |v2-v1| < eps)."""
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)
    diff = v2 - v1
    flat = np.abs(diff) < eps
    safe = np.where(flat, 1.0, diff)
    return np.where(flat, 0.5, (level - v1) / safe)


def _corners(field):
    return field[:-1, :-1], field[:-1, 1:], field[1:, 1:], field[1:, :-1]


def cell_codes(field, level):
    """4-bit marching-squares code per cell, shape (rows-1, cols-1)."""
    above = np.asarray(field) >= level
    tl, tr, br, bl = _corners(above)
    return ((tl.astype(np.uint8) << 3) | (tr.astype(np.uint8) << 2)
            | (br.astype(np.uint8) << 1) | bl.astype(np.uint8))


def edge_points(field, level, cell_size=1.0):
    """Interpolated crossing point on every cell edge, shape (4, rows-1, cols-1, 2).

    Shared edges of neighbouring cells evaluate to identical coordinates.
    """
    rows, cols = field.shape
    xs = np.arange(cols) * cell_size
    ys = np.arange(rows) * cell_size
    tl, tr, br, bl = _corners(field)
    x0 = np.broadcast_to(xs[None, :-1], tl.shape)
    x1 = np.broadcast_to(xs[None, 1:], tl.shape)
    y0 = np.broadcast_to(ys[:-1, None], tl.shape)
    y1 = np.broadcast_to(ys[1:, None], tl.shape)

    pts = np.empty((4,) + tl.shape + (2,))
    pts[TOP, ..., 0] = x0 + interpolate(tl, tr, level) * cell_size
    pts[TOP, ..., 1] = y0
    pts[RIGHT, ..., 0] = x1
    pts[RIGHT, ..., 1] = y0 + interpolate(tr, br, level) * cell_size
    pts[BOTTOM, ..., 0] = x0 + interpolate(bl, br, level) * cell_size
    pts[BOTTOM, ..., 1] = y1
    pts[LEFT, ..., 0] = x0
    pts[LEFT, ..., 1] = y0 + interpolate(tl, bl, level) * cell_size
    return pts


def marching_squares(field, level, cell_size=1.0):
    """Iso-contour segments of one level as an (N, 4) array of x1, y1, x2, y2."""
    field = np.asarray(field, dtype=np.float64)
    if field.ndim != 2 or field.shape[0] < 2 or field.shape[1] < 2:
        return np.empty((0, 4))
    codes = cell_codes(field, level)
    if not ((codes != 0) & (codes != 15)).any():
        return np.empty((0, 4))

    pts = edge_points(field, level, cell_size)
    chunks = []

    def emit(mask, pairs):
        if not mask.any():
            return
        for a, b in pairs:
            chunks.append(np.concatenate([pts[a][mask], pts[b][mask]], axis=-1))

    for code, pairs in SEGMENT_TABLE.items():
        emit(codes == code, pairs)

    tl, tr, br, bl = _corners(field)
    centre_high = (tl + tr + br + bl) / 4.0 >= level
    for code, (high_pairs, low_pairs) in SADDLE_TABLE.items():
        is_code = codes == code
        emit(is_code & centre_high, high_pairs)
        emit(is_code & ~centre_high, low_pairs)

    if not chunks:
        return np.empty((0, 4))
    return np.concatenate(chunks)


def contour_levels(field, count):
    """Evenly spaced iso-levels spanning the field's min..max.

    A flat (or non-finite) field yields no levels. A single level sits
    halfway between min and max.
    """
    field = np.asarray(field, dtype=np.float64)
    if count < 1 or field.size == 0:
        return np.empty(0)
    lo = float(field.min())
    hi = float(field.max())
    if not (math.isfinite(lo) and math.isfinite(hi)) or hi - lo < FLAT_EPSILON:
        return np.empty(0)
    if count == 1:
        return np.array([(lo + hi) / 2.0])
    return np.linspace(lo, hi, count)


def extract_contours(field, level_count, cell_size=1.0):
    """Segments for each of level_count levels: list of (N, 4) arrays.

    Degenerate fields produce an empty list.
    """
    return [marching_squares(field, level, cell_size)
            for level in contour_levels(field, level_count)]


def local_maxima(field, stride=3, margin=2):
    """Sparse peak markers: (row, col) samples strictly above all 4 neighbours."""
    field = np.asarray(field)
    rows, cols = field.shape
    ii = np.arange(margin, rows - margin, stride)
    jj = np.arange(margin, cols - margin, stride)
    if len(ii) == 0 or len(jj) == 0:
        return np.empty((0, 2), dtype=np.intp)
    h = field[np.ix_(ii, jj)]
    peak = ((h > field[np.ix_(ii - 1, jj)]) & (h > field[np.ix_(ii + 1, jj)])
            & (h > field[np.ix_(ii, jj - 1)]) & (h > field[np.ix_(ii, jj + 1)]))
    pi, pj = np.nonzero(peak)
    return np.stack([ii[pi], jj[pj]], axis=-1)


class ContourField(SketchEngine):

    engine_name = "topology"
    engine_label = "Topology"
    structural_options = ("resolution", "seed")

    def __init__(self, width=800, height=600, quality=Quality.full, **options):
        self.field = None
        self.time = 0.0
        self.levels = np.empty(0)
        self.contours = []
        self.resolution = 1
        self._noise = None
        super().__init__(width, height, quality, **options)

    @classmethod
    def default_options(cls, quality):
        return quality_defaults(cls.engine_name, quality)

    def reinitialize(self, width, height, quality=Quality.full):
        """Size the field grid for the canvas: ceil(size / resolution) + 1 samples."""
        self._check_size(width, height)
        self.quality = Quality(quality)
        s = self.settings()
        self.resolution = s["resolution"]
        cols = int(math.ceil(width / self.resolution)) + 1
        rows = int(math.ceil(height / self.resolution)) + 1
        self._xs = np.arange(cols) * self.resolution
        self._ys = np.arange(rows) * self.resolution
        self.field = np.zeros((rows, cols), dtype=np.float64)
        self._noise = ValueNoise(s["seed"])
        self.time = 0.0
        self.frame = 0
        self.levels = np.empty(0)
        self.contours = []
        return self.field

    def rebuild_field(self, time, pointer, quality=None):
        """Recompute every sample: noise octaves at (x, y, time) plus the pointer hill."""
        s = self.settings(quality)
        scale = s["noise_scale"]
        xs = self._xs[None, :]
        ys = self._ys[:, None]
        height = self._noise.fractal(xs * scale, ys * scale, time, int(s["octaves"]))

        mx, my = self.pointer_world(pointer)
        dist_sq = (xs - mx) ** 2 + (ys - my) ** 2
        height = height + s["pointer_amplitude"] * np.exp(-dist_sq / s["pointer_spread"])
        self.field[:] = height
        return self.field

    def extract_contours(self, field=None, level_count=None):
        """Marching-squares segments per level for field (default: current field)."""
        field = self.field if field is None else field
        if level_count is None:
            level_count = int(self.settings()["contour_levels"])
        self.levels = contour_levels(field, level_count)
        self.contours = [marching_squares(field, level, self.resolution)
                         for level in self.levels]
        return self.contours

    def advance(self, pointer, quality=None):
        """Step time, rebuild the field, return this frame's segments per level."""
        q = Quality(quality) if quality is not None else self.quality
        s = self.settings(q)
        self.frame += 1
        self.time += s["time_speed"]
        self.rebuild_field(self.time, pointer, q)
        return self.extract_contours(self.field, int(s["contour_levels"]))

    # -----------------------------------------------------------------------
    # Drawables
    # -----------------------------------------------------------------------

    def line_layers(self):
        s = self.settings()
        n_levels = max(1, len(self.levels))
        interval = max(1, int(s["major_line_interval"]))
        layers = []
        for idx, segs in enumerate(self.contours):
            if not len(segs):
                continue
            major = idx % interval == 0
            alpha = s["line_alpha"] * (1.5 if major else 0.8)
            alpha *= 0.5 + (idx / n_levels) * 0.5
            layers.append((segs, np.full(len(segs), alpha * 255.0), 1.2 if major else 0.6))

        m = BORDER_MARGIN
        w, h = self.width - m, self.height - m
        border = np.array([[m, m, w, m], [w, m, w, h], [w, h, m, h], [m, h, m, m]])
        layers.append((border, np.full(4, 10.0), 1.0))
        return layers

    def point_layers(self):
        if self.field is None or self.frame == 0:
            return []
        peaks = local_maxima(self.field)
        if not len(peaks):
            return []
        lo = float(self.field.min())
        span = float(self.field.max()) - lo
        heights = self.field[peaks[:, 0], peaks[:, 1]]
        elevation = (heights - lo) / span if span > FLAT_EPSILON else np.zeros(len(peaks))
        pts = peaks[:, ::-1] * float(self.resolution)
        return [(pts, elevation * 30.0, 1.5)]

    @property
    def stats(self):
        stats = super().stats
        stats.update({
            "field": tuple(self.field.shape),
            "levels": len(self.levels),
            "segments": int(sum(len(c) for c in self.contours)),
            "time": self.time,
        })
        return stats

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "contour_levels", "label": "Levels", "section": "CONTOURS",
             "min": 2, "max": 40, "default": 20, "fmt": ".0f", "step": 1},
            {"key": "noise_scale", "label": "Noise scale", "section": "TERRAIN",
             "min": 0.002, "max": 0.03, "default": 0.008, "fmt": ".4f"},
            {"key": "time_speed", "label": "Drift", "section": "TERRAIN",
             "min": 0.0, "max": 0.02, "default": 0.004, "fmt": ".4f"},
            {"key": "pointer_amplitude", "label": "Hill", "section": "TERRAIN",
             "min": 0.0, "max": 1.0, "default": 0.4, "fmt": ".2f"},
        ]
