"""
Monochrome Raster Pipeline for Generative Sketches

Turns engine drawables (line segments and points with 0-255 alpha) into
an RGB frame: white strokes accumulated on a near-black background,
with optional frame persistence (trail ghosting) and a soft gaussian
bloom.

Strokes are splatted rather than scan-converted: each segment is
sampled about once per pixel of length and every sample adds its alpha
to the nearest pixel. Stroke width scales intensity, which reads as
line weight at these thin widths.
"""

import numpy as np
from scipy.ndimage import gaussian_filter

BACKGROUND = np.array([10, 10, 10], dtype=np.float32)
STROKE = np.array([255, 255, 255], dtype=np.float32)

# Upper bound on samples per segment (guards against blown-up coordinates)
MAX_SAMPLES = 4096


class Canvas:
    """Float intensity buffer (H, W) in [0, 1] composited to uint8 RGB."""

    def __init__(self, width, height):
        self.width = int(width)
        self.height = int(height)
        self.buffer = np.zeros((self.height, self.width), dtype=np.float32)

    def resize(self, width, height):
        self.width = int(width)
        self.height = int(height)
        self.buffer = np.zeros((self.height, self.width), dtype=np.float32)

    def clear(self):
        self.buffer[:] = 0.0

    def fade(self, keep):
        """Keep a fraction of last frame's strokes (0 clears, 1 keeps all)."""
        if keep <= 0.0:
            self.buffer[:] = 0.0
        else:
            self.buffer *= np.float32(min(keep, 1.0))

    def _splat(self, xs, ys, values):
        xs = np.rint(xs)
        ys = np.rint(ys)
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        xi = xs[inside].astype(np.intp)
        yi = ys[inside].astype(np.intp)
        np.add.at(self.buffer, (yi, xi), values[inside].astype(np.float32))

    def draw_segments(self, segments, alpha, width=1.0):
        """Accumulate (N, 4) segments with per-segment (or scalar) alpha and width."""
        segs = np.asarray(segments, dtype=np.float64).reshape(-1, 4)
        n = len(segs)
        if n == 0:
            return
        finite = np.isfinite(segs).all(axis=1)
        intensity = np.broadcast_to(np.asarray(alpha, dtype=np.float64), (n,)) / 255.0
        intensity = intensity * np.minimum(np.broadcast_to(width, (n,)), 2.0)
        segs = segs[finite]
        intensity = intensity[finite]
        if not len(segs):
            return

        dx = segs[:, 2] - segs[:, 0]
        dy = segs[:, 3] - segs[:, 1]
        # Clamp as float; huge lengths overflow (or wrap) when cast to int
        length = np.nan_to_num(np.sqrt(dx * dx + dy * dy), nan=0.0, posinf=MAX_SAMPLES)
        counts = np.ceil(np.minimum(length, MAX_SAMPLES - 1)).astype(np.intp) + 1

        idx = np.repeat(np.arange(len(segs)), counts)
        starts = np.cumsum(counts) - counts
        offset = np.arange(counts.sum()) - np.repeat(starts, counts)
        t = offset / np.maximum(counts - 1, 1)[idx]
        xs = segs[idx, 0] + dx[idx] * t
        ys = segs[idx, 1] + dy[idx] * t
        self._splat(xs, ys, intensity[idx])

    def draw_points(self, points, alpha, radius=1.0):
        """Accumulate soft dots; radius >= 1.5 adds a ring of neighbour pixels."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        n = len(pts)
        if n == 0:
            return
        intensity = np.broadcast_to(np.asarray(alpha, dtype=np.float64), (n,)) / 255.0
        finite = np.isfinite(pts).all(axis=1)
        pts = pts[finite]
        intensity = intensity[finite]
        self._splat(pts[:, 0], pts[:, 1], intensity)
        if radius >= 1.5:
            for ox, oy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                self._splat(pts[:, 0] + ox, pts[:, 1] + oy, intensity * 0.5)

    def draw_engine(self, engine):
        """Composite one frame of an engine's drawables."""
        self.fade(engine.persistence)
        for segs, alpha, width in engine.line_layers():
            self.draw_segments(segs, alpha, width)
        for pts, alpha, radius in engine.point_layers():
            self.draw_points(pts, alpha, radius)

    def to_rgb(self, bloom_sigma=2.0, bloom_intensity=0.35):
        """(H, W, 3) uint8 frame: background + white strokes + gaussian bloom."""
        level = np.clip(self.buffer, 0.0, 1.0)
        if bloom_sigma > 0 and bloom_intensity > 0:
            level = np.clip(level + gaussian_filter(level, bloom_sigma) * bloom_intensity, 0.0, 1.0)
        rgb = BACKGROUND + (STROKE - BACKGROUND) * level[..., None]
        return rgb.astype(np.uint8)

    def to_float(self, **kwargs):
        """(H, W, 3) float32 frame in [0, 1]."""
        return self.to_rgb(**kwargs).astype(np.float32) / 255.0
