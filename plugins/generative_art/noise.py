"""
Seeded Value Noise

Smooth 3D lattice value noise evaluated on whole numpy arrays at once.
Lattice values come from a permutation table drawn from a seeded
generator, so the same seed and coordinates always give the same field.
"""

import numpy as np

TABLE_SIZE = 256

# Per-octave time multipliers: each finer octave drifts a little faster
OCTAVE_TIME_SCALES = (1.0, 1.3, 1.7, 2.1)


def _fade(t):
    """Smoothstep interpolation weight."""
    return t * t * (3.0 - 2.0 * t)


class ValueNoise:
    """3D value noise in [0, 1] with trilinear smoothstep interpolation."""

    def __init__(self, seed=0):
        rng = np.random.default_rng(seed)
        perm = rng.permutation(TABLE_SIZE)
        self._perm = np.concatenate([perm, perm])
        self._values = rng.random(TABLE_SIZE)
        self._mask = TABLE_SIZE - 1

    def _lattice(self, xi, yi, zi):
        p = self._perm
        m = self._mask
        return self._values[p[p[p[xi & m] + (yi & m)] + (zi & m)]]

    def sample(self, x, y, z):
        """Noise at broadcastable coordinate arrays x, y, z."""
        x, y, z = np.broadcast_arrays(np.asarray(x, dtype=np.float64),
                                      np.asarray(y, dtype=np.float64),
                                      np.asarray(z, dtype=np.float64))
        x0 = np.floor(x)
        y0 = np.floor(y)
        z0 = np.floor(z)
        u = _fade(x - x0)
        v = _fade(y - y0)
        w = _fade(z - z0)
        xi = x0.astype(np.int64)
        yi = y0.astype(np.int64)
        zi = z0.astype(np.int64)

        c000 = self._lattice(xi, yi, zi)
        c100 = self._lattice(xi + 1, yi, zi)
        c010 = self._lattice(xi, yi + 1, zi)
        c110 = self._lattice(xi + 1, yi + 1, zi)
        c001 = self._lattice(xi, yi, zi + 1)
        c101 = self._lattice(xi + 1, yi, zi + 1)
        c011 = self._lattice(xi, yi + 1, zi + 1)
        c111 = self._lattice(xi + 1, yi + 1, zi + 1)

        x00 = c000 + (c100 - c000) * u
        x10 = c010 + (c110 - c010) * u
        x01 = c001 + (c101 - c001) * u
        x11 = c011 + (c111 - c011) * u
        y0_ = x00 + (x10 - x00) * v
        y1_ = x01 + (x11 - x01) * v
        return y0_ + (y1_ - y0_) * w

    def fractal(self, x, y, t, octaves=3):
        """Octave sum: frequency doubles and amplitude halves per octave.

        Octave k samples (x * 2^k, y * 2^k, t * OCTAVE_TIME_SCALES[k]) with
        weight 0.5^k. Result lies in [0, sum of weights].
        """
        total = 0.0
        freq = 1.0
        amp = 1.0
        for k in range(octaves):
            time_scale = OCTAVE_TIME_SCALES[min(k, len(OCTAVE_TIME_SCALES) - 1)]
            total = total + self.sample(x * freq, y * freq, t * time_scale) * amp
            freq *= 2.0
            amp *= 0.5
        return total
