#!/usr/bin/env python3
"""
Tests for seeded value noise.
"""

import numpy as np

from generative_art.noise import ValueNoise


def test_same_seed_same_field():
    print("Testing noise determinism...")
    xs, ys = np.meshgrid(np.linspace(0, 5, 40), np.linspace(0, 3, 30))
    a = ValueNoise(seed=9).fractal(xs, ys, 0.7, octaves=3)
    b = ValueNoise(seed=9).fractal(xs, ys, 0.7, octaves=3)
    c = ValueNoise(seed=10).fractal(xs, ys, 0.7, octaves=3)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)
    print("  ✓ Same seed and coordinates give the same field")


def test_sample_range_and_continuity():
    noise = ValueNoise(seed=1)
    x = np.linspace(-4.0, 4.0, 500)
    v = noise.sample(x, 0.3, 1.2)
    assert v.shape == (500,)
    assert ((v >= 0.0) & (v <= 1.0)).all()
    nudged = noise.sample(x + 1e-7, 0.3, 1.2)
    assert np.abs(nudged - v).max() < 1e-5


def test_fractal_bounds():
    noise = ValueNoise(seed=2)
    xs, ys = np.meshgrid(np.linspace(0, 20, 64), np.linspace(0, 20, 64))
    total = noise.fractal(xs, ys, 3.3, octaves=3)
    assert total.min() >= 0.0
    assert total.max() <= 1.0 + 0.5 + 0.25
    assert total.std() > 0.01


def test_time_changes_field():
    noise = ValueNoise(seed=5)
    xs, ys = np.meshgrid(np.linspace(0, 4, 16), np.linspace(0, 4, 16))
    assert not np.array_equal(noise.fractal(xs, ys, 0.0), noise.fractal(xs, ys, 0.5))


if __name__ == "__main__":
    print("\n=== Testing Value Noise ===\n")

    test_same_seed_same_field()
    test_sample_range_and_continuity()
    test_fractal_bounds()
    test_time_changes_field()

    print("\n✓ All tests passed!\n")
