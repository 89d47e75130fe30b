#!/usr/bin/env python3
"""
Tests for marching-squares iso-contours and the contour field engine.

Verifies:
1. Fields entirely above/below a level produce no segments
2. A single smooth peak yields closed loops
3. Every segment stays inside the cell that produced it
4. Saddle cells follow the centre-average tie-break
5. Degenerate input never produces NaN geometry
"""

from collections import Counter

import numpy as np
import pytest

from generative_art.contours import (
    ContourField, cell_codes, contour_levels, extract_contours, interpolate,
    local_maxima, marching_squares,
)
from generative_art.engine_base import Quality


def _peak(size=21, center=10.0, sigma=3.0):
    ii, jj = np.mgrid[:size, :size]
    return np.exp(-((ii - center) ** 2 + (jj - center) ** 2) / (2 * sigma ** 2))


def _segment_set(segs, ndigits=9):
    out = set()
    for x1, y1, x2, y2 in np.round(segs, ndigits).tolist():
        out.add(tuple(sorted([(x1, y1), (x2, y2)])))
    return out


def test_trivial_fields_have_no_segments():
    print("Testing fields entirely above / below the level...")
    assert marching_squares(np.ones((6, 9)), 0.5).shape == (0, 4)
    assert marching_squares(np.zeros((6, 9)), 0.5).shape == (0, 4)
    print("  ✓ No segments when no cell straddles the level")


def test_single_peak_forms_closed_loops():
    print("Testing single-peak closed loops...")
    field = _peak()
    for level in (0.2, 0.5, 0.8):
        segs = marching_squares(field, level, cell_size=4.0)
        assert len(segs) > 0
        endpoints = Counter()
        for x1, y1, x2, y2 in np.round(segs, 9).tolist():
            endpoints[(x1, y1)] += 1
            endpoints[(x2, y2)] += 1
        assert set(endpoints.values()) == {2}, f"open contour at level {level}"
    print("  ✓ Every vertex is shared by exactly two segments")


def test_segments_stay_in_their_cell():
    print("Testing segment locality...")
    rng = np.random.default_rng(11)
    field = rng.random((12, 15))
    cs = 4.0
    total = 0
    for i in range(field.shape[0] - 1):
        for j in range(field.shape[1] - 1):
            local = marching_squares(field[i:i + 2, j:j + 2], 0.5, cs)
            total += len(local)
            assert ((local >= 0.0) & (local <= cs)).all()
    segs = marching_squares(field, 0.5, cs)
    assert len(segs) == total

    mid_x = (segs[:, 0] + segs[:, 2]) / 2
    mid_y = (segs[:, 1] + segs[:, 3]) / 2
    ci = np.floor(mid_x / cs)
    cj = np.floor(mid_y / cs)
    eps = 1e-9
    for x in (segs[:, 0], segs[:, 2]):
        assert ((x >= ci * cs - eps) & (x <= (ci + 1) * cs + eps)).all()
    for y in (segs[:, 1], segs[:, 3]):
        assert ((y >= cj * cs - eps) & (y <= (cj + 1) * cs + eps)).all()
    print(f"  ✓ {len(segs)} segments, all within their source cell")


def test_saddle_code_10_tie_break():
    print("Testing saddle tie-break...")
    field = np.array([[1.0, 0.0], [0.0, 1.0]])
    assert cell_codes(field, 0.5)[0, 0] == 10

    # centre average 0.5 >= 0.5: high corners (tl, br) joined
    high = _segment_set(marching_squares(field, 0.5))
    assert high == {((0.5, 0.0), (1.0, 0.5)), ((0.0, 0.5), (0.5, 1.0))}

    # centre average 0.5 < 0.6: low corners (tr, bl) joined
    low = _segment_set(marching_squares(field, 0.6))
    assert low == {((0.0, 0.4), (0.4, 0.0)), ((0.6, 1.0), (1.0, 0.6))}
    print("  ✓ Centre average picks the diagonal pairing")


def test_saddle_code_5_tie_break():
    field = np.array([[0.0, 1.0], [1.0, 0.0]])
    assert cell_codes(field, 0.5)[0, 0] == 5
    high = _segment_set(marching_squares(field, 0.5))
    assert high == {((0.0, 0.5), (0.5, 0.0)), ((0.5, 1.0), (1.0, 0.5))}
    low = _segment_set(marching_squares(field, 0.6))
    assert low == {((0.0, 0.6), (0.4, 1.0)), ((0.6, 0.0), (1.0, 0.4))}


def test_cell_codes_bit_order():
    field = np.array([[1.0, 1.0], [0.0, 0.0]])
    assert cell_codes(field, 0.5)[0, 0] == 12
    field = np.array([[0.0, 0.0], [0.0, 1.0]])
    assert cell_codes(field, 0.5)[0, 0] == 2


def test_interpolate_near_equal_values():
    assert interpolate(0.3, 0.3 + 1e-6, 0.3) == 0.5
    assert interpolate(0.0, 1.0, 0.25) == pytest.approx(0.25)


def test_flat_field_has_no_levels():
    print("Testing degenerate fields...")
    flat = np.full((5, 5), 0.7)
    assert len(contour_levels(flat, 10)) == 0
    assert extract_contours(flat, 10) == []
    assert len(contour_levels(np.array([[np.nan, 1.0], [0.0, 0.5]]), 4)) == 0
    print("  ✓ Flat or non-finite fields produce zero segments")


def test_contour_levels_spacing():
    field = np.array([[0.0, 1.0], [2.0, 4.0]])
    assert contour_levels(field, 1).tolist() == [2.0]
    assert contour_levels(field, 5).tolist() == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0])
    assert len(contour_levels(field, 0)) == 0


def test_local_maxima_finds_peak():
    field = _peak(size=23, center=11.0)
    peaks = local_maxima(field)
    assert peaks.tolist() == [[11, 11]]


def test_field_engine_grid_size_and_resize():
    print("Testing ContourField sizing...")
    eng = ContourField(200, 100, Quality.full)
    assert eng.field.shape == (21, 41)
    eng.reinitialize(300, 160, Quality.preview)
    assert eng.field.shape == (21, 39)
    contours = eng.advance((0.5, 0.5), Quality.preview)
    assert len(contours) == 12
    assert all(np.isfinite(c).all() for c in contours)
    print("  ✓ ceil(size / resolution) + 1 samples per axis")


def test_field_engine_deterministic():
    a = ContourField(160, 120, Quality.preview, seed=4)
    b = ContourField(160, 120, Quality.preview, seed=4)
    for _ in range(3):
        a.advance((0.2, 0.7))
        b.advance((0.2, 0.7))
    assert np.array_equal(a.field, b.field)
    assert a.time == pytest.approx(3 * 0.008)


def test_field_engine_pointer_raises_terrain():
    eng = ContourField(200, 200, Quality.preview, octaves=1)
    base = eng.rebuild_field(0.5, (-10.0, -10.0)).copy()
    lifted = eng.rebuild_field(0.5, (0.5, 0.5))
    center = (lifted.shape[0] // 2, lifted.shape[1] // 2)
    assert lifted[center] - base[center] == pytest.approx(0.4, abs=1e-3)


def test_field_engine_drawables():
    eng = ContourField(160, 120, Quality.preview)
    eng.advance((0.5, 0.5))
    layers = eng.line_layers()
    border, alpha, width = layers[-1]
    assert border.shape == (4, 4)
    stats = eng.stats
    assert stats["levels"] == 12
    assert stats["field"] == eng.field.shape


if __name__ == "__main__":
    test_trivial_fields_have_no_segments()
    test_single_peak_forms_closed_loops()
    test_segments_stay_in_their_cell()
    test_saddle_code_10_tie_break()
    test_saddle_code_5_tie_break()
    test_cell_codes_bit_order()
    test_interpolate_near_equal_values()
    test_flat_field_has_no_levels()
    test_contour_levels_spacing()
    test_local_maxima_finds_peak()
    test_field_engine_grid_size_and_resize()
    test_field_engine_deterministic()
    test_field_engine_pointer_raises_terrain()
    test_field_engine_drawables()
    print("\n✓ All tests passed!\n")
