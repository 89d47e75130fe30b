#!/usr/bin/env python3
"""
Tests for the wave source manager (pointer triggers, ageing, FIFO bounds).
"""

import pytest

from generative_art.engine_base import Quality
from generative_art.waves import WaveSourceManager


def _manager(**kwargs):
    mgr = WaveSourceManager(**kwargs)
    mgr.reset(100, 100)
    return mgr


def test_pointer_movement_spawns_source():
    print("Testing pointer-triggered sources...")
    mgr = _manager()
    spawned = mgr.maybe_trigger((0.6, 0.5), 1, Quality.full)
    assert spawned == 1
    (src,) = mgr.active_sources()
    assert src.position == pytest.approx((60.0, 50.0))
    assert src.age == 0.0
    assert src.strength == pytest.approx(0.3)
    assert mgr.last_pointer == (0.6, 0.5)
    print("  ✓ Strength = min(delta * 3, 1) at the pointer position")


def test_small_movement_ignored():
    mgr = _manager()
    assert mgr.maybe_trigger((0.51, 0.5), 1, Quality.full) == 0
    assert len(mgr) == 0
    # last_pointer is only updated on spawn, so slow drift accumulates
    assert mgr.maybe_trigger((0.53, 0.5), 2, Quality.full) == 1


def test_strength_clamped_to_one():
    mgr = _manager()
    mgr.maybe_trigger((1.0, 1.0), 1, Quality.full)
    assert mgr.active_sources()[0].strength == 1.0


def test_sources_bounded_for_any_trigger_sequence():
    print("Testing FIFO bound under rapid triggers...")
    mgr = _manager(max_sources=4)
    for frame in range(1, 300):
        pointer = (0.1, 0.1) if frame % 2 else (0.9, 0.9)
        mgr.maybe_trigger(pointer, frame, Quality.preview)
        mgr.tick(0.1, 0.985)
        assert len(mgr) <= 4
    print("  ✓ Active sources never exceed max_sources")


def test_fifo_evicts_oldest():
    mgr = _manager(max_sources=3)
    for x in (1, 2, 3, 4):
        mgr.push(x, 0.0, 1.0)
    assert [s.x for s in mgr.active_sources()] == [2.0, 3.0, 4.0]


def test_tick_ages_decays_and_drops():
    print("Testing source ageing and pruning...")
    mgr = _manager()
    mgr.push(10.0, 10.0, 1.0)
    mgr.push(20.0, 20.0, 0.0105)
    mgr.tick(0.25, 0.9)
    sources = mgr.active_sources()
    assert len(sources) == 1
    assert sources[0].x == 10.0
    assert sources[0].age == pytest.approx(0.25)
    assert sources[0].strength == pytest.approx(0.9)
    print("  ✓ Sources below epsilon are dropped after decay")


def test_ambient_sources_in_preview_only():
    mgr = _manager(seed=3)
    assert mgr.maybe_trigger((0.5, 0.5), 90, Quality.full) == 0
    assert mgr.maybe_trigger((0.5, 0.5), 89, Quality.preview) == 0
    assert mgr.maybe_trigger((0.5, 0.5), 90, Quality.preview) == 1
    src = mgr.active_sources()[0]
    assert 20.0 <= src.x <= 80.0
    assert 20.0 <= src.y <= 80.0
    assert src.strength == pytest.approx(0.4)


def test_set_capacity_keeps_newest():
    mgr = _manager(max_sources=6)
    for x in range(6):
        mgr.push(float(x), 0.0, 1.0)
    mgr.set_capacity(2)
    assert mgr.max_sources == 2
    assert [s.x for s in mgr.active_sources()] == [4.0, 5.0]


def test_reset_clears_sources():
    mgr = _manager()
    mgr.push(1.0, 1.0)
    mgr.reset(50, 40, pointer=(0.2, 0.3))
    assert len(mgr) == 0
    assert (mgr.width, mgr.height) == (50, 40)
    assert mgr.last_pointer == (0.2, 0.3)


if __name__ == "__main__":
    test_pointer_movement_spawns_source()
    test_small_movement_ignored()
    test_strength_clamped_to_one()
    test_sources_bounded_for_any_trigger_sequence()
    test_fifo_evicts_oldest()
    test_tick_ages_decays_and_drops()
    test_ambient_sources_in_preview_only()
    test_set_capacity_keeps_newest()
    test_reset_clears_sources()
    print("\n✓ All tests passed!\n")
