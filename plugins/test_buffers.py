#!/usr/bin/env python3
"""
Tests for the fixed-capacity ring buffer.

Verifies:
1. Capacity is never exceeded and the oldest row is evicted first
2. ordered() / newest() / oldest() report rows in FIFO order
3. keep() drops rows without reordering survivors
4. resize() keeps the newest rows
"""

import numpy as np
import pytest

from generative_art.buffers import RingBuffer


def test_push_evicts_oldest():
    print("Testing RingBuffer eviction...")
    ring = RingBuffer(3, 2)
    evicted = [ring.push((i, i * 10)) for i in range(5)]
    assert evicted == [False, False, False, True, True]
    assert len(ring) == 3
    assert ring.ordered()[:, 0].tolist() == [2.0, 3.0, 4.0]
    assert ring.oldest()[0] == 2.0
    assert ring.newest()[0] == 4.0
    print("  ✓ Oldest rows evicted first, capacity respected")


def test_length_bounded_for_long_sequences():
    print("Testing RingBuffer bound under many pushes...")
    ring = RingBuffer(7, 3)
    for i in range(1000):
        ring.push((i, -i, 0.5))
        assert len(ring) <= 7
    assert ring.ordered()[:, 0].tolist() == list(range(993, 1000))
    print("  ✓ Never exceeds capacity")


def test_empty_buffer():
    ring = RingBuffer(4, 2)
    assert len(ring) == 0
    assert ring.newest() is None
    assert ring.oldest() is None
    assert ring.ordered().shape == (0, 2)


def test_keep_preserves_order():
    print("Testing RingBuffer.keep...")
    ring = RingBuffer(4, 1)
    for i in range(6):  # wraps: live rows are 2, 3, 4, 5
        ring.push((i,))
    ring.keep([True, False, True, True])
    assert ring.ordered()[:, 0].tolist() == [2.0, 4.0, 5.0]
    assert ring.head == 0
    ring.push((6,))
    ring.push((7,))
    assert ring.ordered()[:, 0].tolist() == [4.0, 5.0, 6.0, 7.0]
    print("  ✓ Survivors keep FIFO order after compaction")


def test_resize_keeps_newest():
    print("Testing RingBuffer.resize...")
    ring = RingBuffer(5, 1)
    for i in range(8):
        ring.push((i,))
    ring.resize(2)
    assert ring.capacity == 2
    assert ring.ordered()[:, 0].tolist() == [6.0, 7.0]
    ring.resize(4)
    ring.push((8,))
    assert ring.ordered()[:, 0].tolist() == [6.0, 7.0, 8.0]
    print("  ✓ Shrinking keeps the newest rows, growing keeps all")


def test_clear():
    ring = RingBuffer(3, 1)
    ring.push((1,))
    ring.clear()
    assert len(ring) == 0
    ring.push((2,))
    assert ring.ordered()[:, 0].tolist() == [2.0]


def test_invalid_capacity():
    with pytest.raises(ValueError):
        RingBuffer(0, 2)
    ring = RingBuffer(2, 2)
    with pytest.raises(ValueError):
        ring.resize(-1)


def test_storage_not_reallocated_on_push():
    ring = RingBuffer(3, 2)
    storage = ring.data
    for i in range(10):
        ring.push((i, i))
    assert ring.data is storage
    assert np.isfinite(ring.data).all()


if __name__ == "__main__":
    test_push_evicts_oldest()
    test_length_bounded_for_long_sequences()
    test_empty_buffer()
    test_keep_preserves_order()
    test_resize_keeps_newest()
    test_clear()
    test_invalid_capacity()
    test_storage_not_reallocated_on_push()
    print("\n✓ All tests passed!\n")
