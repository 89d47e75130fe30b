"""
Fixed-Capacity Ring Buffers

Preallocated numpy storage with a head index and a live count. Pushing
into a full buffer overwrites the oldest row in O(1); nothing is ever
reallocated during a frame. Used for wave sources (FIFO eviction) and
attractor trails (bounded history).
"""

import numpy as np


class RingBuffer:
    """FIFO of float rows with strict capacity.

    Rows are stored in self.data; the live rows are the `count` slots
    starting at `head` (oldest) and wrapping around.
    """

    def __init__(self, capacity, width, dtype=np.float64):
        if capacity <= 0:
            raise ValueError(f"RingBuffer capacity must be positive, got {capacity}")
        self.data = np.zeros((capacity, width), dtype=dtype)
        self.head = 0
        self.count = 0

    @property
    def capacity(self):
        return self.data.shape[0]

    def __len__(self):
        return self.count

    def slots(self):
        """Storage indices of live rows, oldest first."""
        return (self.head + np.arange(self.count)) % self.capacity

    def push(self, row):
        """Append a row. Returns True if the oldest row was evicted."""
        cap = self.capacity
        if self.count == cap:
            self.data[self.head] = row
            self.head = (self.head + 1) % cap
            return True
        self.data[(self.head + self.count) % cap] = row
        self.count += 1
        return False

    def ordered(self):
        """Copy of live rows, oldest first."""
        return self.data[self.slots()]

    def newest(self):
        if self.count == 0:
            return None
        return self.data[(self.head + self.count - 1) % self.capacity]

    def oldest(self):
        if self.count == 0:
            return None
        return self.data[self.head]

    def keep(self, mask):
        """Drop live rows where mask is False, preserving order.

        mask is aligned with ordered(). Survivors are compacted so the
        buffer starts at slot 0 again.
        """
        survivors = self.ordered()[np.asarray(mask, dtype=bool)]
        self.data[:len(survivors)] = survivors
        self.head = 0
        self.count = len(survivors)

    def clear(self):
        self.head = 0
        self.count = 0

    def resize(self, capacity):
        """Change capacity, keeping the newest rows that still fit."""
        if capacity <= 0:
            raise ValueError(f"RingBuffer capacity must be positive, got {capacity}")
        if capacity == self.capacity:
            return
        rows = self.ordered()[-capacity:]
        self.data = np.zeros((capacity, self.data.shape[1]), dtype=self.data.dtype)
        self.data[:len(rows)] = rows
        self.head = 0
        self.count = len(rows)
