import math


class MinHeapPQ: # binary min-heap with an index map for O(log n) decrease-key
    def __init__(self):
        self._heap = [] # entries are [priority, seq, item]
        self._index = {} # item -> position in _heap
        self._counter = 0 # insertion counter, breaks priority ties FIFO

    def __len__(self):
        return len(self._heap)

    def __contains__(self, item):
        return item in self._index

    def is_empty(self) -> bool:
        return not self._heap

    def insert(self, item, priority):
        """
        Add item with priority, or update the priority if item is already queued
        """
        if not math.isfinite(priority):
            raise ValueError(f"priority must be a finite number, got {priority!r}")
        if item in self._index:
            self.adjust_priority(item, priority)
            return

        self._heap.append([priority, self._counter, item])
        self._counter += 1
        pos = len(self._heap) - 1
        self._index[item] = pos
        self._sift_up(pos)

    def extract_min(self):
        """
        Remove and return the item with the lowest priority (None when empty)
        """
        if not self._heap:
            return None
        last = len(self._heap) - 1
        self._swap(0, last)
        _, _, item = self._heap.pop()
        del self._index[item]
        if self._heap:
            self._sift_down(0)
        return item

    def peek_priority(self):
        return self._heap[0][0] if self._heap else None

    def adjust_priority(self, item, priority):
        pos = self._index.get(item)
        if pos is None:
            return # unknown items are ignored
        if not math.isfinite(priority):
            raise ValueError(f"priority must be a finite number, got {priority!r}")
        old = self._heap[pos][0]
        self._heap[pos][0] = priority
        if priority < old:
            self._sift_up(pos)
        else:
            self._sift_down(pos)

    # Heap helpers

    def _less(self, i, j):
        a, b = self._heap[i], self._heap[j]
        return (a[0], a[1]) < (b[0], b[1])

    def _sift_up(self, pos):
        while pos > 0:
            parent = (pos - 1) // 2
            if not self._less(pos, parent):
                break
            self._swap(pos, parent)
            pos = parent

    def _sift_down(self, pos):
        n = len(self._heap)
        while True:
            left = 2 * pos + 1
            right = left + 1
            smallest = pos
            if left < n and self._less(left, smallest):
                smallest = left
            if right < n and self._less(right, smallest):
                smallest = right
            if smallest == pos:
                return
            self._swap(pos, smallest)
            pos = smallest

    def _swap(self, i, j):
        if i == j:
            return
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]
        self._index[self._heap[i][2]] = i
        self._index[self._heap[j][2]] = j
