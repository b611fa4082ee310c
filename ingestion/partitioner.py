"""
Split a time range into contiguous, non-overlapping windows.
"""

from datetime import datetime, timedelta
from typing import List

from models.base import WindowOrder
from models.window import TimeWindow


class RangePartitioner:
    """
    Partition [start, end) into windows of length `step`.

    Descending order walks back from `end`, so the oldest window is the one
    clamped to `start`. Ascending order walks forward from `start` and clamps
    the newest window to `end`. Either way the windows are disjoint and their
    union is exactly [start, end).

    An empty or inverted range yields no windows.
    """

    def __init__(self, step: timedelta, order: WindowOrder = WindowOrder.ASCENDING):
        if step <= timedelta(0):
            raise ValueError(f"step must be positive, got {step}")
        self.step = step
        self.order = order

    def split(self, start: datetime, end: datetime) -> List[TimeWindow]:
        if start >= end:
            return []
        if self.order == WindowOrder.DESCENDING:
            return self._descending(start, end)
        return self._ascending(start, end)

    def _ascending(self, start: datetime, end: datetime) -> List[TimeWindow]:
        windows = []
        window_start = start
        while window_start < end:
            window_end = min(window_start + self.step, end)
            windows.append(TimeWindow(start=window_start, end=window_end))
            window_start = window_end
        return windows

    def _descending(self, start: datetime, end: datetime) -> List[TimeWindow]:
        windows = []
        window_end = end
        while window_end > start:
            window_start = max(window_end - self.step, start)
            windows.append(TimeWindow(start=window_start, end=window_end))
            window_end = window_start
        return windows
