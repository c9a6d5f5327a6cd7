"""Per-replicon, per-strand depth accumulation."""

import logging
from typing import Dict, Tuple

import numpy as np

from .models import PairPlacement
from .store import SequenceStore

logger = logging.getLogger(__name__)

DEFAULT_VALID_RANGE = (20, 2000)


def in_valid_range(distance: int, valid_range: Tuple[int, int] = DEFAULT_VALID_RANGE) -> bool:
    """Open-interval test ``min < distance < max``."""
    low, high = valid_range
    return low < distance < high


class DepthAccumulator:
    """
    Cumulative coverage of accepted pair spans.

    Each replicon has a plus and a minus array of physical length. A span
    covers ``distance`` consecutive bases starting at the lower coordinate of
    the placement, wrapping to index 0 past the physical end.
    """

    def __init__(self, store: SequenceStore, dtype=np.int64):
        self._lengths = store.lengths()
        self._arrays: Dict[str, Tuple[np.ndarray, np.ndarray]] = {
            rid: (np.zeros(length, dtype=dtype), np.zeros(length, dtype=dtype))
            for rid, length in self._lengths.items()
        }

    def _array(self, replicon_id: str, direction: int) -> np.ndarray:
        plus, minus = self._arrays[replicon_id]
        return plus if direction > 0 else minus

    def add_span(self, replicon_id: str, direction: int, start: int, count: int) -> None:
        """
        Increment ``count`` bases from ``start`` (any unwrapped coordinate).

        Wrapping spans are split into ``[start, end)`` and ``[0, ...)``.
        """
        arr = self._array(replicon_id, direction)
        length = self._lengths[replicon_id]
        pos = start % length
        remaining = count
        while remaining > 0:
            chunk = min(remaining, length - pos)
            arr[pos:pos + chunk] += 1
            remaining -= chunk
            pos = 0

    def accept(
        self,
        placement: PairPlacement,
        valid_range: Tuple[int, int] = DEFAULT_VALID_RANGE,
    ) -> bool:
        """
        Add the span of ``placement`` if its distance is in range.

        Args:
            placement: Resolved pair
            valid_range: Open interval (min, max) of accepted distances

        Returns:
            True if depth was added, False for an abnormal distance
        """
        if not in_valid_range(placement.distance, valid_range):
            return False
        self.add_span(
            placement.replicon_id,
            placement.direction,
            placement.start,
            placement.distance,
        )
        return True

    def merge(self, other: "DepthAccumulator") -> None:
        """Add the counts of another accumulator built on the same store."""
        if other._lengths != self._lengths:
            raise ValueError("Cannot merge depth accumulated on different references")
        for rid, (plus, minus) in self._arrays.items():
            other_plus, other_minus = other._arrays[rid]
            plus += other_plus
            minus += other_minus

    def plus(self, replicon_id: str) -> np.ndarray:
        """Read-only view of the plus-direction depth."""
        view = self._arrays[replicon_id][0].view()
        view.flags.writeable = False
        return view

    def minus(self, replicon_id: str) -> np.ndarray:
        """Read-only view of the minus-direction depth."""
        view = self._arrays[replicon_id][1].view()
        view.flags.writeable = False
        return view

    def combined(self, replicon_id: str) -> np.ndarray:
        """plus + minus, as a new array."""
        plus, minus = self._arrays[replicon_id]
        return plus + minus

    def total(self, replicon_id: str) -> int:
        plus, minus = self._arrays[replicon_id]
        return int(plus.sum() + minus.sum())

    def total_depth(self) -> int:
        """Sum of all depth over all replicons and strands."""
        return sum(self.total(rid) for rid in self._arrays)

    @property
    def replicon_ids(self):
        return list(self._arrays)
