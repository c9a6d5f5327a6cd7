"""Tests for depth accumulation."""

import numpy as np
import pytest

from ngspairmap.mapping.depth import DepthAccumulator, in_valid_range
from ngspairmap.mapping.models import MINUS, PLUS, PairPlacement
from ngspairmap.mapping.store import SequenceStore


@pytest.fixture
def store(linear_seq, circular_seq, circular_id):
    return SequenceStore.build([("chr1", linear_seq), (circular_id, circular_seq)], k=21)


class TestValidRange:
    """Test the open distance interval."""

    def test_bounds_exclusive(self):
        assert not in_valid_range(20)
        assert in_valid_range(21)
        assert in_valid_range(1999)
        assert not in_valid_range(2000)

    def test_custom_range(self):
        assert in_valid_range(5, (4, 6))
        assert not in_valid_range(4, (4, 6))


class TestAccept:
    """Test span accumulation."""

    def test_linear_span(self, store):
        depth = DepthAccumulator(store)
        assert depth.accept(PairPlacement("chr1", 5, 30, 26, PLUS))

        plus = depth.plus("chr1")
        assert plus[5:31].tolist() == [1] * 26
        assert plus[:5].sum() == 0
        assert plus[31:].sum() == 0
        assert depth.minus("chr1").sum() == 0

    def test_minus_span_starts_at_lower_coordinate(self, store):
        depth = DepthAccumulator(store)
        depth.accept(PairPlacement("chr1", 30, 5, 26, MINUS))
        assert np.flatnonzero(depth.minus("chr1")).tolist() == list(range(5, 31))
        assert depth.plus("chr1").sum() == 0

    def test_wrapped_span(self, store, circular_id):
        """An origin-crossing span is split between the end and the start."""
        depth = DepthAccumulator(store)
        depth.accept(PairPlacement(circular_id, 45, 85, 40, PLUS))
        covered = np.flatnonzero(depth.plus(circular_id)).tolist()
        assert covered == list(range(0, 25)) + list(range(45, 60))

    def test_conservation(self, store, circular_id):
        """Total depth grows by exactly the distance of each accepted pair."""
        depth = DepthAccumulator(store)
        placements = [
            PairPlacement("chr1", 5, 30, 26, PLUS),
            PairPlacement("chr1", 30, 5, 26, MINUS),
            PairPlacement(circular_id, 45, 85, 40, PLUS),
            PairPlacement(circular_id, 70, 50, 40, MINUS),
        ]
        expected = 0
        for p in placements:
            assert depth.accept(p)
            expected += p.distance
            assert depth.total_depth() == expected
        assert depth.total("chr1") == 52
        assert depth.total(circular_id) == 80

    def test_out_of_range_rejected(self, store):
        depth = DepthAccumulator(store)
        assert not depth.accept(PairPlacement("chr1", 5, 24, 20, PLUS))
        assert not depth.accept(PairPlacement("chr1", 0, 39, 40, PLUS), valid_range=(20, 40))
        assert depth.total_depth() == 0

    def test_distance_longer_than_replicon(self, store, circular_id):
        """Spans beyond one full turn keep wrapping."""
        depth = DepthAccumulator(store)
        depth.add_span(circular_id, PLUS, 50, 130)
        plus = depth.plus(circular_id)
        assert plus.sum() == 130
        assert plus.max() == 3
        assert plus[50:60].tolist() == [3] * 10

    def test_max_distance_exclusive_on_short_circular(self, circular_id):
        """A 60 bp circle can never accept a full-turn pair when max is 60."""
        short = SequenceStore.build([(circular_id, "ACGT" * 15)], k=4)
        depth = DepthAccumulator(short)
        assert not depth.accept(PairPlacement(circular_id, 10, 70, 60, PLUS), (20, 60))
        assert depth.accept(PairPlacement(circular_id, 10, 68, 59, PLUS), (20, 60))


class TestViews:
    """Test read-only access and merging."""

    def test_read_only(self, store):
        depth = DepthAccumulator(store)
        with pytest.raises(ValueError):
            depth.plus("chr1")[0] = 1
        with pytest.raises(ValueError):
            depth.minus("chr1")[0] = 1

    def test_combined(self, store):
        depth = DepthAccumulator(store)
        depth.accept(PairPlacement("chr1", 5, 30, 26, PLUS))
        depth.accept(PairPlacement("chr1", 30, 10, 21, MINUS))
        combined = depth.combined("chr1")
        assert combined[10:31].tolist() == [2] * 21
        assert combined.sum() == 47

    def test_merge(self, store, circular_id):
        a = DepthAccumulator(store)
        b = DepthAccumulator(store)
        a.accept(PairPlacement("chr1", 5, 30, 26, PLUS))
        b.accept(PairPlacement("chr1", 5, 30, 26, PLUS))
        b.accept(PairPlacement(circular_id, 45, 85, 40, MINUS))
        a.merge(b)
        assert a.plus("chr1")[5:31].tolist() == [2] * 26
        assert a.total(circular_id) == 40
        assert a.total_depth() == 92

    def test_merge_different_reference(self, store, linear_seq):
        other = SequenceStore.build([("chr1", linear_seq)], k=21)
        with pytest.raises(ValueError):
            DepthAccumulator(store).merge(DepthAccumulator(other))

    def test_replicon_ids(self, store, circular_id):
        assert DepthAccumulator(store).replicon_ids == ["chr1", circular_id]
