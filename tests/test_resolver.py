"""Tests for read pair resolution."""

import numpy as np
import pytest

from ngspairmap.mapping.alphabet import reverse_complement
from ngspairmap.mapping.index import KmerIndex
from ngspairmap.mapping.models import MINUS, PLUS, PairOutcome, PairPlacement
from ngspairmap.mapping.resolver import PairResolver
from ngspairmap.mapping.store import SequenceStore

from conftest import random_sequence


def _resolver(records, k=21, seed=0):
    store = SequenceStore.build(records, k=k)
    return PairResolver(store, KmerIndex.build(store), seed=seed)


def _as_tuple(p):
    return (p.replicon_id, p.read1_position, p.read2_position, p.distance, p.direction)


class TestPlacement:
    """Test placement orientation and distance rules."""

    def test_plus_orientation(self, linear_seq):
        """read1 on the forward strand, read2 reverse downstream."""
        resolver = _resolver([("chr1", linear_seq)])
        read1 = linear_seq[5:26]
        read2 = reverse_complement(linear_seq[10:31])
        placement = resolver.resolve(read1, read2)
        assert _as_tuple(placement) == ("chr1", 5, 30, 26, PLUS)
        assert placement.start == 5
        assert placement.end == 30
        assert placement.is_plus

    def test_minus_orientation(self, linear_seq):
        """Swapping mates gives the same span in the minus direction."""
        resolver = _resolver([("chr1", linear_seq)])
        read1 = reverse_complement(linear_seq[10:31])
        read2 = linear_seq[5:26]
        placement = resolver.resolve(read1, read2)
        assert _as_tuple(placement) == ("chr1", 30, 5, 26, MINUS)
        assert not placement.is_plus

    def test_only_prefix_used(self, linear_seq):
        """Bases after the first k do not affect placement."""
        resolver = _resolver([("chr1", linear_seq)])
        read1 = linear_seq[5:26] + "NNNNGGGG"
        read2 = reverse_complement(linear_seq[10:31]) + "TTTT"
        assert _as_tuple(resolver.resolve(read1, read2)) == ("chr1", 5, 30, 26, PLUS)

    def test_wraps_origin_of_circular(self, circular_seq, circular_id):
        """read2 coordinate carries + length when the span crosses the origin."""
        resolver = _resolver([(circular_id, circular_seq)])
        extended = circular_seq + circular_seq[:20]
        read1 = extended[45:66]
        read2 = reverse_complement(extended[5:26])
        placement = resolver.resolve(read1, read2)
        assert _as_tuple(placement) == (circular_id, 45, 85, 40, PLUS)
        assert placement.start == 45

    def test_wraps_origin_minus(self, circular_seq, circular_id):
        resolver = _resolver([(circular_id, circular_seq)])
        extended = circular_seq + circular_seq[:20]
        read1 = reverse_complement(extended[5:26])
        read2 = extended[45:66]
        placement = resolver.resolve(read1, read2)
        assert _as_tuple(placement) == (circular_id, 85, 45, 40, MINUS)

    def test_shortest_distance_wins(self):
        """A repeated read1 seed is placed next to read2."""
        unit = random_sequence(25, seed=7)
        spacer = random_sequence(30, seed=8)
        tail = random_sequence(30, seed=9)
        seq = unit + spacer + unit + tail
        resolver = _resolver([("chr1", seq)])

        read1 = unit[:21]
        read2 = reverse_complement(seq[70:91])
        placement = resolver.resolve(read1, read2)
        # read1 hits at 0 and 55, read2 ends at 90
        assert _as_tuple(placement) == ("chr1", 55, 90, 36, PLUS)

    def test_candidates_ordered(self, linear_seq):
        resolver = _resolver([("chr1", linear_seq), ("chr2", linear_seq)])
        found = resolver.candidates(linear_seq[5:26], reverse_complement(linear_seq[10:31]))
        assert [c.replicon_id for c in found] == ["chr1", "chr2"]


class TestFailures:
    """Test unresolved pairs."""

    def test_short_read(self, linear_seq):
        resolver = _resolver([("chr1", linear_seq)])
        resolution = resolver.resolve_detailed(linear_seq[5:25], linear_seq[:21])
        assert resolution.outcome is PairOutcome.SHORT_READ
        assert not resolution.resolved

    @pytest.mark.parametrize("base", ["N", "n"])
    def test_ambiguous_base(self, linear_seq, base):
        resolver = _resolver([("chr1", linear_seq)])
        read1 = linear_seq[5:8] + base + linear_seq[9:26]
        read2 = reverse_complement(linear_seq[10:31])
        resolution = resolver.resolve_detailed(read1, read2)
        assert resolution.outcome is PairOutcome.AMBIGUOUS_BASE
        assert resolver.resolve(read1, read2) is None

    def test_no_match(self, linear_seq):
        resolver = _resolver([("chr1", linear_seq)])
        other = random_sequence(60, seed=99)
        resolution = resolver.resolve_detailed(other[:21], reverse_complement(other[30:51]))
        assert resolution.outcome is PairOutcome.NO_MATCH

    def test_same_strand_is_no_match(self, linear_seq):
        """Both mates forward never form a pair."""
        resolver = _resolver([("chr1", linear_seq)])
        resolution = resolver.resolve_detailed(linear_seq[0:21], linear_seq[15:36])
        assert resolution.outcome is PairOutcome.NO_MATCH

    def test_explicit_k_must_match(self, linear_seq):
        resolver = _resolver([("chr1", linear_seq)])
        with pytest.raises(ValueError):
            resolver.resolve(linear_seq[:21], linear_seq[:21], k=15)


class TestTieBreak:
    """Test random selection among equal distances."""

    def _tied_pair(self, linear_seq):
        return linear_seq[5:26], reverse_complement(linear_seq[10:31])

    def test_same_seed_same_choice(self, linear_seq):
        records = [("chrA", linear_seq), ("chrB", linear_seq)]
        read1, read2 = self._tied_pair(linear_seq)
        first = [_resolver(records, seed=3).resolve(read1, read2) for _ in range(5)]
        assert len({p.replicon_id for p in first}) == 1

        a = _resolver(records, seed=11)
        b = _resolver(records, seed=11)
        assert [a.resolve(read1, read2).replicon_id for _ in range(20)] == \
               [b.resolve(read1, read2).replicon_id for _ in range(20)]

    def test_all_tied_reachable(self, linear_seq):
        records = [("chrA", linear_seq), ("chrB", linear_seq)]
        read1, read2 = self._tied_pair(linear_seq)
        chosen = {
            _resolver(records, seed=seed).resolve(read1, read2).replicon_id
            for seed in range(50)
        }
        assert chosen == {"chrA", "chrB"}

    def test_external_generator(self, linear_seq):
        store = SequenceStore.build([("chrA", linear_seq), ("chrB", linear_seq)], k=21)
        rng = np.random.default_rng(5)
        resolver = PairResolver(store, KmerIndex.build(store), rng=rng)
        assert resolver.rng is rng

    def test_single_candidate_does_not_draw(self, linear_seq):
        resolver = _resolver([("chr1", linear_seq)])
        state = resolver.rng.bit_generator.state
        resolver.resolve(*self._tied_pair(linear_seq))
        assert resolver.rng.bit_generator.state == state


class TestPairPlacement:
    """Test placement validation."""

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            PairPlacement("chr1", 0, 10, 11, 0)

    def test_invalid_distance(self):
        with pytest.raises(ValueError):
            PairPlacement("chr1", 0, 10, 0, PLUS)
