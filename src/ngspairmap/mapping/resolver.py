"""
Read pair placement resolution.

Each read is seeded by its first k bases only. A pair is placed where read1's
prefix hits one strand and read2's prefix hits the opposite strand; among all
such placements on all replicons the one spanning the shortest end-to-end
distance (EED) wins, ties broken at random.
"""

import logging
from typing import List, Optional

import numpy as np

from .alphabet import has_ambiguous_base
from .index import KmerIndex
from .models import MINUS, PLUS, PairOutcome, PairPlacement, Resolution
from .store import SequenceStore

logger = logging.getLogger(__name__)


def _plus_candidate(replicon_id: str, length: int, f: int, r: int) -> PairPlacement:
    """read1 forward at ``f``, read2 reverse ending at ``r``."""
    if f < r:
        return PairPlacement(replicon_id, f, r, r - f + 1, PLUS)
    # Span crosses the origin
    return PairPlacement(replicon_id, f, r + length, length - f + r, PLUS)


def _minus_candidate(replicon_id: str, length: int, f: int, r: int) -> PairPlacement:
    """read2 forward at ``f``, read1 reverse ending at ``r``."""
    if f < r:
        return PairPlacement(replicon_id, r, f, r - f + 1, MINUS)
    return PairPlacement(replicon_id, r + length, f, length - f + r, MINUS)


class PairResolver:
    """
    Resolve read pairs against a ``KmerIndex``.

    The resolver is a pure function of the index and its inputs apart from
    the random generator used for tie-breaks. Give every resolver its own
    generator; do not share one between threads.
    """

    def __init__(
        self,
        store: SequenceStore,
        index: KmerIndex,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        if rng is None:
            rng = np.random.default_rng(seed)
        self.store = store
        self.index = index
        self.k = index.k
        self.rng = rng

    def candidates(self, prefix1: str, prefix2: str) -> List[PairPlacement]:
        """
        All placements of two k-mer prefixes over every replicon.

        Order: replicon order, orientation +1 then -1, forward offset,
        reverse offset.
        """
        found = []
        for replicon in self.store:
            rid = replicon.id
            length = replicon.length

            forward = self.index.lookup_forward(rid, prefix1)
            if forward:
                reverse = self.index.lookup_reverse(rid, prefix2)
                for f in forward:
                    for r in reverse:
                        found.append(_plus_candidate(rid, length, f, r))

            forward = self.index.lookup_forward(rid, prefix2)
            if forward:
                reverse = self.index.lookup_reverse(rid, prefix1)
                for f in forward:
                    for r in reverse:
                        found.append(_minus_candidate(rid, length, f, r))
        return found

    def select(self, candidates: List[PairPlacement]) -> Optional[PairPlacement]:
        """Pick the shortest-distance candidate, random among ties."""
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        best = min(c.distance for c in candidates)
        tied = [c for c in candidates if c.distance == best]
        if len(tied) == 1:
            return tied[0]
        return tied[int(self.rng.integers(len(tied)))]

    def resolve_detailed(self, read1: str, read2: str, k: Optional[int] = None) -> Resolution:
        """
        Resolve a pair and report why it failed when it did.

        Args:
            read1: Read 1 sequence
            read2: Read 2 sequence
            k: Seed length, must match the index when given

        Returns:
            Resolution with outcome SHORT_READ, AMBIGUOUS_BASE, NO_MATCH
            or ACCEPTED (distance filtering is the accumulator's job)
        """
        if k is not None and k != self.k:
            raise ValueError(f"k={k} does not match index k={self.k}")
        k = self.k

        if len(read1) < k or len(read2) < k:
            return Resolution(PairOutcome.SHORT_READ)

        prefix1 = read1[:k]
        prefix2 = read2[:k]
        if has_ambiguous_base(prefix1) or has_ambiguous_base(prefix2):
            return Resolution(PairOutcome.AMBIGUOUS_BASE)

        placement = self.select(self.candidates(prefix1, prefix2))
        if placement is None:
            return Resolution(PairOutcome.NO_MATCH)
        return Resolution(PairOutcome.ACCEPTED, placement)

    def resolve(self, read1: str, read2: str, k: Optional[int] = None) -> Optional[PairPlacement]:
        """Best placement of the pair, or None."""
        return self.resolve_detailed(read1, read2, k).placement
