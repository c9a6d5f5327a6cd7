"""
Exact k-mer index over reference replicons.

For each replicon two tables are built once:
    forward: kmer -> start offsets of the literal k-mer
    reverse: revcomp(kmer) -> offset of the k-mer's last base (start + k - 1)

Querying the reverse table with a read's literal prefix therefore returns
forward-strand coordinates of a minus-strand alignment.
"""

import logging
from collections import defaultdict
from typing import Dict, Optional, Tuple

from .alphabet import reverse_complement
from .store import SequenceStore

logger = logging.getLogger(__name__)

Positions = Tuple[int, ...]
KmerTable = Dict[str, Positions]

_EMPTY: Positions = ()


def build_kmer_tables(seq: str, k: int) -> Tuple[KmerTable, KmerTable]:
    """
    Build forward and reverse k-mer tables for one sequence.

    Args:
        seq: Sequence to index (circular replicons pass the extended sequence)
        k: k-mer length

    Returns:
        (forward, reverse) dicts of kmer -> ascending offsets
    """
    forward = defaultdict(list)
    reverse = defaultdict(list)

    n = len(seq)
    rc = reverse_complement(seq)
    for start in range(n - k + 1):
        forward[seq[start:start + k]].append(start)
        # revcomp of seq[start:start+k] is rc[n-start-k : n-start]
        reverse[rc[n - start - k:n - start]].append(start + k - 1)

    return (
        {kmer: tuple(pos) for kmer, pos in forward.items()},
        {kmer: tuple(pos) for kmer, pos in reverse.items()},
    )


class KmerIndex:
    """Immutable per-replicon forward/reverse k-mer lookup."""

    def __init__(self, tables: Dict[str, Tuple[KmerTable, KmerTable]], k: int):
        self.k = k
        self._tables = tables

    @classmethod
    def build(cls, store: SequenceStore, k: Optional[int] = None) -> "KmerIndex":
        """
        Index every replicon of ``store``.

        Args:
            store: Finalized sequence store
            k: k-mer length (defaults to the store's k)

        Returns:
            KmerIndex
        """
        if k is None:
            k = store.k
        if k != store.k:
            raise ValueError(f"Index k ({k}) differs from store k ({store.k})")

        tables = {}
        for replicon in store:
            tables[replicon.id] = build_kmer_tables(replicon.index_sequence, k)
            logger.debug(
                f"Indexed {replicon.id}: {len(tables[replicon.id][0])} distinct {k}-mers"
            )
        logger.info(f"Built {k}-mer index for {len(tables)} replicons")
        return cls(tables, k)

    def lookup_forward(self, replicon_id: str, kmer: str) -> Positions:
        """Start offsets of ``kmer`` on the forward strand."""
        return self._tables[replicon_id][0].get(kmer, _EMPTY)

    def lookup_reverse(self, replicon_id: str, kmer: str) -> Positions:
        """Last-base offsets of the reverse-complement occurrences of ``kmer``."""
        return self._tables[replicon_id][1].get(kmer, _EMPTY)

    def distinct_kmers(self, replicon_id: str) -> int:
        return len(self._tables[replicon_id][0])

    @property
    def replicon_ids(self):
        return list(self._tables)

    def __contains__(self, replicon_id: object) -> bool:
        return replicon_id in self._tables
