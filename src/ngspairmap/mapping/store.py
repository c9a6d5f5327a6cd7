"""Reference replicon store with circular-genome extensions."""

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from .models import InvalidRecordError, Replicon

logger = logging.getLogger(__name__)

DEFAULT_CIRCULAR_MARKER = "topology=circular"
DEFAULT_WINDOW_EXTENSION = 2000

RawRecords = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def circular_prefix(seq: str, length: int) -> str:
    """
    First ``length`` bases of a circular sequence, wrapping as often as needed.

    Args:
        seq: Circular sequence
        length: Number of bases to take from the origin

    Returns:
        Prefix of exactly ``length`` bases (empty if ``seq`` is empty)
    """
    L = len(seq)
    if L == 0 or length <= 0:
        return ""
    if length <= L:
        return seq[:length]
    full_copies = length // L
    return seq * full_copies + seq[:length % L]


def make_replicon(
    replicon_id: str,
    sequence: str,
    k: int,
    circular_marker: str = DEFAULT_CIRCULAR_MARKER,
    window_extension: int = DEFAULT_WINDOW_EXTENSION,
) -> Replicon:
    """
    Build a ``Replicon`` and its extended variants.

    Raises:
        InvalidRecordError: If the sequence is empty
    """
    seq = sequence.upper()
    if not seq:
        raise InvalidRecordError(f"Reference record '{replicon_id}' has an empty sequence")

    is_circular = bool(circular_marker) and circular_marker in replicon_id
    if is_circular:
        index_seq = seq + circular_prefix(seq, k - 1)
        window_seq = seq + circular_prefix(seq, window_extension)
    else:
        index_seq = seq
        window_seq = seq

    return Replicon(
        id=replicon_id,
        sequence=seq,
        is_circular=is_circular,
        index_sequence=index_seq,
        window_sequence=window_seq,
    )


class SequenceStore:
    """Finalized set of reference replicons, in input order."""

    def __init__(self, replicons: Iterable[Replicon], k: int):
        self.k = k
        self._replicons: Dict[str, Replicon] = {}
        for replicon in replicons:
            if replicon.id in self._replicons:
                raise InvalidRecordError(f"Duplicate reference id: {replicon.id}")
            self._replicons[replicon.id] = replicon

    @classmethod
    def build(
        cls,
        raw_records: RawRecords,
        k: int,
        circular_marker: str = DEFAULT_CIRCULAR_MARKER,
        window_extension: int = DEFAULT_WINDOW_EXTENSION,
    ) -> "SequenceStore":
        """
        Build the store from parsed ``(id, sequence)`` records.

        Args:
            raw_records: Mapping id -> sequence, or iterable of (id, sequence)
            k: k-mer length (circular index extension is k-1 bases)
            circular_marker: Substring of an id that marks a circular replicon
            window_extension: Bases appended to circular replicons for windowing

        Returns:
            SequenceStore

        Raises:
            InvalidRecordError: On an empty sequence or duplicate id
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if window_extension < 0:
            raise ValueError(f"window_extension must be >= 0, got {window_extension}")

        items = raw_records.items() if isinstance(raw_records, Mapping) else raw_records
        replicons = [
            make_replicon(rid, seq, k, circular_marker, window_extension)
            for rid, seq in items
        ]
        store = cls(replicons, k)

        n_circular = sum(1 for r in store if r.is_circular)
        logger.info(
            f"Loaded {len(store)} replicons ({n_circular} circular), "
            f"{sum(r.length for r in store)} bp total"
        )
        return store

    @property
    def replicons(self) -> List[Replicon]:
        return list(self._replicons.values())

    def lengths(self) -> Dict[str, int]:
        """Physical length of every replicon."""
        return {rid: r.length for rid, r in self._replicons.items()}

    def circularity(self) -> Dict[str, bool]:
        """Circular flag of every replicon."""
        return {rid: r.is_circular for rid, r in self._replicons.items()}

    def __getitem__(self, replicon_id: str) -> Replicon:
        return self._replicons[replicon_id]

    def __contains__(self, replicon_id: object) -> bool:
        return replicon_id in self._replicons

    def __iter__(self) -> Iterator[Replicon]:
        return iter(self._replicons.values())

    def __len__(self) -> int:
        return len(self._replicons)
