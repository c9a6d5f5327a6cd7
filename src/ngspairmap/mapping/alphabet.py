"""
Nucleotide alphabet and complement helpers.

The complement table covers DNA/RNA bases, the IUPAC ambiguity codes and the
gap/wildcard symbols. Everything else maps to ``UNMAPPABLE`` so that a k-mer
containing an unknown character can never match an indexed k-mer.
"""

from typing import Dict

# Never a valid base code
UNMAPPABLE = "\x00"

_UPPER_COMPLEMENT = {
    'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G',
    'U': 'A',
    'R': 'Y', 'Y': 'R', 'S': 'S', 'W': 'W',
    'K': 'M', 'M': 'K', 'B': 'V', 'V': 'B',
    'D': 'H', 'H': 'D', 'N': 'N',
}

COMPLEMENT: Dict[str, str] = {
    **_UPPER_COMPLEMENT,
    **{base.lower(): comp.lower() for base, comp in _UPPER_COMPLEMENT.items()},
    '*': '*', '-': '-', '?': '?',
}

RECOGNIZED = frozenset(COMPLEMENT)


def complement_base(base: str) -> str:
    """Complement of a single character, ``UNMAPPABLE`` if unknown."""
    return COMPLEMENT.get(base, UNMAPPABLE)


def complement(seq: str) -> str:
    """Complement every character of ``seq`` without reversing it."""
    return "".join(COMPLEMENT.get(base, UNMAPPABLE) for base in seq)


def reverse_complement(seq: str) -> str:
    """Reverse complement; unknown characters become ``UNMAPPABLE``."""
    return "".join(COMPLEMENT.get(base, UNMAPPABLE) for base in reversed(seq))


def has_ambiguous_base(seq: str) -> bool:
    """True if ``seq`` contains the ambiguity code N in either case."""
    return 'N' in seq or 'n' in seq
