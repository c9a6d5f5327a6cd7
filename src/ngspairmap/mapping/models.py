"""
Core data structures for pair mapping.

Design:
1. Reference replicons are immutable once the store is built
2. Placements are frozen dataclasses, validated at construction
3. Per-pair outcomes are an Enum so callers can count them without exceptions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Pair orientation: read1 on the forward strand (+1) or read2 on it (-1)
PLUS = 1
MINUS = -1
DIRECTIONS = (PLUS, MINUS)


# =============================================================================
# Exceptions
# =============================================================================

class NgsPairMapError(Exception):
    """Base class for ngspairmap errors."""


class InvalidRecordError(NgsPairMapError, ValueError):
    """A reference record cannot be used (empty sequence, duplicate id)."""


# =============================================================================
# Reference
# =============================================================================

@dataclass(frozen=True)
class Replicon:
    """One reference sequence (chromosome, plasmid, contig)."""
    id: str
    sequence: str
    is_circular: bool
    index_sequence: str            # sequence + first k-1 bases if circular
    window_sequence: str           # sequence + fixed-size prefix if circular

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def index_extension(self) -> int:
        return len(self.index_sequence) - len(self.sequence)

    @property
    def window_extension(self) -> int:
        return len(self.window_sequence) - len(self.sequence)


# =============================================================================
# Resolution
# =============================================================================

@dataclass(frozen=True)
class PairPlacement:
    """
    A read pair resolved to one genomic placement.

    Positions are 0-based. On wrapped placements the coordinate that
    crossed the origin carries ``+ length`` so that ``read1_position`` and
    ``read2_position`` keep their order along the span.
    """
    replicon_id: str
    read1_position: int
    read2_position: int
    distance: int
    direction: int

    def __post_init__(self):
        if self.direction not in DIRECTIONS:
            raise ValueError(f"direction must be +1 or -1, got {self.direction}")
        if self.distance <= 0:
            raise ValueError(f"distance must be positive, got {self.distance}")

    @property
    def start(self) -> int:
        """Lower (unwrapped) coordinate of the span."""
        return min(self.read1_position, self.read2_position)

    @property
    def end(self) -> int:
        """Upper (unwrapped) coordinate of the span."""
        return max(self.read1_position, self.read2_position)

    @property
    def is_plus(self) -> bool:
        return self.direction == PLUS


class PairOutcome(Enum):
    """Classification of one read pair."""
    SHORT_READ = "short_read"          # a read is shorter than k
    AMBIGUOUS_BASE = "ambiguous_base"  # N in a k-mer prefix
    NO_MATCH = "no_match"              # no k-mer hit anywhere
    ACCEPTED = "accepted"              # resolved and within the distance range
    OUT_OF_RANGE = "out_of_range"      # resolved, distance outside the range


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one pair, with the placement when one was found."""
    outcome: PairOutcome
    placement: Optional[PairPlacement] = None

    @property
    def resolved(self) -> bool:
        return self.placement is not None
