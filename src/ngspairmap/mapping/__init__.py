"""Exact k-mer pair mapping and span depth accumulation."""

from ngspairmap.mapping.alphabet import UNMAPPABLE, complement, reverse_complement
from ngspairmap.mapping.depth import DepthAccumulator
from ngspairmap.mapping.index import KmerIndex
from ngspairmap.mapping.models import (
    MINUS,
    PLUS,
    InvalidRecordError,
    NgsPairMapError,
    PairOutcome,
    PairPlacement,
    Replicon,
    Resolution,
)
from ngspairmap.mapping.pipeline import MappingStats, PairMapper, export_results, run_mapping
from ngspairmap.mapping.resolver import PairResolver
from ngspairmap.mapping.store import SequenceStore
from ngspairmap.mapping.windows import CoverageWindower

__all__ = [
    "UNMAPPABLE",
    "complement",
    "reverse_complement",
    "SequenceStore",
    "Replicon",
    "KmerIndex",
    "PairResolver",
    "PairPlacement",
    "PairOutcome",
    "Resolution",
    "PLUS",
    "MINUS",
    "DepthAccumulator",
    "CoverageWindower",
    "PairMapper",
    "MappingStats",
    "export_results",
    "run_mapping",
    "NgsPairMapError",
    "InvalidRecordError",
]
