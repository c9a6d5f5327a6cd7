"""
Pair mapping pipeline.

Pipeline:
1. Reference parsing - multi-FASTA into (id, sequence) records
2. SequenceStore / KmerIndex build
3. Pair resolution - one read pair at a time
4. Depth accumulation - accepted pairs only
5. Export - strand depth tables, windowed coverage, summary
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from ..utils.config import MappingConfig, get_default_config
from .depth import DepthAccumulator
from .index import KmerIndex
from .models import PairOutcome
from .resolver import PairResolver
from .store import SequenceStore
from .windows import CoverageWindower, CoverageWindows

logger = logging.getLogger(__name__)


@dataclass
class MappingStats:
    """Per-run pair counters."""
    total_pairs: int = 0
    short_reads: int = 0
    ambiguous: int = 0
    no_match: int = 0
    accepted: int = 0
    out_of_range: int = 0

    @property
    def not_valid(self) -> int:
        """Pairs that failed to map (N in a seed, or no hit)."""
        return self.ambiguous + self.no_match

    def record(self, outcome: PairOutcome) -> None:
        self.total_pairs += 1
        if outcome is PairOutcome.SHORT_READ:
            self.short_reads += 1
        elif outcome is PairOutcome.AMBIGUOUS_BASE:
            self.ambiguous += 1
        elif outcome is PairOutcome.NO_MATCH:
            self.no_match += 1
        elif outcome is PairOutcome.ACCEPTED:
            self.accepted += 1
        elif outcome is PairOutcome.OUT_OF_RANGE:
            self.out_of_range += 1

    def as_dict(self) -> Dict[str, int]:
        d = asdict(self)
        d["not_valid"] = self.not_valid
        return d


class PairMapper:
    """
    Mapping context: reference store, index, resolver, depth and counters.

    Built once per run and passed around explicitly.
    """

    def __init__(
        self,
        store: SequenceStore,
        config: Optional[MappingConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or get_default_config()
        problems = self.config.validate()
        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))
        if store.k != self.config.k:
            raise ValueError(f"Store built with k={store.k}, config has k={self.config.k}")

        self.store = store
        self.index = KmerIndex.build(store, self.config.k)
        self.resolver = PairResolver(store, self.index, rng=rng, seed=self.config.seed)
        self.depth = DepthAccumulator(store)
        self.windower = CoverageWindower(store, self.depth)
        self.stats = MappingStats()

    @classmethod
    def from_records(
        cls,
        records,
        config: Optional[MappingConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> "PairMapper":
        """Build the store from ``(id, sequence)`` records and wrap it."""
        config = config or get_default_config()
        store = SequenceStore.build(
            records,
            k=config.k,
            circular_marker=config.index.circular_marker,
            window_extension=config.index.window_extension,
        )
        return cls(store, config, rng)

    def map_pair(self, read1: str, read2: str) -> PairOutcome:
        """Resolve one pair, add its depth if in range, and count it."""
        resolution = self.resolver.resolve_detailed(read1, read2)
        outcome = resolution.outcome
        if resolution.placement is not None:
            if not self.depth.accept(resolution.placement, self.config.valid_range):
                outcome = PairOutcome.OUT_OF_RANGE
        self.stats.record(outcome)
        return outcome

    def map_pairs(self, pairs: Iterable[Tuple[str, str]]) -> MappingStats:
        """Fold a stream of read pairs into depth; returns the running stats."""
        interval = self.config.progress_interval
        for read1, read2 in pairs:
            self.map_pair(read1, read2)
            if self.stats.total_pairs % interval == 0:
                logger.info(f"Processed {self.stats.total_pairs} pairs")
        return self.stats

    def windows(self, replicon_id: str) -> CoverageWindows:
        w = self.config.window
        return self.windower.windows(replicon_id, w.size, w.margin, w.step)


def export_results(
    mapper: PairMapper,
    output_dir: str,
    read_files: Sequence[Tuple[str, str]] = (),
) -> Dict[str, Path]:
    """
    Write per-replicon depth tables, windowed coverage and the summary.

    Returns:
        Mapping of output label to path
    """
    from ..utils.io import (
        format_summary,
        output_paths,
        summary_path,
        write_strand_depth,
        write_summary,
        write_window_coverage,
    )

    config = mapper.config
    prefix = config.output.prefix
    threshold = config.output.depth_threshold
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    written = {}
    for replicon in mapper.store:
        paths = output_paths(output_dir, prefix, replicon.id)
        write_strand_depth(mapper.depth.plus(replicon.id), paths["plus"], threshold)
        write_strand_depth(mapper.depth.minus(replicon.id), paths["minus"], threshold)
        write_window_coverage(mapper.windows(replicon.id), paths["windows"])
        for label, path in paths.items():
            written[f"{replicon.id}:{label}"] = path

    report = format_summary(
        k=config.k,
        depth_threshold=threshold,
        stats=mapper.stats.as_dict(),
        total_depth=mapper.depth.total_depth(),
        read_files=read_files,
        reference_lengths=mapper.store.lengths(),
    )
    written["summary"] = summary_path(output_dir, prefix)
    write_summary(written["summary"], report)
    return written


def run_mapping(
    reference: str,
    read_files: Sequence[Tuple[str, str]],
    output_dir: str,
    config: Optional[MappingConfig] = None,
) -> MappingStats:
    """
    Map paired-end reads to a reference and export depth.

    Args:
        reference: Reference multi-FASTA (ids containing the circular marker
            are treated as circular)
        read_files: (R1, R2) FASTQ path pairs, mapped in order
        output_dir: Output directory
        config: Mapping configuration (defaults if None)

    Outputs:
        - {prefix}_{replicon}_R.txt / _F.txt: plus / minus depth tables
        - {prefix}_{replicon}_depthAndSeq3.txt: windowed coverage
        - {prefix}_summary.txt: run summary

    Returns:
        MappingStats
    """
    from ..utils.io import iter_read_pair_files, parse_reference

    config = config or get_default_config()
    problems = config.validate()
    if problems:
        raise ValueError("Invalid configuration: " + "; ".join(problems))

    logger.info("Paired-end span mapping")
    logger.info(f"Reference: {reference}")
    logger.info(f"Output: {output_dir}")
    logger.info(
        f"k={config.k}, valid distance ({config.distance.min_distance}, "
        f"{config.distance.max_distance}), seed={config.seed}"
    )

    records = parse_reference(reference, config.index.header_mode)
    mapper = PairMapper.from_records(records, config)

    stats = mapper.map_pairs(iter_read_pair_files(read_files))
    logger.info(
        f"Pairs: {stats.total_pairs} total, {stats.accepted} accepted, "
        f"{stats.out_of_range} bad distance, {stats.not_valid} not mapped, "
        f"{stats.short_reads} short"
    )

    export_results(mapper, output_dir, read_files)
    return stats
