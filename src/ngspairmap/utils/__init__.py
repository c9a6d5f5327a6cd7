"""Utility modules for ngspairmap."""

from ngspairmap.utils.config import MappingConfig, get_default_config
from ngspairmap.utils.io import (
    iter_fastq,
    iter_read_pairs,
    parse_reference,
    write_strand_depth,
    write_window_coverage,
)
from ngspairmap.utils.logging_utils import setup_logger
