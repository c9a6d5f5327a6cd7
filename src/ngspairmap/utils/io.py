"""
File I/O for ngspairmap.

- Multi-FASTA reference parsing
- Paired FASTQ streaming
- Depth, windowed coverage and summary export
"""

import gzip
import logging
from itertools import zip_longest
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _open_text(path: Path, mode: str = 'r'):
    """Open plain or gzip-compressed text."""
    if path.suffix == '.gz':
        return gzip.open(path, mode + 't')
    return open(path, mode)


def _check_exists(path: Path, description: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"{description} not found: {path}")


# =============================================================================
# Reference
# =============================================================================

def parse_fasta_text(text: str, header_mode: str = "underscore") -> List[Tuple[str, str]]:
    """
    Split multi-FASTA text into ``(id, sequence)`` records.

    Args:
        text: FASTA content
        header_mode: "underscore" replaces spaces in the header with "_";
            "truncate" keeps the header up to the first space

    Returns:
        Records in file order, sequences uppercased with line breaks removed.
        Records with an empty sequence are kept.
    """
    if header_mode not in ("underscore", "truncate"):
        raise ValueError(f"Unknown header mode: {header_mode}")

    records = []
    for block in text.replace('\r', '\n').split('>')[1:]:
        header, sep, body = block.partition('\n')
        if not sep:
            continue
        if header_mode == "underscore":
            header = header.replace(' ', '_')
        else:
            header = header.split(' ', 1)[0]
        seq = "".join(body.split()).upper()
        records.append((header, seq))
    return records


def parse_reference(path: PathLike, header_mode: str = "underscore") -> List[Tuple[str, str]]:
    """
    Parse a (gzipped) multi-FASTA reference file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If no record is found
    """
    path = Path(path)
    _check_exists(path, "Reference FASTA")

    with _open_text(path) as f:
        records = parse_fasta_text(f.read(), header_mode)

    if not records:
        raise ValueError(f"No FASTA records found in {path}")

    logger.info(f"Loaded {len(records)} reference records from {path.name}")
    return records


# =============================================================================
# Reads
# =============================================================================

def iter_fastq(path: PathLike) -> Generator[Tuple[str, str, str], None, None]:
    """
    Iterate over a (gzipped) FASTQ file.

    Yields:
        (read_id, sequence, quality)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: On a truncated or malformed record
    """
    path = Path(path)
    _check_exists(path, "FASTQ")

    with _open_text(path) as f:
        while True:
            header = f.readline()
            if not header:
                break
            header = header.strip()
            if not header:
                continue
            seq = f.readline()
            plus = f.readline()
            qual = f.readline()
            if not qual:
                raise ValueError(f"Truncated FASTQ record '{header}' in {path}")
            if not header.startswith('@') or not plus.startswith('+'):
                raise ValueError(f"Malformed FASTQ record '{header}' in {path}")

            read_id = header[1:].split()[0] if len(header) > 1 else ""
            yield read_id, seq.strip(), qual.strip()


def iter_read_pairs(path_r1: PathLike, path_r2: PathLike) -> Generator[Tuple[str, str], None, None]:
    """
    Stream ``(read1_seq, read2_seq)`` from two mate FASTQ files.

    Raises:
        ValueError: If the files hold different numbers of records
    """
    missing = object()
    pairs = zip_longest(iter_fastq(path_r1), iter_fastq(path_r2), fillvalue=missing)
    for rec1, rec2 in pairs:
        if rec1 is missing or rec2 is missing:
            raise ValueError(f"Mate files have different record counts: {path_r1}, {path_r2}")
        yield rec1[1], rec2[1]


def iter_read_pair_files(
    read_files: Sequence[Tuple[PathLike, PathLike]],
) -> Generator[Tuple[str, str], None, None]:
    """Chain the pairs of several (R1, R2) file pairs."""
    for path_r1, path_r2 in read_files:
        logger.info(f"Reading pairs: {Path(path_r1).name}, {Path(path_r2).name}")
        yield from iter_read_pairs(path_r1, path_r2)


# =============================================================================
# Export
# =============================================================================

def depth_table(depth: np.ndarray, threshold: int = 0) -> pd.DataFrame:
    """1-based positions with depth above ``threshold``."""
    positions = np.flatnonzero(depth > threshold)
    return pd.DataFrame({
        "position": positions + 1,
        "depth": np.asarray(depth)[positions],
    })


def write_strand_depth(
    depth: np.ndarray,
    filepath: PathLike,
    threshold: int = 0,
) -> int:
    """
    Write a ``position<TAB>depth`` table without header.

    Returns:
        Number of rows written
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    df = depth_table(depth, threshold)
    df.to_csv(filepath, sep="\t", index=False, header=False)
    logger.info(f"Saved {len(df)} depth rows to {filepath.name}")
    return len(df)


def write_window_coverage(
    windows: Iterable[Tuple[int, str]],
    filepath: PathLike,
) -> int:
    """
    Write ``summed_depth<TAB>sequence`` rows, one per window.

    Returns:
        Number of windows written
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(list(windows), columns=["depth", "sequence"])
    df.to_csv(filepath, sep="\t", index=False, header=False)
    logger.info(f"Saved {len(df)} windows to {filepath.name}")
    return len(df)


def format_summary(
    k: int,
    depth_threshold: int,
    stats: Dict[str, int],
    total_depth: int,
    read_files: Sequence[Tuple[PathLike, PathLike]],
    reference_lengths: Dict[str, int],
) -> str:
    """Render the run summary report."""
    lines = [
        f"Kmer: {k}",
        f"The depth greater than {depth_threshold} was exported.",
        f"Total number of read pairs:\t{stats['total_pairs']}",
        f"Number of pairs mapped in good distance:\t{stats['accepted']}",
        f"Number of pairs mapped in bad distance:\t{stats['out_of_range']}",
        f"Number of pairs failed to be mapped:\t{stats['not_valid']}",
        f"  with N in the seed k-mer:\t{stats['ambiguous']}",
        f"  without k-mer hit:\t{stats['no_match']}",
        f"Number of pairs with a read shorter than k:\t{stats['short_reads']}",
        f"Sum of read length mapped:\t{total_depth}",
        "Read files loaded:",
    ]
    lines.extend(f"{r1}\t{r2}" for r1, r2 in read_files)
    lines.append("References: ")
    lines.extend(
        f"Sequence ID: {rid} Length: {length}"
        for rid, length in reference_lengths.items()
    )
    return "\n".join(lines) + "\n"


def write_summary(filepath: PathLike, report: str) -> None:
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(report)
    logger.info(f"Saved summary to {filepath.name}")


def output_paths(
    output_dir: PathLike,
    prefix: str,
    replicon_id: str,
) -> Dict[str, Path]:
    """
    Per-replicon output files.

    Plus-direction pairs come from reverse-strand transcripts in stranded
    (dUTP) libraries, hence ``_R`` for plus depth and ``_F`` for minus depth.
    """
    output_dir = Path(output_dir)
    name = replicon_id.replace('/', '_')
    return {
        "plus": output_dir / f"{prefix}_{name}_R.txt",
        "minus": output_dir / f"{prefix}_{name}_F.txt",
        "windows": output_dir / f"{prefix}_{name}_depthAndSeq3.txt",
    }


def summary_path(output_dir: PathLike, prefix: str) -> Path:
    return Path(output_dir) / f"{prefix}_summary.txt"
