"""
ngspairmap CLI - Command Line Interface for paired-end span mapping.

Usage:
    pairmap <command> [options]
"""

import logging

import click

from ngspairmap import __version__


@click.group()
@click.version_option(version=__version__, prog_name="ngspairmap")
def main():
    """ngspairmap - map read pairs by exact k-mer seeds and count span depth.

    Use 'pairmap <command> --help' for detailed usage of each command.
    """
    pass


@main.command("map")
@click.option("-r", "--reference", required=True, help="Reference genome multi-FASTA")
@click.option("-1", "--fastq1", "fastq1", required=True, multiple=True,
              help="Read 1 FASTQ (repeat for several libraries)")
@click.option("-2", "--fastq2", "fastq2", required=True, multiple=True,
              help="Read 2 FASTQ (same order as -1)")
@click.option("-o", "--output", required=True, help="Output directory")
@click.option("-p", "--prefix", help="Output file prefix")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              help="Config file (YAML/JSON)")
@click.option("-k", "--kmer", type=int, help="Seed k-mer length [21]")
@click.option("--min-distance", type=int, help="Exclusive lower bound of valid distance [20]")
@click.option("--max-distance", type=int, help="Exclusive upper bound of valid distance [2000]")
@click.option("--depth-threshold", type=int, help="Export positions with depth above this [0]")
@click.option("--circular-marker", help="Header substring marking circular replicons")
@click.option("--header-mode", type=click.Choice(["underscore", "truncate"]),
              help="How FASTA headers become replicon ids")
@click.option("--window-size", type=int, help="Coverage window size [120]")
@click.option("--window-margin", type=int, help="Window margin excluded from depth [10]")
@click.option("--window-step", type=int, help="Window step [10]")
@click.option("--seed", type=int, help="Random seed for tie-breaks")
@click.option("--log-file", help="Also write the log to this file")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def map_reads(reference, fastq1, fastq2, output, prefix, config_file, kmer,
              min_distance, max_distance, depth_threshold, circular_marker,
              header_mode, window_size, window_margin, window_step, seed,
              log_file, verbose):
    """Map paired-end reads and export strand-specific span depth.

    Each pair is placed by exact matching of the first k bases of both
    reads; the placement with the shortest end-to-end distance is kept and
    every base between the two 5' ends is counted.
    """
    import yaml

    from ngspairmap.mapping.pipeline import run_mapping
    from ngspairmap.utils.config import MappingConfig, get_default_config
    from ngspairmap.utils.logging_utils import setup_logger

    setup_logger(level=logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    if len(fastq1) != len(fastq2):
        raise click.BadParameter("-1 and -2 must be given the same number of times")

    try:
        config = MappingConfig.from_file(config_file) if config_file else get_default_config()
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot load config {config_file}: {e}")

    # CLI parameters override the config file
    overrides = [
        (config.index, "k", kmer),
        (config.index, "circular_marker", circular_marker),
        (config.index, "header_mode", header_mode),
        (config.distance, "min_distance", min_distance),
        (config.distance, "max_distance", max_distance),
        (config.window, "size", window_size),
        (config.window, "margin", window_margin),
        (config.window, "step", window_step),
        (config.output, "prefix", prefix),
        (config.output, "depth_threshold", depth_threshold),
        (config, "seed", seed),
    ]
    for target, name, value in overrides:
        if value is not None:
            setattr(target, name, value)

    problems = config.validate()
    if problems:
        raise click.UsageError("; ".join(problems))

    try:
        stats = run_mapping(reference, list(zip(fastq1, fastq2)), output, config)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(
        f"{stats.total_pairs} pairs: {stats.accepted} accepted, "
        f"{stats.out_of_range} bad distance, {stats.not_valid} not mapped, "
        f"{stats.short_reads} short"
    )


@main.command("init-config")
@click.option("-o", "--output", required=True, help="Output YAML/JSON file")
def init_config(output):
    """Write the default configuration to a file."""
    from ngspairmap.utils.config import get_default_config

    config = get_default_config()
    if output.endswith(('.yaml', '.yml')):
        config.to_yaml(output)
    else:
        config.to_json(output)
    click.echo(f"Default configuration written to {output}")


if __name__ == "__main__":
    main()
