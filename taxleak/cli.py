#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for taxleak.

This module provides the main CLI entry point and all subcommands for
taxonomic leakage accounting on aligned reads.
"""

import logging
import sys
from pathlib import Path

import click
import yaml

from .version import __version__
from .config.schema import load_config, save_config_template, validate_config
from .config.settings import LeakageSettings
from .errors import TaxLeakError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def _setup_logging(verbose: bool, quiet: bool, config: dict) -> None:
    """Configure root logging from CLI flags, falling back to the config file."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, str(config['logging']['level']).upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stderr)]
    log_file = config['logging'].get('log_file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT,
                        handlers=handlers, force=True)


def _fail(message: str) -> None:
    click.echo(f"✗ Error: {message}", err=True)
    sys.exit(1)


def _settings(ctx, min_mapq=None, on_undefined=None) -> LeakageSettings:
    """Build run settings from the loaded config plus command-line overrides."""
    config = ctx.obj['CONFIG']
    try:
        settings = LeakageSettings.from_config(config, min_mapq=min_mapq)
        if on_undefined is not None:
            settings = LeakageSettings(
                min_mapq=settings.min_mapq,
                on_malformed=settings.on_malformed,
                on_undefined=on_undefined,
                report_cross_gene=settings.report_cross_gene,
            )
    except ValueError as e:
        _fail(str(e))
    return settings


def _source(path, settings):
    from .io import AlignmentSource
    return AlignmentSource(path, on_malformed=settings.on_malformed)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file (YAML)')
@click.pass_context
def main(ctx, verbose, quiet, config_file):
    """
    taxleak: taxonomic leakage accounting for aligned reads

    Counts how often reads from one reference taxon/gene are aligned to
    another, normalizes those counts and ranks taxa by leakage so that
    unreliable reference genes can be masked.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(Path(config_file) if config_file else None)
    except TaxLeakError as e:
        _fail(str(e))

    errors = validate_config(config)
    if errors:
        for error in errors:
            click.echo(f"  • {error}", err=True)
        _fail("invalid configuration")

    ctx.obj['CONFIG'] = config
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet
    _setup_logging(verbose, quiet, config)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='taxleak_config.yaml',
              help='Output configuration file path')
def config_init(output):
    """Write a configuration file with every parameter at its default."""
    try:
        save_config_template(Path(output))
    except OSError as e:
        _fail(f"cannot write configuration: {e}")
    click.echo(f"✓ Configuration file created: {output}")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    try:
        config = load_config(Path(config_file))
    except TaxLeakError as e:
        _fail(str(e))

    errors = validate_config(config)
    if errors:
        click.echo("✗ Configuration validation failed:", err=True)
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo(f"  Min mapq: {config['filtering']['min_mapq']}")
    click.echo(f"  Malformed input: {config['records']['on_malformed']}")
    click.echo(f"  Undefined normalization: {config['normalization']['on_undefined']}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
def config_show(config_file):
    """Display the effective configuration (defaults merged with the file)."""
    try:
        config = load_config(Path(config_file))
    except TaxLeakError as e:
        _fail(str(e))
    click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))


# ============================================================================
# Accounting Commands
# ============================================================================

input_option = click.option('--input', '-i', 'input_path', required=True,
                            type=click.Path(exists=True, dir_okay=False),
                            help='Input alignments (.sam, .sam.gz or .bam)')
output_option = click.option('--output', '-o', type=click.Path(), default='-',
                             help='Output TSV (default: stdout)')
mapq_option = click.option('--min-mapq', '-m', type=click.IntRange(0, 255), default=None,
                           help='Ignore records with mapping quality strictly below this '
                                '(default: filtering.min_mapq from config)')


@main.command()
@input_option
@output_option
@mapq_option
@click.pass_context
def pairwise(ctx, input_path, output, min_mapq):
    """
    Count leaked reads per ordered (from, to) taxon pair.

    Writes one line per pair: from, to, total and the per-gene counts on
    the target taxon. The output can be reloaded with `normalize --table`.

    Examples:
        taxleak pairwise -i aligned.sam.gz -o pairs.tsv
    """
    from .core import PairwiseLeakage, ScanStats
    from .io import write_pairwise

    settings = _settings(ctx, min_mapq=min_mapq)
    stats = ScanStats()
    try:
        table = PairwiseLeakage.from_records(_source(input_path, settings), settings, stats)
    except TaxLeakError as e:
        _fail(str(e))
    stats.log_summary('pairwise')

    with click.open_file(output, 'w') as handle:
        written = write_pairwise(table, handle)
    logger.info(f"Wrote {written:,} taxon pairs")


@main.command()
@click.option('--input', '-i', 'input_path', type=click.Path(exists=True, dir_okay=False),
              help='Input alignments (.sam, .sam.gz or .bam)')
@click.option('--table', '-t', 'table_path', type=click.Path(exists=True, dir_okay=False),
              help='Pairwise table written by `taxleak pairwise`')
@output_option
@mapq_option
@click.option('--on-undefined', type=click.Choice(['skip', 'zero']), default=None,
              help='Handling of zero or missing normalizers (default: from config)')
@click.pass_context
def normalize(ctx, input_path, table_path, output, min_mapq, on_undefined):
    """
    Normalize incoming leakage by each source taxon's outgoing total.

    Writes one line per target taxon: taxon, normalized total and the
    per-gene ratios, lowest total first.

    Examples:
        taxleak normalize -i aligned.sam -o normalized.tsv
        taxleak normalize --table pairs.tsv -o normalized.tsv
    """
    from .core import PairwiseLeakage, ScanStats
    from .io import load_pairwise, write_normalized

    if bool(input_path) == bool(table_path):
        _fail("provide exactly one of --input or --table")

    settings = _settings(ctx, min_mapq=min_mapq, on_undefined=on_undefined)
    stats = ScanStats()
    try:
        if table_path:
            table = load_pairwise(table_path)
        else:
            table = PairwiseLeakage.from_records(_source(input_path, settings), settings, stats)
            stats.log_summary('pairwise')
        profiles = table.normalize_incoming(settings.on_undefined, stats)
    except TaxLeakError as e:
        _fail(str(e))

    if stats.undefined_normalizations:
        logger.warning(f"{stats.undefined_normalizations:,} undefined normalizations "
                       f"({settings.on_undefined.value})")

    with click.open_file(output, 'w') as handle:
        written = write_normalized(profiles, handle)
    logger.info(f"Wrote {written:,} normalized taxa")


def _build_ledger(input_path, settings, scheme):
    """Run the raw or fractional taxon-centric accounting."""
    from .core import ScanStats, count_gene_leaks, count_query_totals, count_fractional_gene_leaks

    source = _source(input_path, settings)
    if scheme == 'raw':
        stats = ScanStats()
        ledger = count_gene_leaks(source, settings, stats)
        stats.log_summary('raw counts')
        return ledger

    totals_stats = ScanStats()
    totals = count_query_totals(source, settings, totals_stats)
    totals_stats.log_summary('query totals')

    stats = ScanStats()
    ledger = count_fractional_gene_leaks(source, totals, settings, stats)
    stats.log_summary('fractional counts')
    return ledger


scheme_option = click.option('--scheme', type=click.Choice(['raw', 'fractional']), default='fractional',
                             help='raw: every read counts 1; fractional: every read counts '
                                  '1 / reads from its gene (two passes)')


@main.command()
@input_option
@output_option
@mapq_option
@scheme_option
@click.option('--threshold', type=float, default=None,
              help='A gene is leaked on when its incoming value exceeds this '
                   '(default: ranking.leak_threshold)')
@click.option('--worst-first/--worst-last', default=None,
              help='Order of the ranked taxa (default: ranking.worst_first)')
@click.option('--on-undefined', type=click.Choice(['skip', 'zero']), default=None,
              help='Handling of missing read totals (fractional scheme)')
@click.pass_context
def taxa(ctx, input_path, output, min_mapq, scheme, threshold, worst_first, on_undefined):
    """
    Per-taxon, per-gene correct/incoming/outgoing leakage.

    Writes three lines per taxon (correct, incoming, outgoing), each with
    taxon id, good gene count, leaked gene count and per-gene values.
    Taxa are ranked by number of leaked-on genes, then total incoming.

    Examples:
        taxleak taxa -i aligned.sam.gz --scheme raw -o taxa.tsv
    """
    from .io import write_taxa

    config = ctx.obj['CONFIG']
    settings = _settings(ctx, min_mapq=min_mapq, on_undefined=on_undefined)
    threshold = config['ranking']['leak_threshold'] if threshold is None else threshold
    worst_first = config['ranking']['worst_first'] if worst_first is None else worst_first

    try:
        ledger = _build_ledger(input_path, settings, scheme)
    except TaxLeakError as e:
        _fail(str(e))

    with click.open_file(output, 'w') as handle:
        written = write_taxa(ledger, handle, threshold=threshold, worst_first=worst_first)
    logger.info(f"Wrote {written:,} taxa ({scheme} scheme)")


@main.command()
@input_option
@output_option
@mapq_option
@click.option('--scheme', type=click.Choice(['raw', 'fractional']), default='raw',
              help='Counting scheme for incoming leakage')
@click.option('--leak-threshold', type=float, default=None,
              help='Tolerated incoming leakage per gene (default: masking.leak_threshold)')
@click.option('--min-genes', type=click.IntRange(min=0), default=None,
              help='Minimum unmasked genes to keep a taxon (default: masking.min_genes)')
@click.pass_context
def mask(ctx, input_path, output, min_mapq, scheme, leak_threshold, min_genes):
    """
    List genes to mask and taxa to drop.

    A gene is masked when its incoming leakage exceeds the tolerance; a
    taxon is dropped when fewer than --min-genes genes survive.

    Examples:
        taxleak mask -i aligned.sam --leak-threshold 10 --min-genes 60
    """
    from .core import mask_genes
    from .io import write_mask

    config = ctx.obj['CONFIG']
    settings = _settings(ctx, min_mapq=min_mapq)
    leak_threshold = config['masking']['leak_threshold'] if leak_threshold is None else leak_threshold
    min_genes = config['masking']['min_genes'] if min_genes is None else min_genes

    try:
        ledger = _build_ledger(input_path, settings, scheme)
        decisions = mask_genes(ledger, leak_threshold=leak_threshold, min_genes=min_genes)
    except (TaxLeakError, ValueError) as e:
        _fail(str(e))

    with click.open_file(output, 'w') as handle:
        write_mask(decisions, handle)


@main.command()
@input_option
@output_option
@mapq_option
@click.option('--labels', '-l', type=click.Path(exists=True, dir_okay=False),
              help='Taxon label map (id in column 2, lineage in column 4)')
@click.option('--top-pairs', type=click.IntRange(min=0), default=10,
              help='Log this many most frequent leak pairs')
@click.pass_context
def summarize(ctx, input_path, output, min_mapq, labels, top_pairs):
    """
    Gene-agnostic per-taxon read tallies.

    Writes taxon, own reads, correct, outgoing and incoming counts with
    their fractions of the taxon's own reads (NA when it has none).

    Examples:
        taxleak summarize -i aligned.sam --labels genome2taxid.tsv
    """
    from .core import ScanStats, summarize_taxa
    from .io import read_labels, write_summary

    settings = _settings(ctx, min_mapq=min_mapq)
    stats = ScanStats()
    try:
        label_map = read_labels(labels) if labels else None
        summary = summarize_taxa(_source(input_path, settings), settings, stats)
    except TaxLeakError as e:
        _fail(str(e))
    stats.log_summary('summary')

    for (a, b), events in summary.top_pairs(top_pairs):
        if label_map is not None:
            logger.info(f"{label_map.get(a, a)} <-> {label_map.get(b, b)}: {events:,} leaked reads")
        else:
            logger.info(f"{a} <-> {b}: {events:,} leaked reads")

    with click.open_file(output, 'w') as handle:
        write_summary(summary, handle, labels=label_map)


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"taxleak v{__version__}")
    click.echo("\nDependencies:")

    from importlib.metadata import PackageNotFoundError, version as dist_version

    for label, dist in (("NumPy", "numpy"), ("PyYAML", "PyYAML"), ("Click", "click")):
        try:
            click.echo(f"  {label}: {dist_version(dist)}")
        except PackageNotFoundError:
            click.echo(f"  {label}: not installed")


if __name__ == '__main__':
    sys.exit(main())
