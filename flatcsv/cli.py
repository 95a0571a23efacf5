"""
Command line entry point.

    flatcsv export people.json -o people.csv --rows
    flatcsv binarize people.jsonl --skip 1
"""

import sys
from pathlib import Path

import click

from .errors import FlatCsvError
from .exporter import Exporter
from .logging_setup import setup_logging
from .models import ExportOptions
from .normalize import load_records
from .rules import DEFAULT_SEPARATOR
from .settings import get_settings


def _load(input_file: Path):
    records, report = load_records(input_file.read_bytes(), input_file.name)
    if report["decode_fallback"]:
        click.echo(f"warning: {input_file} decoded with replacement characters", err=True)
    return records


def _options(**kwargs) -> ExportOptions:
    try:
        return ExportOptions(**kwargs)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _run(action, output: Path):
    """Run ``action(target)`` against ``output`` or stdout, mapping failures to exit 1."""
    try:
        action(output if output is not None else sys.stdout)
    except FlatCsvError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option('--log-level', default=None, help='Logging level (default: FLATCSV_LOG_LEVEL or INFO)')
def cli(log_level):
    """Flatten nested JSON documents into CSV tables."""
    settings = get_settings()
    setup_logging(log_level=log_level or settings.LOG_LEVEL, log_dir=settings.LOG_DIR)


@cli.command('export')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output CSV file (default: stdout)')
@click.option('--columns/--rows', default=True,
              help='Lists become indexed columns (default) or one row per element')
@click.option('--auto', 'auto_map', is_flag=True, default=False,
              help='Ignore field policies, export every field with rows fan-out')
@click.option('--stream', is_flag=True, default=False,
              help="Write each object as soon as it is mapped; the header then only has the first object's columns")
@click.option('--separator', '-s', default=DEFAULT_SEPARATOR, show_default=True)
def export_command(input_file, output, columns, auto_map, stream, separator):
    """
    Export INPUT_FILE (.json or .jsonl) as CSV.

    \b
    Examples:
      flatcsv export orders.json -o orders.csv
      flatcsv export orders.jsonl --rows
      flatcsv export big.jsonl --stream -o big.csv
    """
    options = _options(separator=separator, treat_enumerables_as_columns=columns, auto_map=auto_map,
                       flush_each_object=stream)
    exporter = Exporter(options)
    generate = exporter.generate_csv_auto_map if auto_map else exporter.generate_csv
    _run(lambda target: generate(_load(input_file), target), output)


@cli.command('binarize')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output CSV file (default: stdout)')
@click.option('--skip', default=0, type=click.IntRange(min=0), show_default=True,
              help='Leading columns passed through unchanged')
@click.option('--columns/--rows', default=True)
@click.option('--separator', '-s', default=DEFAULT_SEPARATOR, show_default=True)
def binarize_command(input_file, output, skip, columns, separator):
    """Export INPUT_FILE as one-hot indicator columns."""
    options = _options(separator=separator, treat_enumerables_as_columns=columns, first_columns_to_skip=skip)
    exporter = Exporter(options)
    _run(lambda target: exporter.generate_binary_format(_load(input_file), target), output)


def main():
    cli()


if __name__ == '__main__':
    main()
