"""
Main CLI entry point for hkl-merge using Click.

Usage:
    hkl-merge detect FILE
    hkl-merge find --search-path DIR...
    hkl-merge stats FILE [--anomalous]
    hkl-merge validate FILE
    hkl-merge merge FILE --output DIR [--anomalous] [--format parquet|json]
    hkl-merge batch --search-path DIR... --output DIR
"""

from __future__ import annotations

import functools
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import click
from pydantic import ValidationError

from hklmerge import __version__
from hklmerge.config import DEFAULT_MEAN_LABELS, MergeOptions
from hklmerge.enums import DataKind
from hklmerge.errors import IngestionError
from hklmerge.tools import FileFinder, detect_file
from hklmerge.validation import DataValidator
from hklmerge.workflow import MergePipeline, MergeResult
from hklmerge.writers import write_result_to_json, write_result_to_parquet


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class Config:
    """Shared configuration for CLI commands."""

    def __init__(self) -> None:
        self.verbose = False
        self.debug = False


pass_config = click.make_pass_decorator(Config, ensure=True)


def merge_options(func: Callable) -> Callable:
    """Add the options shared by all commands that merge data."""
    options = [
        click.option(
            "--kind",
            type=click.Choice([k.value for k in DataKind]),
            default=None,
            help="Intensities to read (default: what the file provides)",
        ),
        click.option("--anomalous", is_flag=True, help="Keep I(+) and I(-) separate"),
        click.option(
            "--keep-absences",
            is_flag=True,
            help="Keep systematically absent reflections",
        ),
        click.option(
            "--labels",
            default=",".join(DEFAULT_MEAN_LABELS),
            show_default=True,
            help="MTZ mean-intensity labels, in order of preference",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_options(
    kind: Optional[str],
    anomalous: bool,
    keep_absences: bool,
    labels: str,
) -> MergeOptions:
    """Turn command-line values into MergeOptions."""
    try:
        return MergeOptions.from_label_string(
            labels,
            kind=DataKind(kind) if kind else None,
            anomalous=anomalous,
            remove_absences=not keep_absences,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--labels") from e


def _run_pipeline(file: str | Path, options: MergeOptions) -> MergeResult:
    """Merge a file, reporting library errors as ClickException."""
    try:
        return MergePipeline(options).run(file)
    except (IngestionError, FileNotFoundError) as e:
        raise click.ClickException(f"Error merging {file}: {e}") from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.version_option(version=__version__, prog_name="hkl-merge")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """Normalize and merge crystallographic reflection intensities."""
    ctx.ensure_object(Config)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    setup_logging(verbose=verbose, debug=debug)


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def detect(config: Config, file: str, as_json: bool) -> None:
    """Detect the type of a reflection file.

    Example:
        hkl-merge detect XDS_ASCII.HKL
    """
    info = detect_file(Path(file))

    if as_json:
        output = {
            "path": info.path,
            "filename": info.filename,
            "file_type": info.file_type.value,
            "size": info.size,
            "supported": info.is_supported,
        }
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"File: {info.filename}")
        click.echo(f"Path: {info.path}")
        click.echo(f"Type: {info.file_type.value}")
        click.echo(f"Size: {info.size} bytes")


@cli.command()
@click.option(
    "--search-path",
    "-s",
    "search_paths",
    multiple=True,
    type=click.Path(exists=True),
    help="Directory to search (can be specified multiple times)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def find(config: Config, search_paths: tuple[str, ...], as_json: bool) -> None:
    """Find reflection files.

    Searches directories for MTZ, mmCIF, mmJSON and XDS_ASCII files.

    Example:
        hkl-merge find -s /data/run1 -s /data/run2
    """
    paths = list(search_paths) if search_paths else ["."]
    files = FileFinder(paths).find_files()

    if as_json:
        output = [
            {"path": info.path, "file_type": info.file_type.value, "size": info.size}
            for info in files
        ]
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"Found {len(files)} reflection file(s)")
        for info in files:
            click.echo(f"  [{info.file_type.value}] {info.path}")


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@merge_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def stats(
    config: Config,
    file: str,
    kind: Optional[str],
    anomalous: bool,
    keep_absences: bool,
    labels: str,
    as_json: bool,
) -> None:
    """Merge a file and report counts and resolution range.

    Example:
        hkl-merge stats --anomalous aimless_unmerged.mtz
    """
    options = _build_options(kind, anomalous, keep_absences, labels)
    result = _run_pipeline(file, options)

    if as_json:
        _print_result_json(result)
    else:
        click.echo(result.summary())


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@merge_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def validate(
    config: Config,
    file: str,
    kind: Optional[str],
    anomalous: bool,
    keep_absences: bool,
    labels: str,
    as_json: bool,
) -> None:
    """Merge a file and validate the result without writing.

    Reports any errors or warnings found; exits with status 1 on errors.

    Example:
        hkl-merge validate scaled.mtz
    """
    logger = logging.getLogger("validate")

    options = _build_options(kind, anomalous, keep_absences, labels)
    result = _run_pipeline(file, options)

    logger.info("Validating...")
    validation = DataValidator().validate(result)

    if as_json:
        output = {
            "is_valid": validation.is_valid,
            "errors": [
                {"field": i.field, "message": i.message, "severity": i.severity}
                for i in validation.errors
            ],
            "warnings": [
                {"field": i.field, "message": i.message, "severity": i.severity}
                for i in validation.warnings
            ],
            "merge": {
                "unique_reflections": len(result.intensities) if result.intensities else 0,
                "merge_warnings": result.warnings,
            },
        }
        click.echo(json.dumps(output, indent=2))
    else:
        status = (
            click.style("PASSED", fg="green")
            if validation.is_valid
            else click.style("FAILED", fg="red")
        )
        click.echo(f"Validation: {status}")
        click.echo()

        if validation.errors:
            click.echo(click.style("Errors:", fg="red"))
            for issue in validation.errors:
                click.echo(f"  ✗ {issue.field}: {issue.message}")

        if validation.warnings:
            click.echo(click.style("Warnings:", fg="yellow"))
            for issue in validation.warnings:
                click.echo(f"  ⚠ {issue.field}: {issue.message}")

        click.echo()
        click.echo(result.summary())

    if not validation.is_valid:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(),
    help="Output directory",
)
@merge_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["parquet", "json"]),
    default="parquet",
    show_default=True,
    help="Output file format",
)
@click.option("--dry-run", is_flag=True, help="Merge but don't write output")
@click.option("--json", "as_json", is_flag=True, help="Output result as JSON")
@pass_config
def merge(
    config: Config,
    file: str,
    output: str,
    kind: Optional[str],
    anomalous: bool,
    keep_absences: bool,
    labels: str,
    output_format: str,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Merge a reflection file and write the result.

    Example:
        hkl-merge merge XDS_ASCII.HKL --anomalous --output ./merged/
    """
    logger = logging.getLogger("merge")

    options = _build_options(kind, anomalous, keep_absences, labels)
    result = _run_pipeline(file, options)

    for warning in result.warnings:
        click.echo(click.style(f"Warning: {warning}", fg="yellow"), err=True)

    if as_json:
        _print_result_json(result)
    else:
        click.echo(result.summary())

    if dry_run:
        logger.info("Dry run - skipping output")
        click.echo(click.style("\nDry run - no files written", fg="cyan"))
        return

    logger.info(f"Writing to: {output}")
    paths = _write_result(result, Path(output), output_format)
    click.echo(click.style("\nOutput files:", fg="green"))
    for table_name, path in paths.items():
        click.echo(f"  {table_name}: {path}")


@cli.command()
@click.option(
    "--search-path",
    "-s",
    "search_paths",
    multiple=True,
    required=True,
    type=click.Path(exists=True),
    help="Directory to search (can be specified multiple times)",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(),
    help="Output directory",
)
@merge_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["parquet", "json"]),
    default="parquet",
    show_default=True,
    help="Output file format",
)
@click.option("--json", "as_json", is_flag=True, help="Output result as JSON")
@pass_config
def batch(
    config: Config,
    search_paths: tuple[str, ...],
    output: str,
    kind: Optional[str],
    anomalous: bool,
    keep_absences: bool,
    labels: str,
    output_format: str,
    as_json: bool,
) -> None:
    """Merge every reflection file found in the search paths.

    Files are processed one after another; a file that cannot be merged
    is reported and skipped. Exits with status 1 if any file failed.

    Example:
        hkl-merge batch -s /data/collected -o /data/merged --anomalous
    """
    logger = logging.getLogger("batch")

    options = _build_options(kind, anomalous, keep_absences, labels)
    files = FileFinder(list(search_paths)).find_files()
    logger.info(f"Found {len(files)} reflection file(s)")

    succeeded: dict[str, dict[str, str]] = {}
    failed: dict[str, str] = {}
    for info in files:
        try:
            result = _run_pipeline(info.path, options)
        except click.ClickException as e:
            failed[info.path] = e.message
            continue
        paths = _write_result(result, Path(output), output_format)
        succeeded[info.path] = {name: str(path) for name, path in paths.items()}

    if as_json:
        click.echo(json.dumps({"merged": succeeded, "failed": failed}, indent=2))
    else:
        click.echo(f"Merged {len(succeeded)} of {len(files)} file(s)")
        for path, outputs in succeeded.items():
            click.echo(f"  ✓ {path} -> {outputs.get('intensities')}")
        for path, message in failed.items():
            click.echo(click.style(f"  ✗ {message}", fg="red"))

    if failed:
        sys.exit(1)


def _write_result(result: MergeResult, output_dir: Path, output_format: str) -> dict[str, Path]:
    """Write a merge result in the requested format."""
    try:
        if output_format == "json":
            return write_result_to_json(result, output_dir)
        return write_result_to_parquet(result, output_dir)
    except OSError as e:
        raise click.ClickException(f"Error writing output: {e}") from e


def _print_result_json(result: MergeResult) -> None:
    """Print a merge result as JSON."""
    output: dict = {
        "source_file": result.source_file,
        "dataset": None,
        "warnings": result.warnings,
    }
    if result.dataset:
        output["dataset"] = result.dataset.model_dump(mode="json", exclude_none=True)
    click.echo(json.dumps(output, indent=2))


def app(args: Optional[list[str]] = None) -> int:
    """
    Main application entry point (for testing).

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success)
    """
    try:
        cli(args, standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return 1
    except click.exceptions.Abort:
        return 1
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
