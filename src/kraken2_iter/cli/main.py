"""
Main CLI entry point for kraken2-iter.

Validates options, prepares the database and inputs, then runs the search
phase (additional hash map) and the classify phase in order.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from kraken2_iter import __version__
from kraken2_iter.core.exceptions import (
    ConfigurationError,
    Kraken2IterError,
    NoInputFilesError,
    PhaseExecutionError,
)
from kraken2_iter.core.phases import PhaseState, PhaseTiming
from kraken2_iter.core.pipeline import run_pipeline
from kraken2_iter.models.config import RunConfig, RuntimeEnvironment

logger = logging.getLogger(__name__)

USAGE_EXIT_CODE = 64
ERROR_EXIT_CODE = 1

app = typer.Typer(
    name="kraken2-iter",
    help="Classify sequencing reads with an iteratively extended Kraken 2 database",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

_PHASE_MESSAGES = {
    PhaseState.BUILDING_MAP: "Additional hash map search",
    PhaseState.CLASSIFYING: "Classification",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"kraken2-iter version {__version__}")
        raise typer.Exit


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def report_phase(timing: PhaseTiming) -> None:
    """Print the duration of a completed phase."""
    label = _PHASE_MESSAGES.get(timing.state, timing.state.value)
    console.print(f"{label} completed in {timing.elapsed_seconds:.3f}s.")


def _print_error(error: Kraken2IterError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(error.message)}", highlight=False)
    if error.suggestion:
        err_console.print(f"\n[dim]{escape(error.suggestion)}[/dim]", highlight=False)


@app.command()
def classify(
    ctx: typer.Context,
    inputs: list[str] | None = typer.Argument(
        None,
        help="Input FASTA/FASTQ files (mate pairs in consecutive order with --paired)",
        show_default=False,
    ),
    database: str | None = typer.Option(
        None,
        "--db",
        help="Database directory or name (default: $KRAKEN2_DEFAULT_DB)",
    ),
    threads: int | None = typer.Option(
        None,
        "--threads",
        help="Number of threads (default: $KRAKEN2_NUM_THREADS or 1)",
        min=1,
    ),
    quick: bool = typer.Option(False, "--quick", help="Quick operation (use first hit or hits)"),
    unclassified_out: Path | None = typer.Option(
        None,
        "--unclassified-out",
        help="Print unclassified sequences to filename",
    ),
    classified_out: Path | None = typer.Option(
        None,
        "--classified-out",
        help="Print classified sequences to filename",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        help="Print per-read output to filename (default: stdout)",
    ),
    confidence: float = typer.Option(
        0.0,
        "--confidence",
        help="Confidence score threshold (0-1)",
    ),
    memory_mapping: bool = typer.Option(
        False,
        "--memory-mapping",
        help="Avoid loading the database into RAM",
    ),
    paired: bool = typer.Option(
        False,
        "--paired",
        help="Input files are paired-end mates",
    ),
    use_names: bool = typer.Option(
        False,
        "--use-names",
        help="Print scientific names instead of just taxids",
    ),
    gzip_compressed: bool = typer.Option(
        False,
        "--gzip-compressed",
        help="Input files are compressed with gzip",
    ),
    bzip2_compressed: bool = typer.Option(
        False,
        "--bzip2-compressed",
        help="Input files are compressed with bzip2",
    ),
    only_classified_output: bool = typer.Option(
        False,
        "--only-classified-output",
        help="Print no per-read output for unclassified sequences",
    ),
    minimum_base_quality: int = typer.Option(
        0,
        "--minimum-base-quality",
        help="Minimum base quality used in classification",
        min=0,
    ),
    report: Path | None = typer.Option(
        None,
        "--report",
        help="Print a report with aggregate counts/clade to file",
    ),
    use_mpa_style: bool = typer.Option(
        False,
        "--use-mpa-style",
        help="With --report, format report output like Kraken 1's kraken-mpa-report",
    ),
    report_zero_counts: bool = typer.Option(
        False,
        "--report-zero-counts",
        help="With --report, report counts for ALL taxa, even if counts are zero",
    ),
    disable_classification: bool = typer.Option(
        False,
        "--disable-classification",
        help="Only build the additional hash map, skip classification",
    ),
    disable_additional_map: bool = typer.Option(
        False,
        "--disable-additional-map",
        help="Skip the additional hash map search phase",
    ),
    keep_map: bool = typer.Option(
        False,
        "--keep-map",
        help="Keep the additional hash map from a previous run",
    ),
    max_iteration: int = typer.Option(
        1,
        "--max-iteration",
        help="Maximum number of search iterations",
        min=1,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Classify reads in two phases.

    The search phase extends the additional hash map stored in the database
    directory; the classify phase then assigns taxa using both the hash table
    and the additional map. Compressed input (gzip/bzip2) is detected from the
    first file and decompressed on the fly.

    Example:

        kraken2-iter --db /path/to/db --paired --report sample.kreport \\
            sample_R1.fastq.gz sample_R2.fastq.gz
    """
    configure_logging(verbose)

    try:
        environment = RuntimeEnvironment.from_environ()
        config = RunConfig(
            database=database,
            threads=environment.resolve_threads(threads),
            quick=quick,
            paired=paired,
            use_names=use_names,
            memory_mapping=memory_mapping,
            only_classified_output=only_classified_output,
            use_mpa_style=use_mpa_style,
            report_zero_counts=report_zero_counts,
            disable_classification=disable_classification,
            disable_additional_map=disable_additional_map,
            keep_map=keep_map,
            gzip_compressed=gzip_compressed,
            bzip2_compressed=bzip2_compressed,
            confidence=confidence,
            minimum_base_quality=minimum_base_quality,
            max_iteration=max_iteration,
            unclassified_out=unclassified_out,
            classified_out=classified_out,
            output=output,
            report=report,
        )
        logger.debug("Run configuration: %r", config)
        run_pipeline(
            config,
            inputs or [],
            environment,
            on_phase_complete=report_phase,
        )
    except NoInputFilesError as e:
        _print_error(e)
        err_console.print(ctx.get_usage(), markup=False, highlight=False)
        raise typer.Exit(code=USAGE_EXIT_CODE) from None
    except ConfigurationError as e:
        _print_error(e)
        err_console.print("[dim]Try 'kraken2-iter --help' for help.[/dim]")
        raise typer.Exit(code=ERROR_EXIT_CODE) from None
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] Invalid configuration\n{escape(str(e))}", highlight=False)
        raise typer.Exit(code=ERROR_EXIT_CODE) from None
    except PhaseExecutionError as e:
        _print_error(e)
        raise typer.Exit(code=e.exit_code) from None
    except Kraken2IterError as e:
        _print_error(e)
        raise typer.Exit(code=ERROR_EXIT_CODE) from None


def main() -> None:
    app()


if __name__ == "__main__":
    main()
