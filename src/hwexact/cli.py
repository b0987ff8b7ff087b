"""Command-line interface for hwexact.

This module defines the Click-based CLI for the hwexact package,
providing commands for running the exact Hardy-Weinberg test on a
genotype table, validating input files, and re-plotting diagnostics.
"""

from __future__ import annotations

import contextlib
import signal
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console

from hwexact import __version__
from hwexact.analysis.randomization import run_randomization, run_replicates
from hwexact.core.models import DEFAULT_MAX_ALLELES, RandomizationParameters
from hwexact.core.stats import expected_genotype_counts, observed_log_probability
from hwexact.io.readers import read_input
from hwexact.io.summary import RandomizationSummary, write_summary, write_summary_json
from hwexact.io.writers import format_genotype_table, write_batches_tsv
from hwexact.utils.errors import ChainCancelled, HWEError, MalformedInput
from hwexact.utils.logging import (
    chain_progress,
    print_error,
    print_file_created,
    print_info,
    print_stats,
    print_success,
    print_warning,
    setup_logging,
)
from hwexact.utils.validation import validate_output_path

if TYPE_CHECKING:
    from collections.abc import Iterator

console = Console(stderr=True)

# Context settings for all commands
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

# Exit status after Ctrl-C
EXIT_CANCELLED = 130


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="hwexact")
@click.option(
    "--verbose", "-v", is_flag=True, default=False, help="Enable verbose output"
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """hwexact: exact test for Hardy-Weinberg equilibrium.

    Estimate the exact p-value of a multi-allelic genotype table under
    Hardy-Weinberg proportions by Markov chain Monte Carlo.

    \b
    Quick start:
        hwexact run marker.dat -o results

    \b
    Common workflows:
        hwexact check marker.dat                      # Validate input, show table
        hwexact run marker.dat --seed 42 -o results   # Reproducible run
        hwexact plot --batches results_batches.tsv -o results
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level)


@contextlib.contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl-C into a cancellation flag polled by the chain."""
    cancelled = threading.Event()

    def handler(signum: int, frame: object) -> None:
        cancelled.set()

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # Not the main thread; leave the default behaviour in place
        yield cancelled
        return

    try:
        yield cancelled
    finally:
        signal.signal(signal.SIGINT, previous)


def _show_table(rows: list[list[float]], title: str, precision: int = 0) -> None:
    console.print(f"\n[bold]{title}[/bold]\n")
    console.print(format_genotype_table(rows, precision=precision), highlight=False)


@cli.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    metavar="INPUT",
)
@click.option(
    "--max-alleles",
    default=DEFAULT_MAX_ALLELES,
    show_default=True,
    type=click.IntRange(min=3),
    metavar="INT",
    help="Largest number of alleles accepted for a marker.",
)
@click.pass_context
def check(ctx: click.Context, input_file: Path, max_alleles: int) -> None:
    """Validate an input file and show the genotype table.

    Reads the table and randomization parameters without running the
    chain, then prints the observed and expected genotype counts, the
    allele counts, and the log-probability of the observed table.

    \b
    Example:
        hwexact check marker.dat
    """
    try:
        hwe = read_input(input_file, max_alleles=max_alleles)
    except MalformedInput as e:
        e.display()
        raise SystemExit(1) from e

    table = hwe.table
    _show_table(table.rows(), "Observed genotype frequencies:")
    _show_table(expected_genotype_counts(table), "Expected genotype frequencies:", 2)
    console.print()

    print_stats(
        {
            "Alleles": table.n_alleles,
            "Individuals": table.total(),
            "Allele counts": " ".join(str(n) for n in table.allele_counts()),
            "ln P(observed)": observed_log_probability(table),
            "Burn-in steps": hwe.params.step,
            "Batches": hwe.params.group,
            "Batch size": hwe.params.size,
        },
        title="Input Summary",
    )
    print_success(f"{input_file.name} is a valid input file")


@cli.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    metavar="INPUT",
)
@click.option(
    "--out",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    metavar="PREFIX",
    help="Output prefix. Defaults to the input path without its suffix.",
)
@click.option(
    "--steps",
    type=int,
    default=None,
    metavar="INT",
    help="Burn-in (de-memorization) steps. Overrides the input file.",
)
@click.option(
    "--batches",
    type=int,
    default=None,
    metavar="INT",
    help="Number of batches. Overrides the input file.",
)
@click.option(
    "--batch-size",
    type=int,
    default=None,
    metavar="INT",
    help="Iterations per batch. Overrides the input file.",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    metavar="INT",
    help="Random seed. Runs with the same seed are identical.",
)
@click.option(
    "--chains",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    metavar="INT",
    help="Independent replicate chains whose batches are pooled.",
)
@click.option(
    "--max-alleles",
    default=DEFAULT_MAX_ALLELES,
    show_default=True,
    type=click.IntRange(min=3),
    metavar="INT",
    help="Largest number of alleles accepted for a marker.",
)
@click.option(
    "--json/--no-json",
    "write_json",
    default=False,
    show_default=True,
    help="Also write a JSON summary.",
)
@click.option(
    "--plot/--no-plot",
    default=False,
    show_default=True,
    help="Generate diagnostic plots.",
)
@click.option(
    "--progress/--no-progress",
    default=True,
    show_default=True,
    help="Show a progress bar while the chain runs.",
)
@click.pass_context
def run(
    ctx: click.Context,
    input_file: Path,
    out: Path | None,
    steps: int | None,
    batches: int | None,
    batch_size: int | None,
    seed: int | None,
    chains: int,
    max_alleles: int,
    write_json: bool,
    plot: bool,
    progress: bool,
) -> None:
    """Run the exact Hardy-Weinberg test on a genotype table.

    \b
    Examples:
      Parameters from the input file:
        hwexact run marker.dat -o results

      Longer run, reproducible, four pooled chains:
        hwexact run marker.dat -o results --batches 2000 --seed 7 --chains 4

    \b
    Output files:
      {PREFIX}_report.txt       Table, p-value, switch percentages
      {PREFIX}_batches.tsv      Per-batch p-values
      {PREFIX}_summary.json     Machine-readable summary (if --json)
      {PREFIX}_batches.png      Batch p-value diagnostics (if --plot)
      {PREFIX}_switches.png     Switch rate diagnostics (if --plot)
    """
    if out is None:
        out = input_file.with_suffix("")

    try:
        hwe = read_input(input_file, max_alleles=max_alleles)
        params = RandomizationParameters(
            step=steps if steps is not None else hwe.params.step,
            group=batches if batches is not None else hwe.params.group,
            size=batch_size if batch_size is not None else hwe.params.size,
        )
        out = validate_output_path(out)
    except MalformedInput as e:
        e.display()
        raise SystemExit(1) from e
    except OSError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    table = hwe.table
    _show_table(table.rows(), "Observed genotype frequencies:")
    console.print()
    print_info(f"Alleles: {table.n_alleles}, individuals: {table.total()}")
    print_info(
        f"Burn-in: {params.step:,}, batches: {params.group:,} x {params.size:,}"
        + (f", chains: {chains}" if chains > 1 else "")
    )

    started = time.perf_counter()
    try:
        with (
            _cancel_on_interrupt() as cancelled,
            chain_progress(params.total_steps * chains, enabled=progress) as on_progress,
        ):
            if chains > 1:
                result = run_replicates(
                    table,
                    params,
                    chains=chains,
                    seed=seed,
                    should_stop=cancelled.is_set,
                    on_progress=on_progress,
                )
            else:
                result = run_randomization(
                    table,
                    params,
                    seed=seed,
                    should_stop=cancelled.is_set,
                    on_progress=on_progress,
                )
    except ChainCancelled as e:
        e.display()
        raise SystemExit(EXIT_CANCELLED) from e
    except HWEError as e:
        e.display()
        raise SystemExit(1) from e

    summary = RandomizationSummary(
        source=hwe.source,
        table=table,
        params=params,
        result=result,
        elapsed=time.perf_counter() - started,
        finished=datetime.now(),
        seed=seed,
    )

    print_stats(
        {
            "P-value": result.p_value,
            "Standard error": result.se,
            "Partial switches (%)": result.partial_switch_rate,
            "Full switches (%)": result.full_switch_rate,
            "All switches (%)": result.switch_rate,
            "Accepted switches (%)": result.acceptance_rate,
        },
        title="Exact Test",
    )
    click.echo(
        f"Randomization test P-value: {result.p_value:7.4g}  ({result.se:7.4g})"
    )

    try:
        out_report = Path(f"{out}_report.txt")
        write_summary(summary, out_report)
        print_file_created(out_report)

        out_batches = Path(f"{out}_batches.tsv")
        write_batches_tsv(result, out_batches)
        print_file_created(out_batches)

        if write_json:
            out_json = Path(f"{out}_summary.json")
            write_summary_json(summary, out_json)
            print_file_created(out_json)
    except OSError as e:
        print_error(f"Cannot write output: {e}")
        raise SystemExit(1) from e

    if plot:
        try:
            import matplotlib.pyplot as plt

            from hwexact.plotting.diagnostics import plot_batch_pvalues, plot_switch_rates

            fig = plot_batch_pvalues(result.batch_p_values, Path(f"{out}_batches.png"))
            plt.close(fig)
            fig = plot_switch_rates(result, Path(f"{out}_switches.png"))
            plt.close(fig)
        except ImportError as e:
            print_warning(f"Plotting skipped: {e}")
        except Exception as e:
            print_warning(f"Plotting failed: {e}")
            if ctx.obj.get("verbose"):
                console.print_exception()

    print_success("Exact test complete!")


@cli.command()
@click.option(
    "--batches",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Batches TSV file from a previous run",
)
@click.option(
    "--out",
    "-o",
    required=True,
    type=click.Path(path_type=Path),
    help="Output prefix for plot files",
)
@click.pass_context
def plot(ctx: click.Context, batches: Path, out: Path) -> None:
    """Generate the batch p-value plot from existing output.

    Example:

        hwexact plot --batches results_batches.tsv -o new_plots
    """
    import matplotlib.pyplot as plt

    from hwexact.io.readers import read_batches_tsv
    from hwexact.plotting.diagnostics import plot_batch_pvalues

    try:
        batch_p_values = read_batches_tsv(batches)
        if batch_p_values.size < 2:
            print_error("At least two batches are needed to plot")
            raise SystemExit(1)

        out_png = Path(f"{out}_batches.png")
        fig = plot_batch_pvalues(batch_p_values, out_png)
        plt.close(fig)
        print_success(f"Generated {out_png}")

    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        raise SystemExit(1) from e
    except Exception as e:
        print_error(f"Plot generation failed: {e}")
        if ctx.obj.get("verbose"):
            console.print_exception()
        raise SystemExit(1) from e


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
