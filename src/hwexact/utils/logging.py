"""Logging configuration for hwexact.

This module provides a consistent logging setup using rich for
formatted console output, a progress bar for randomization runs, and
small helpers for status lines and result tables on stderr.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

# Global console for stderr output
console = Console(stderr=True)

# Handler installed on the root logger by setup_logging
_handler: RichHandler | None = None


def setup_logging(
    level: int = logging.INFO,
    show_time: bool = True,
    show_path: bool = False,
) -> None:
    """Configure logging with rich handler.

    The rich handler is installed on the root logger once; later calls
    only change the level, so ``--verbose`` still takes effect after
    modules have created their loggers.

    Args:
        level: Logging level (default: INFO).
        show_time: Whether to show timestamps (default: True).
        show_path: Whether to show file paths in log messages.
    """
    global _handler

    if _handler is None:
        _handler = RichHandler(
            console=console,
            show_time=show_time,
            show_path=show_path,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=True,
        )
        _handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(_handler)

    logging.getLogger().setLevel(level)
    logging.getLogger("hwexact").setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``hwexact`` namespace.

    Args:
        name: Logger name (typically __name__ from the calling module).

    Returns:
        Configured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Burn-in: 2,000 iterations")
    """
    if _handler is None:
        setup_logging()

    if name.startswith("hwexact."):
        return logging.getLogger(name)
    return logging.getLogger(f"hwexact.{name}")


def create_progress() -> Progress:
    """Create a rich progress bar counting chain iterations.

    Returns:
        Configured Progress instance.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=True,
    )


@contextlib.contextmanager
def chain_progress(
    total: int,
    description: str = "Randomizing",
    enabled: bool = True,
) -> Iterator[Callable[[int], None] | None]:
    """Show a progress bar for a randomization run.

    Yields the ``on_progress`` callback expected by the randomization
    driver, or None when the bar is disabled.

    Args:
        total: Total number of iterations, over all chains.
        description: Label shown left of the bar.
        enabled: Whether to display the bar at all.

    Example:
        >>> with chain_progress(params.total_steps) as on_progress:
        ...     result = run_randomization(table, params, on_progress=on_progress)
    """
    if not enabled:
        yield None
        return

    with create_progress() as progress:
        task = progress.add_task(description, total=total)

        def advance(n: int) -> None:
            progress.advance(task, n)

        yield advance


def _status(label: str, style: str, message: str) -> None:
    console.print(f"[{style}]{label}:[/{style}] {message}")


def print_info(message: str) -> None:
    """Print an info message to stderr."""
    _status("INFO", "blue", message)


def print_warning(message: str) -> None:
    _status("WARNING", "yellow", message)


def print_error(message: str) -> None:
    _status("ERROR", "red", message)


def print_success(message: str) -> None:
    _status("SUCCESS", "green", message)


def print_stats(stats: dict[str, int | float | str], title: str = "Statistics") -> None:
    """Print named values as a two-column table.

    Floats are shown with four significant digits since p-values and
    standard errors are usually small; ints get thousands separators.

    Args:
        stats: Dictionary of statistic names and values.
        title: Title for the statistics block.
    """
    table = Table(title=title, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for key, value in stats.items():
        if isinstance(value, float):
            text = f"{value:.4g}"
        elif isinstance(value, int):
            text = f"{value:,}"
        else:
            text = str(value)
        table.add_row(key, text)

    console.print(table)


def print_file_created(path: str | Path) -> None:
    """Print the name of a file written by a command."""
    from pathlib import Path as PathlibPath

    console.print(f"  [dim]Created:[/dim] {PathlibPath(path).name}")
