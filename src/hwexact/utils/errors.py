"""User-friendly error messages for hwexact.

This module defines the exception hierarchy raised while reading genotype
tables and randomization parameters, and formats error messages with
helpful suggestions for the command-line interface.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=True)


class HWEError(Exception):
    """Base exception for hwexact errors with user-friendly formatting."""

    def __init__(self, message: str, suggestion: str | None = None):
        """Initialize error with message and optional suggestion.

        Args:
            message: Main error message.
            suggestion: Optional suggestion for how to fix the error.
        """
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def display(self) -> None:
        """Display the error in a formatted panel."""
        content = f"[red bold]Error:[/red bold] {self.message}"
        if self.suggestion:
            content += f"\n\n[yellow]Suggestion:[/yellow] {self.suggestion}"
        console.print(Panel(content, title="hwexact Error", border_style="red"))


class MalformedInput(HWEError):
    """Raised when an input file or parameter cannot be used to run the test."""


class MalformedTableError(MalformedInput):
    """Raised for a bad allele count or a bad genotype count."""


class MalformedParametersError(MalformedInput):
    """Raised for bad burn-in, batch count, or batch size parameters."""


class ChainCancelled(HWEError):
    """Raised when a randomization run is cancelled between iterations."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(
            f"Randomization cancelled after {completed:,} of {total:,} iterations",
        )


class InvariantViolation(HWEError):
    """Raised when a table mutation would break a conserved quantity."""


def format_file_not_found(path: str | Path, file_type: str = "File") -> str:
    """Format a file not found error message.

    Args:
        path: Path to the missing file.
        file_type: Type of file (e.g., "Input file", "Batches file").

    Returns:
        Formatted error message.
    """
    path = Path(path)
    msg = f"{file_type} not found: {path}"

    if not path.parent.exists():
        msg += f"\n\nThe parent directory does not exist: {path.parent}"
        msg += "\nCreate the directory first or check the path."

    return msg


def format_invalid_parameter(
    param_name: str,
    value: int | float | str,
    reason: str,
    suggestion: str | None = None,
) -> str:
    """Format an error for an invalid parameter value.

    Args:
        param_name: Name of the parameter.
        value: Invalid value provided.
        reason: Why the value is invalid.
        suggestion: Optional suggestion for valid values.

    Returns:
        Formatted error message.
    """
    msg = f"Invalid value for {param_name}: {value}\n\n"
    msg += f"Reason: {reason}"

    if suggestion:
        msg += f"\n\nSuggestion: {suggestion}"

    return msg


def format_invalid_count(row: int, col: int, token: str, reason: str) -> str:
    """Format an error for a genotype count that cannot be used.

    Args:
        row: 1-based row of the lower-triangular table.
        col: 1-based column of the lower-triangular table.
        token: The text that was read from the file.
        reason: Why the count was rejected.

    Returns:
        Formatted error message.
    """
    msg = f"Invalid genotype count at row {row}, column {col}: {token!r}\n\n"
    msg += f"Reason: {reason}\n\n"
    msg += "Row i of the table must hold exactly i non-negative integers:\n"
    msg += "the counts of genotypes a(i,1) ... a(i,i)."

    return msg


def format_too_few_alleles(found: int) -> str:
    """Format an error for markers with fewer than three alleles.

    Args:
        found: Number of alleles declared in the input file.

    Returns:
        Formatted error message.
    """
    msg = f"Number of alleles less than 3 (found {found}).\n\n"
    msg += "The exact test samples tables of three or more alleles.\n"
    msg += "A bi-allelic marker is tested with a closed-form chi-square test instead."

    return msg


def format_output_error(path: str | Path, reason: str) -> str:
    """Format an error for output path issues.

    Args:
        path: Output path that caused the error.
        reason: Reason for the error.

    Returns:
        Formatted error message.
    """
    msg = f"Cannot write output to: {path}\n\n"
    msg += f"Reason: {reason}\n\n"
    msg += "Suggestions:\n"
    msg += "  - Check that you have write permissions to the directory\n"
    msg += "  - Ensure the parent directory exists\n"
    msg += "  - Check available disk space"

    return msg
