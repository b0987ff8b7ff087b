"""Input validation utilities for hwexact.

This module provides functions for validating genotype tables,
randomization parameters, and output paths before any chain work
begins. Every failure is raised as a named error from
:mod:`hwexact.utils.errors`.
"""

from __future__ import annotations

import numbers
from pathlib import Path
from typing import TYPE_CHECKING

from hwexact.utils.errors import (
    MalformedParametersError,
    MalformedTableError,
    format_invalid_parameter,
    format_output_error,
    format_too_few_alleles,
)
from hwexact.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

MIN_ALLELES = 3


def _as_int(value: object) -> int | None:
    """Return ``value`` as an int if it is integral, otherwise None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def validate_allele_count(n_alleles: object, max_alleles: int) -> int:
    """Validate the number of alleles of a marker.

    Args:
        n_alleles: Declared number of alleles K.
        max_alleles: Largest supported K.

    Returns:
        K as an int.

    Raises:
        MalformedTableError: If K is not an integer, below 3, or above
            ``max_alleles``.
    """
    k = _as_int(n_alleles)
    if k is None:
        raise MalformedTableError(
            format_invalid_parameter(
                "number of alleles", str(n_alleles), "must be an integer"
            )
        )

    if k < MIN_ALLELES:
        raise MalformedTableError(format_too_few_alleles(k))

    if k > max_alleles:
        raise MalformedTableError(
            format_invalid_parameter(
                "number of alleles",
                k,
                f"at most {max_alleles} alleles are supported",
                "Raise the limit with --max-alleles.",
            )
        )

    return k


def validate_counts(counts: Sequence[object], n_alleles: int) -> list[int]:
    """Validate the flat lower-triangular genotype counts.

    Args:
        counts: Counts row by row, K(K+1)/2 values.
        n_alleles: Number of alleles K.

    Returns:
        The counts as a new list of ints.

    Raises:
        MalformedTableError: If the number of counts is wrong or a count
            is negative or non-integral.
    """
    expected = n_alleles * (n_alleles + 1) // 2
    if len(counts) != expected:
        raise MalformedTableError(
            f"A table of {n_alleles} alleles needs {expected} genotype counts, "
            f"got {len(counts)}"
        )

    validated = []
    for offset, value in enumerate(counts):
        count = _as_int(value)
        if count is None:
            raise MalformedTableError(
                f"Genotype count #{offset + 1} is not an integer: {value!r}"
            )
        if count < 0:
            raise MalformedTableError(
                f"Genotype count #{offset + 1} is negative: {count}"
            )
        validated.append(count)

    return validated


def validate_parameters(step: object, group: object, size: object) -> None:
    """Validate randomization parameters.

    Checks:
    - step >= 1 (burn-in iterations)
    - group > 1 (batch count; the standard error needs two batches)
    - size >= 1 (iterations per batch)

    Raises:
        MalformedParametersError: If any parameter is invalid.
    """
    for name, value in (("step", step), ("group", group), ("size", size)):
        if _as_int(value) is None:
            raise MalformedParametersError(
                format_invalid_parameter(name, str(value), "must be an integer")
            )

    if step < 1:
        raise MalformedParametersError(
            format_invalid_parameter(
                "step", step, "at least one burn-in iteration is required"
            )
        )

    if group <= 1:
        raise MalformedParametersError(
            format_invalid_parameter(
                "group",
                group,
                "the standard error needs at least two batches",
            )
        )

    if size < 1:
        raise MalformedParametersError(
            format_invalid_parameter(
                "size", size, "each batch needs at least one iteration"
            )
        )


def validate_output_path(out_prefix: str | Path) -> Path:
    """Validate output prefix and create parent directories.

    Args:
        out_prefix: Output prefix path.

    Returns:
        Resolved Path object.

    Raises:
        OSError: If the parent directory cannot be created or written.
    """
    out_path = Path(out_prefix).resolve()
    parent = out_path.parent

    if not parent.exists():
        try:
            parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created output directory: {parent}")
        except OSError as e:
            raise OSError(format_output_error(parent, str(e))) from e

    if not parent.is_dir():
        raise NotADirectoryError(
            format_output_error(parent, "output path parent is not a directory")
        )

    test_file = parent / f".hwexact_write_test_{out_path.name}"
    try:
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        raise OSError(format_output_error(parent, str(e))) from e

    return out_path
