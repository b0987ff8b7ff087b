"""Statistical calculations for hwexact.

This module provides the Hardy-Weinberg log-probability of a genotype
table conditional on its allele counts, expected genotype counts, and
the batch estimator of the randomization p-value.

The conditional probability of a table a with allele counts n_i and
N individuals is::

    P(a | n) = N! prod_i n_i! 2^H / ((2N)! prod_{i>=j} a_ij!)

where H is the number of heterozygotes.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from scipy.special import gammaln

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hwexact.core.models import GenotypeTable

LOG_2 = math.log(2.0)


def log_factorial(k: int) -> float:
    """Calculate log(k!) through the log-gamma function.

    Args:
        k: Non-negative integer.

    Returns:
        log(k!), 0.0 for k = 0.
    """
    return float(gammaln(k + 1.0))


def log_constant(allele_counts: Sequence[int], total: int) -> float:
    """Constant part of the conditional log-probability.

    ``log N! - log (2N)! + sum_i log n_i!``

    Args:
        allele_counts: Allele counts n_i.
        total: Number of individuals N.

    Returns:
        The constant, shared by every table with these margins.
    """
    n = np.asarray(allele_counts, dtype=np.float64)
    return float(
        gammaln(total + 1.0) - gammaln(2.0 * total + 1.0) + np.sum(gammaln(n + 1.0))
    )


def ln_probability(table: GenotypeTable, constant: float) -> float:
    """Conditional log-probability of a genotype table.

    ``constant - sum_{i>j} log a_ij! - sum_i log a_ii! + H log 2``

    Args:
        table: Genotype table.
        constant: Value of :func:`log_constant` for the table margins.

    Returns:
        log P(table | allele counts).
    """
    counts = np.asarray(table.counts, dtype=np.float64)
    heterozygotes = table.heterozygote_total()
    return float(constant - np.sum(gammaln(counts + 1.0)) + heterozygotes * LOG_2)


def observed_log_probability(table: GenotypeTable) -> float:
    """Log-probability of a table under HWE given its own allele counts."""
    constant = log_constant(table.allele_counts(), table.total())
    return ln_probability(table, constant)


def expected_genotype_counts(table: GenotypeTable) -> list[list[float]]:
    """Expected genotype counts under Hardy-Weinberg proportions.

    Homozygote i/i: ``n_i^2 / 4N``; heterozygote i/j: ``n_i n_j / 2N``.

    Args:
        table: Observed genotype table.

    Returns:
        Lower-triangular rows of expected counts, shaped like
        ``table.rows()``. All zeros for an empty table.
    """
    n = table.allele_counts()
    total = table.total()
    rows = []
    for i in range(table.n_alleles):
        row = []
        for j in range(i + 1):
            if total == 0:
                row.append(0.0)
            elif i == j:
                row.append(n[i] * n[i] / (4.0 * total))
            else:
                row.append(n[i] * n[j] / (2.0 * total))
        rows.append(row)
    return rows


def batch_statistics(batch_p_values: Sequence[float] | np.ndarray) -> tuple[float, float]:
    """Mean and standard error of batch p-values.

    ``se = sqrt(sum p_b^2 / (g (g - 1)) - mean^2 / (g - 1))``, the
    standard error of the mean of g batch estimates.

    Args:
        batch_p_values: One p-value per batch, at least two.

    Returns:
        Tuple of (mean, standard error).

    Raises:
        ValueError: If fewer than two batches are given.
    """
    p = np.asarray(batch_p_values, dtype=np.float64)
    group = p.size
    if group < 2:
        raise ValueError(f"At least two batches are required, got {group}")

    mean = float(np.mean(p))
    variance = float(np.sum(p * p)) / group / (group - 1.0) - mean / (group - 1.0) * mean
    # Rounding can push a zero variance slightly below zero
    return mean, math.sqrt(max(variance, 0.0))
