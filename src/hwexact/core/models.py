"""Data models for hwexact.

This module defines the core data structures shared by the Markov chain
and the randomization driver: the lower-triangular genotype table, the
2x2 move window sampled at every iteration, the feasibility of a window,
and the parameters and result of a randomization run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

from hwexact.utils.errors import InvariantViolation, MalformedTableError
from hwexact.utils.validation import (
    validate_allele_count,
    validate_counts,
    validate_parameters,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np

# Largest number of alleles accepted for one marker
DEFAULT_MAX_ALLELES = 20


def cell_index(a: int, b: int) -> int:
    """Return the flat offset of the canonical (row >= column) cell."""
    if a < b:
        a, b = b, a
    return a * (a + 1) // 2 + b


class GenotypeTable:
    """Observed genotype counts for one marker.

    The table is stored as the lower triangle, diagonal included, of the
    symmetric K x K genotype matrix. Cell (a, b) with a != b counts the
    heterozygotes a/b and cell (a, a) the homozygotes a/a. Cell access is
    symmetric: ``get(a, b) == get(b, a)``.

    Attributes:
        n_alleles: Number of alleles K.
        counts: Flat list of the K(K+1)/2 cell counts, row by row.
    """

    __slots__ = ("n_alleles", "counts")

    def __init__(
        self,
        n_alleles: int,
        counts: Sequence[int],
        max_alleles: int = DEFAULT_MAX_ALLELES,
    ):
        """Build a table from its flat lower-triangular counts.

        Args:
            n_alleles: Number of alleles K (3 <= K <= max_alleles).
            counts: K(K+1)/2 non-negative integer counts, row by row.
            max_alleles: Largest allowed K.

        Raises:
            MalformedTableError: If K or any count is invalid.
        """
        validate_allele_count(n_alleles, max_alleles)
        self.n_alleles = n_alleles
        self.counts = validate_counts(counts, n_alleles)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[int]],
        max_alleles: int = DEFAULT_MAX_ALLELES,
    ) -> GenotypeTable:
        """Build a table from its rows, ``rows[i]`` holding i + 1 counts.

        Example:
            >>> table = GenotypeTable.from_rows([[5], [2, 5], [1, 1, 5]])
            >>> table.total()
            19
        """
        validate_allele_count(len(rows), max_alleles)
        for i, row in enumerate(rows):
            if len(row) != i + 1:
                raise MalformedTableError(
                    f"Row {i + 1} of the genotype table has {len(row)} "
                    f"value(s), expected {i + 1}"
                )
        flat = [value for row in rows for value in row]
        return cls(len(rows), flat, max_alleles=max_alleles)

    def get(self, a: int, b: int) -> int:
        return self.counts[cell_index(a, b)]

    def set(self, a: int, b: int, value: int) -> None:
        self.counts[cell_index(a, b)] = value

    def total(self) -> int:
        """Number of genotyped individuals N."""
        return sum(self.counts)

    def rows(self) -> list[list[int]]:
        """Return the table as a list of rows, row i holding i + 1 counts."""
        return [
            [self.get(i, j) for j in range(i + 1)] for i in range(self.n_alleles)
        ]

    def allele_counts(self) -> list[int]:
        """Number of copies n_i of each allele (the table margins).

        A homozygote i/i contributes two copies of allele i and a
        heterozygote i/j one copy of each allele.
        """
        k = self.n_alleles
        n = [0] * k
        for i in range(k):
            for j in range(i + 1):
                value = self.get(i, j)
                n[i] += value
                n[j] += value
        return n

    def heterozygote_total(self) -> int:
        """Number of heterozygous individuals."""
        return self.total() - sum(self.get(i, i) for i in range(self.n_alleles))

    def copy(self) -> GenotypeTable:
        clone = object.__new__(GenotypeTable)
        clone.n_alleles = self.n_alleles
        clone.counts = list(self.counts)
        return clone

    def check_margins(self, expected: Sequence[int]) -> None:
        """Verify that no cell is negative and the allele counts equal ``expected``.

        Raises:
            InvariantViolation: If a cell is negative or a margin has changed.
        """
        negative = [i for i, value in enumerate(self.counts) if value < 0]
        if negative:
            raise InvariantViolation(
                f"Negative genotype count at flat cell(s) {negative}"
            )
        margins = self.allele_counts()
        if margins != list(expected):
            raise InvariantViolation(
                f"Allele counts changed from {list(expected)} to {margins}"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenotypeTable):
            return NotImplemented
        return self.n_alleles == other.n_alleles and self.counts == other.counts

    def __repr__(self) -> str:
        """Return string representation of the table."""
        return f"GenotypeTable(K={self.n_alleles}, N={self.total()}, rows={self.rows()})"


class Feasibility(IntEnum):
    """How many of the two switch directions a move window allows."""

    NONE = 0
    PARTIAL = 1
    FULL = 2


class SwitchType(IntEnum):
    """Direction of a table mutation.

    A D-switch moves one individual from each diagonal cell (A, B) into
    the anti-diagonal cells (C, D); an R-switch is the reverse move.
    """

    D = 0
    R = 1


@dataclass(slots=True)
class MoveWindow:
    """A 2x2 window of the genotype table chosen for one chain step.

    Attributes:
        i1: Smaller row allele.
        i2: Larger row allele.
        j1: Smaller column allele.
        j2: Larger column allele.
        coincidence: Number of alleles shared by {i1, i2} and {j1, j2}.
        cst: Scale factor for the half-stored symmetric table.
    """

    i1: int
    i2: int
    j1: int
    j2: int
    coincidence: int
    cst: float

    @classmethod
    def from_indices(cls, i1: int, i2: int, j1: int, j2: int) -> MoveWindow:
        """Build a window and derive its coincidence and scale factor."""
        coincidence = (i1 == j1) + (i1 == j2) + (i2 == j1) + (i2 == j2)
        # A diagonal hit (i1 == j1 or i2 == j2) multiplies, otherwise divides
        if i1 == j1 or i2 == j2:
            cst = 2.0**coincidence
        else:
            cst = 2.0 ** (-coincidence)
        return cls(i1, i2, j1, j2, coincidence, cst)

    @property
    def merged(self) -> bool:
        """Whether the two anti-diagonal cells address the same stored cell."""
        return self.coincidence == 2


@dataclass(slots=True)
class SwitchEvaluation:
    """Feasibility and probability ratios of the switches of one window.

    Attributes:
        feasibility: Number of legal directions.
        switch_type: The legal direction when feasibility is PARTIAL.
        ratio_d: P(after D-switch) / P(current), or None if illegal.
        ratio_r: P(after R-switch) / P(current), or None if illegal.
    """

    feasibility: Feasibility
    switch_type: SwitchType | None = None
    ratio_d: float | None = None
    ratio_r: float | None = None

    @property
    def ratio(self) -> float | None:
        """Ratio of the single legal direction of a partial window."""
        if self.switch_type is SwitchType.D:
            return self.ratio_d
        if self.switch_type is SwitchType.R:
            return self.ratio_r
        return None


@dataclass(frozen=True)
class RandomizationParameters:
    """Burn-in and batching parameters of a randomization run.

    Attributes:
        step: Number of de-memorization (burn-in) iterations, >= 1.
        group: Number of batches, > 1.
        size: Number of iterations per batch, >= 1.
    """

    step: int
    group: int
    size: int

    def __post_init__(self) -> None:
        validate_parameters(self.step, self.group, self.size)
        # Integral floats such as 10.0 pass validation; store them as ints
        for name in ("step", "group", "size"):
            object.__setattr__(self, name, int(getattr(self, name)))

    @property
    def total_steps(self) -> int:
        """Total number of chain iterations of the run."""
        return self.step + self.group * self.size


@dataclass
class RandomizationResult:
    """Outcome of a randomization run.

    Attributes:
        p_value: Mean of the batch p-values.
        se: Batch standard error of the p-value.
        ln_p_observed: Log-probability of the observed table.
        ln_p_final: Log-probability of the last sampled table.
        batch_p_values: Fraction of iterations with lnP <= lnP_obs, per batch.
        switch_counts: Iterations per window class {none, partial, full}.
        accepted_counts: Executed switches per window class {none, partial, full}.
        total_steps: Number of chain iterations, burn-in included.
        chains: Number of independent chains pooled into this result.
    """

    p_value: float
    se: float
    ln_p_observed: float
    ln_p_final: float
    batch_p_values: np.ndarray
    switch_counts: list[int] = field(default_factory=lambda: [0, 0, 0])
    accepted_counts: list[int] = field(default_factory=lambda: [0, 0, 0])
    total_steps: int = 0
    chains: int = 1

    def _percent(self, count: int) -> float:
        if self.total_steps == 0:
            return 0.0
        return 100.0 * count / self.total_steps

    @property
    def partial_switch_rate(self) -> float:
        """Percentage of iterations whose window allowed one direction."""
        return self._percent(self.switch_counts[Feasibility.PARTIAL])

    @property
    def full_switch_rate(self) -> float:
        """Percentage of iterations whose window allowed both directions."""
        return self._percent(self.switch_counts[Feasibility.FULL])

    @property
    def switch_rate(self) -> float:
        """Percentage of iterations whose window allowed any switch."""
        return self.partial_switch_rate + self.full_switch_rate

    @property
    def acceptance_rate(self) -> float:
        """Percentage of iterations that executed a switch."""
        return self._percent(
            self.accepted_counts[Feasibility.PARTIAL]
            + self.accepted_counts[Feasibility.FULL]
        )
