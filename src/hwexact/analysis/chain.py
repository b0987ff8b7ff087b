"""One transition of the Hardy-Weinberg Markov chain.

Each step samples a 2x2 move window of the genotype table, decides which
of the two margin-preserving switches are legal, and accepts one of them
with a Metropolis probability of ``min(1, ratio) / 2``. Halving the
acceptance keeps the D and R proposals of a window from exceeding a
total probability of one, so the chain is reversible with respect to the
conditional distribution of tables given the allele counts.

Cells of a window::

    A = (i1, j1)    C = (i1, j2)
    D = (i2, j1)    B = (i2, j2)

A D-switch moves one individual out of each of A and B into C and D; an
R-switch does the opposite. When the row and column pairs are the same
alleles, C and D are the same stored heterozygote cell E.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, NamedTuple

from hwexact.core.models import (
    Feasibility,
    GenotypeTable,
    MoveWindow,
    SwitchEvaluation,
    SwitchType,
    cell_index,
)

if TYPE_CHECKING:
    from hwexact.core.rng import RandomSource


class StepResult(NamedTuple):
    """Outcome of one chain step.

    Attributes:
        ln_p: Log-probability of the table after the step.
        eligibility: Topology class of the sampled window.
        executed: The switch performed, or None if the table is unchanged.
    """

    ln_p: float
    eligibility: Feasibility
    executed: SwitchType | None


def choose_pair(k: int, rng: RandomSource) -> tuple[int, int]:
    """Draw an unordered pair of distinct integers from {0, ..., k-1}.

    The first value is uniform on k values; the second is uniform on the
    k - 1 remaining ones, obtained by shifting draws at or above the first
    value up by one.

    Returns:
        The pair ordered (smaller, larger).
    """
    first = int(rng.next() * k)
    second = int(rng.next() * (k - 1))
    if second >= first:
        second += 1
    if first > second:
        return second, first
    return first, second


def sample_window(n_alleles: int, rng: RandomSource) -> MoveWindow:
    """Draw a move window: a row allele pair, then a column allele pair."""
    i1, i2 = choose_pair(n_alleles, rng)
    j1, j2 = choose_pair(n_alleles, rng)
    return MoveWindow.from_indices(i1, i2, j1, j2)


def _ratio(u: float, v: float) -> float:
    return u / (1.0 + v)


def evaluate_switch(table: GenotypeTable, window: MoveWindow) -> SwitchEvaluation:
    """Decide which switches of a window are legal and their probability ratios.

    A ratio is only computed once its switch is known to be legal, so no
    denominator can vanish.

    Args:
        table: Current genotype table.
        window: Sampled move window.

    Returns:
        Feasibility of the window, with ``ratio_d`` and ``ratio_r`` set for
        the legal directions.
    """
    counts = table.counts
    a = counts[cell_index(window.i1, window.j1)]
    b = counts[cell_index(window.i2, window.j2)]
    c = counts[cell_index(window.i1, window.j2)]
    cst = window.cst

    ratio_d = ratio_r = None

    if not window.merged:
        d = counts[cell_index(window.i2, window.j1)]
        if a > 0 and b > 0:
            ratio_d = _ratio(a, c) * _ratio(b, d) * cst
        if c > 0 and d > 0:
            ratio_r = _ratio(c, a) * _ratio(d, b) / cst
    else:
        # C and D are one cell E; a D-switch adds two individuals to it
        e = c
        if a > 0 and b > 0:
            ratio_d = _ratio(a, e + 1.0) * _ratio(b, e) * cst
        if e > 1:
            ratio_r = _ratio(e, a) * _ratio(e - 1.0, b) / cst

    if ratio_d is not None and ratio_r is not None:
        return SwitchEvaluation(Feasibility.FULL, None, ratio_d, ratio_r)
    if ratio_d is not None:
        return SwitchEvaluation(Feasibility.PARTIAL, SwitchType.D, ratio_d, None)
    if ratio_r is not None:
        return SwitchEvaluation(Feasibility.PARTIAL, SwitchType.R, None, ratio_r)
    return SwitchEvaluation(Feasibility.NONE)


def apply_d_switch(table: GenotypeTable, window: MoveWindow) -> None:
    """Decrement cells A and B and increment cells C and D."""
    counts = table.counts
    counts[cell_index(window.i1, window.j1)] -= 1
    counts[cell_index(window.i2, window.j2)] -= 1
    counts[cell_index(window.i1, window.j2)] += 1
    counts[cell_index(window.i2, window.j1)] += 1


def apply_r_switch(table: GenotypeTable, window: MoveWindow) -> None:
    """Increment cells A and B and decrement cells C and D."""
    counts = table.counts
    counts[cell_index(window.i1, window.j1)] += 1
    counts[cell_index(window.i2, window.j2)] += 1
    counts[cell_index(window.i1, window.j2)] -= 1
    counts[cell_index(window.i2, window.j1)] -= 1


def apply_switch(table: GenotypeTable, window: MoveWindow, switch: SwitchType) -> None:
    """Apply the D or R switch chosen for a window."""
    if switch is SwitchType.D:
        apply_d_switch(table, window)
    else:
        apply_r_switch(table, window)


def transition_probability(ratio: float) -> float:
    """Acceptance probability ``min(1, ratio) / 2`` of a proposed switch."""
    return min(1.0, ratio) / 2.0


def chain_step(table: GenotypeTable, ln_p: float, rng: RandomSource) -> StepResult:
    """Run one Markov chain transition in place.

    Args:
        table: Current table, mutated if a switch is accepted.
        ln_p: Log-probability of the current table.
        rng: Uniform random source.

    Returns:
        StepResult with the updated log-probability, the window class,
        and the switch that was executed (if any).
    """
    window = sample_window(table.n_alleles, rng)
    evaluation = evaluate_switch(table, window)
    feasibility = evaluation.feasibility

    if feasibility is Feasibility.NONE:
        return StepResult(ln_p, feasibility, None)

    u = rng.next()

    if feasibility is Feasibility.PARTIAL:
        ratio = evaluation.ratio
        if u < transition_probability(ratio):
            apply_switch(table, window, evaluation.switch_type)
            return StepResult(ln_p + math.log(ratio), feasibility, evaluation.switch_type)
        return StepResult(ln_p, feasibility, None)

    threshold_d = transition_probability(evaluation.ratio_d)
    if u <= threshold_d:
        apply_d_switch(table, window)
        return StepResult(ln_p + math.log(evaluation.ratio_d), feasibility, SwitchType.D)
    if u <= threshold_d + transition_probability(evaluation.ratio_r):
        apply_r_switch(table, window)
        return StepResult(ln_p + math.log(evaluation.ratio_r), feasibility, SwitchType.R)
    return StepResult(ln_p, feasibility, None)
