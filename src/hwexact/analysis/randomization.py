"""Randomization driver for the Hardy-Weinberg exact test.

The driver runs the chain through three phases: a burn-in that
de-memorizes the observed starting table, a sampling phase of ``group``
batches of ``size`` iterations each, and a final reduction of the batch
p-values into an estimate and its standard error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from hwexact.analysis.chain import chain_step
from hwexact.core.models import (
    GenotypeTable,
    RandomizationParameters,
    RandomizationResult,
)
from hwexact.core.rng import NumpyRandomSource, spawn_sources
from hwexact.core.stats import batch_statistics, observed_log_probability
from hwexact.utils.errors import ChainCancelled
from hwexact.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from hwexact.analysis.chain import StepResult
    from hwexact.core.rng import RandomSource

logger = get_logger(__name__)

# Iterations between two cancellation checks
CANCEL_CHECK_INTERVAL = 1024

# Relative slack on lnP <= lnP_obs; tables tied with the observed one count
LN_P_TOLERANCE = 1e-7


def ln_p_threshold(ln_p_observed: float) -> float:
    """Largest running lnP counted as ``lnP <= lnP_obs``."""
    return ln_p_observed + LN_P_TOLERANCE * max(1.0, abs(ln_p_observed))


class Phase(Enum):
    """Phases of a randomization run."""

    BURNIN = "burn-in"
    SAMPLING = "sampling"
    DONE = "done"


@dataclass
class RandomizationState:
    """Mutable state of one chain over a randomization run.

    Attributes:
        table: Working copy of the genotype table, mutated by every
            accepted switch.
        ln_p: Log-probability of ``table``.
        ln_p_observed: Log-probability of the observed table.
        phase: Current phase of the run.
        iterations: Chain iterations completed so far.
        switch_counts: Iterations per window class {none, partial, full}.
        accepted_counts: Executed switches per window class.
        batch_p_values: Batch p-values collected during sampling.
    """

    table: GenotypeTable
    ln_p: float
    ln_p_observed: float
    phase: Phase = Phase.BURNIN
    iterations: int = 0
    switch_counts: list[int] = field(default_factory=lambda: [0, 0, 0])
    accepted_counts: list[int] = field(default_factory=lambda: [0, 0, 0])
    batch_p_values: list[float] = field(default_factory=list)

    def record(self, step: StepResult) -> None:
        """Fold one chain step into the state."""
        self.ln_p = step.ln_p
        self.iterations += 1
        self.switch_counts[step.eligibility] += 1
        if step.executed is not None:
            self.accepted_counts[step.eligibility] += 1


class RandomizationDriver:
    """Run burn-in and batched sampling for one genotype table.

    The observed table is copied; the copy is the only table the chain
    mutates.

    Args:
        table: Observed genotype table.
        params: Burn-in and batching parameters.
        rng: Uniform random source. Defaults to an entropy-seeded
            numpy generator.
        ln_p_observed: Log-probability of the observed table. Computed
            from the table when omitted.
        should_stop: Polled between iterations; returning True cancels
            the run with :class:`ChainCancelled`.
        on_progress: Called with the number of iterations completed
            since the previous call, after burn-in and after each batch.
    """

    def __init__(
        self,
        table: GenotypeTable,
        params: RandomizationParameters,
        rng: RandomSource | None = None,
        ln_p_observed: float | None = None,
        should_stop: Callable[[], bool] | None = None,
        on_progress: Callable[[int], None] | None = None,
    ):
        self.params = params
        self.rng = rng if rng is not None else NumpyRandomSource()
        if ln_p_observed is None:
            ln_p_observed = observed_log_probability(table)
        self.state = RandomizationState(
            table=table.copy(),
            ln_p=ln_p_observed,
            ln_p_observed=ln_p_observed,
        )
        self._should_stop = should_stop
        self._on_progress = on_progress

    def _check_cancelled(self) -> None:
        if self._should_stop is not None and self._should_stop():
            raise ChainCancelled(self.state.iterations, self.params.total_steps)

    def _advance(self, n: int) -> None:
        if self._on_progress is not None:
            self._on_progress(n)

    def burn_in(self) -> None:
        """Run the de-memorization iterations, keeping only switch tallies."""
        state = self.state
        table = state.table
        rng = self.rng

        logger.debug(f"Burn-in: {self.params.step:,} iterations")
        for i in range(self.params.step):
            if i % CANCEL_CHECK_INTERVAL == 0:
                self._check_cancelled()
            state.record(chain_step(table, state.ln_p, rng))

        self._advance(self.params.step)
        state.phase = Phase.SAMPLING

    def sample(self) -> None:
        """Run the batches, recording the fraction of lnP <= lnP_obs per batch."""
        state = self.state
        table = state.table
        rng = self.rng
        threshold = ln_p_threshold(state.ln_p_observed)
        size = self.params.size

        logger.debug(
            f"Sampling: {self.params.group:,} batches of {size:,} iterations"
        )
        for _ in range(self.params.group):
            counter = 0
            for j in range(size):
                if j % CANCEL_CHECK_INTERVAL == 0:
                    self._check_cancelled()
                state.record(chain_step(table, state.ln_p, rng))
                if state.ln_p <= threshold:
                    counter += 1
            state.batch_p_values.append(counter / size)
            self._advance(size)

        state.phase = Phase.DONE

    def result(self) -> RandomizationResult:
        """Reduce the batch p-values of a finished run.

        Raises:
            RuntimeError: If the run has not reached the DONE phase.
        """
        state = self.state
        if state.phase is not Phase.DONE:
            raise RuntimeError(f"Randomization run is still in phase {state.phase.value}")

        p_value, se = batch_statistics(state.batch_p_values)
        return RandomizationResult(
            p_value=p_value,
            se=se,
            ln_p_observed=state.ln_p_observed,
            ln_p_final=state.ln_p,
            batch_p_values=np.asarray(state.batch_p_values, dtype=np.float64),
            switch_counts=list(state.switch_counts),
            accepted_counts=list(state.accepted_counts),
            total_steps=state.iterations,
        )

    def run(self) -> RandomizationResult:
        """Run burn-in and sampling, then return the result."""
        if self.state.phase is Phase.BURNIN:
            self.burn_in()
        if self.state.phase is Phase.SAMPLING:
            self.sample()
        return self.result()


def run_randomization(
    table: GenotypeTable,
    params: RandomizationParameters,
    seed: int | None = None,
    rng: RandomSource | None = None,
    should_stop: Callable[[], bool] | None = None,
    on_progress: Callable[[int], None] | None = None,
) -> RandomizationResult:
    """Estimate the exact HWE p-value of a genotype table.

    Args:
        table: Observed genotype table (not modified).
        params: Burn-in and batching parameters.
        seed: Seed for the default numpy random source. Ignored when
            ``rng`` is given.
        rng: Random source to use instead of a seeded numpy generator.
        should_stop: Cancellation check polled between iterations.
        on_progress: Progress callback, see :class:`RandomizationDriver`.

    Returns:
        RandomizationResult with the p-value, its standard error, and
        switch-rate diagnostics.

    Example:
        >>> table = GenotypeTable.from_rows([[5], [2, 5], [1, 1, 5]])
        >>> result = run_randomization(table, RandomizationParameters(100, 10, 100), seed=1)
        >>> 0.0 <= result.p_value <= 1.0
        True
    """
    if rng is None:
        rng = NumpyRandomSource(seed)

    logger.info(
        f"Running exact test: K={table.n_alleles}, N={table.total()}, "
        f"{params.total_steps:,} iterations"
    )
    driver = RandomizationDriver(
        table,
        params,
        rng=rng,
        should_stop=should_stop,
        on_progress=on_progress,
    )
    result = driver.run()
    logger.info(f"P-value: {result.p_value:.4g} (SE {result.se:.4g})")
    return result


def run_replicates(
    table: GenotypeTable,
    params: RandomizationParameters,
    chains: int,
    seed: int | None = None,
    should_stop: Callable[[], bool] | None = None,
    on_progress: Callable[[int], None] | None = None,
) -> RandomizationResult:
    """Run independent replicate chains and pool their batches.

    Every chain starts from its own copy of the observed table and owns
    an independent random source spawned from ``seed``. The batch
    p-values of all chains are pooled into one estimate.

    Args:
        table: Observed genotype table (not modified).
        params: Parameters applied to each chain.
        chains: Number of chains, at least one.
        seed: Root seed for the spawned random sources.
        should_stop: Cancellation check polled between iterations.
        on_progress: Progress callback shared by all chains.

    Returns:
        Pooled RandomizationResult; ``total_steps`` and the switch counts
        sum over chains.

    Raises:
        ValueError: If ``chains`` is below one.
    """
    if chains < 1:
        raise ValueError(f"chains must be at least 1, got {chains}")

    ln_p_observed = observed_log_probability(table)
    results = []
    for index, rng in enumerate(spawn_sources(seed, chains), start=1):
        logger.debug(f"Replicate chain {index}/{chains}")
        driver = RandomizationDriver(
            table,
            params,
            rng=rng,
            ln_p_observed=ln_p_observed,
            should_stop=should_stop,
            on_progress=on_progress,
        )
        results.append(driver.run())

    batch_p_values = np.concatenate([r.batch_p_values for r in results])
    p_value, se = batch_statistics(batch_p_values)
    return RandomizationResult(
        p_value=p_value,
        se=se,
        ln_p_observed=ln_p_observed,
        ln_p_final=results[-1].ln_p_final,
        batch_p_values=batch_p_values,
        switch_counts=[sum(r.switch_counts[i] for r in results) for i in range(3)],
        accepted_counts=[sum(r.accepted_counts[i] for r in results) for i in range(3)],
        total_steps=sum(r.total_steps for r in results),
        chains=chains,
    )
