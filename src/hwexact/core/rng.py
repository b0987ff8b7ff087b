"""Uniform random sources for the Markov chain.

The chain only needs independent draws on [0, 1). Production runs use a
numpy ``Generator``; tests inject a fixed sequence of draws.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable

# Draws fetched from the generator per refill
BLOCK_SIZE = 4096


class RandomSource(Protocol):
    """Anything producing independent uniform draws on [0, 1)."""

    def next(self) -> float: ...


class NumpyRandomSource:
    """Uniform draws from a numpy PCG64 generator.

    Draws are fetched in blocks of :data:`BLOCK_SIZE`, so the sequence
    for a given seed does not depend on how the draws are consumed.

    Args:
        seed: Integer seed, ``SeedSequence``, or None for OS entropy.
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None):
        self._rng = np.random.default_rng(seed)
        self._block = self._rng.random(BLOCK_SIZE).tolist()
        self._pos = 0

    def next(self) -> float:
        if self._pos == BLOCK_SIZE:
            self._block = self._rng.random(BLOCK_SIZE).tolist()
            self._pos = 0
        value = self._block[self._pos]
        self._pos += 1
        return value


class SequenceRandomSource:
    """Replay a fixed sequence of draws.

    Args:
        values: Draws to return, each in [0, 1).
        cycle: Restart from the first draw when exhausted instead of
            raising.

    Raises:
        ValueError: If a draw lies outside [0, 1).
    """

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self._values = [float(v) for v in values]
        bad = [v for v in self._values if not 0.0 <= v < 1.0]
        if bad:
            raise ValueError(f"Draws must lie in [0, 1), got {bad}")
        if not self._values:
            raise ValueError("At least one draw is required")
        self._cycle = cycle
        self._pos = 0

    @property
    def consumed(self) -> int:
        """Number of draws returned so far."""
        return self._pos

    def next(self) -> float:
        if self._pos >= len(self._values) and not self._cycle:
            raise IndexError(f"Random sequence exhausted after {self._pos} draws")
        value = self._values[self._pos % len(self._values)]
        self._pos += 1
        return value


def spawn_sources(
    seed: int | None,
    n: int,
) -> list[NumpyRandomSource]:
    """Create ``n`` independent random sources from one seed.

    Args:
        seed: Root seed, or None for OS entropy.
        n: Number of sources.

    Returns:
        List of independent sources, one per replicate chain.
    """
    children = np.random.SeedSequence(seed).spawn(n)
    return [NumpyRandomSource(child) for child in children]
