"""Report generation for hwexact.

This module renders a finished exact test as the historical text report
(observed table, parameters, p-value, switch percentages, time stamp)
and as a JSON-serializable dictionary.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from hwexact import __version__
from hwexact.core.stats import expected_genotype_counts
from hwexact.io.writers import format_genotype_table
from hwexact.utils.logging import get_logger

if TYPE_CHECKING:
    from hwexact.core.models import (
        GenotypeTable,
        RandomizationParameters,
        RandomizationResult,
    )

logger = get_logger(__name__)


@dataclass
class RandomizationSummary:
    """Everything reported about one exact-test run.

    Attributes:
        source: Input file the table was read from.
        table: Observed genotype table.
        params: Randomization parameters used.
        result: Result of the run.
        elapsed: Wall-clock duration of the run in seconds.
        finished: Time the run finished.
        seed: Seed of the random source, or None if entropy-seeded.
    """

    source: str
    table: GenotypeTable
    params: RandomizationParameters
    result: RandomizationResult
    elapsed: float = 0.0
    finished: datetime = field(default_factory=datetime.now)
    seed: int | None = None

    def to_text(self) -> str:
        """Format the run as the plain-text report.

        Returns:
            Multi-line report ending with a newline.
        """
        result = self.result
        lines = [
            "Observed genotype frequencies:",
            "",
            format_genotype_table(self.table.rows()),
            "",
            f"Total number of alleles: {self.table.n_alleles:2d}",
            "",
            f"Number of initial steps: {self.params.step}",
            f"Number of chunks: {self.params.group}",
            f"Size of each chunk: {self.params.size}",
            "",
            "Expected genotype frequencies:",
            "",
            format_genotype_table(expected_genotype_counts(self.table), precision=2),
            "",
            f"Number of individuals: {self.table.total()}",
            f"Log-probability of observed table: {result.ln_p_observed:.6f}",
        ]

        if result.chains > 1:
            lines.append(f"Independent chains: {result.chains}")

        lines.extend([
            "",
            f"Randomization test P-value: {result.p_value:7.4g}  ({result.se:7.4g})",
            f"Percentage of partial switches: {result.partial_switch_rate:6.2f}",
            f"Percentage of full switches: {result.full_switch_rate:6.2f}",
            f"Percentage of all switches: {result.switch_rate:6.2f}",
            f"Percentage of accepted switches: {result.acceptance_rate:6.2f}",
            "",
            f"Total elapsed time: {self.elapsed:.2f}''",
            f"Date and time: {self.finished.strftime('%a %b %d %H:%M:%S %Y')}",
        ])

        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = self.result
        return {
            "version": __version__,
            "timestamp": self.finished.isoformat(),
            "input": {
                "source": self.source,
                "n_alleles": self.table.n_alleles,
                "n_individuals": self.table.total(),
                "genotype_counts": self.table.rows(),
                "allele_counts": self.table.allele_counts(),
            },
            "parameters": {
                "step": self.params.step,
                "group": self.params.group,
                "size": self.params.size,
                "chains": result.chains,
                "seed": self.seed,
            },
            "result": {
                "p_value": result.p_value,
                "se": result.se,
                "ln_p_observed": result.ln_p_observed,
                "batches": int(result.batch_p_values.size),
            },
            "switches": {
                "total_steps": result.total_steps,
                "counts": {
                    "none": result.switch_counts[0],
                    "partial": result.switch_counts[1],
                    "full": result.switch_counts[2],
                },
                "accepted": {
                    "partial": result.accepted_counts[1],
                    "full": result.accepted_counts[2],
                },
                "partial_rate": result.partial_switch_rate,
                "full_rate": result.full_switch_rate,
                "switch_rate": result.switch_rate,
                "acceptance_rate": result.acceptance_rate,
            },
            "elapsed_seconds": self.elapsed,
        }


def write_summary(summary: RandomizationSummary, path: str | Path) -> None:
    """Write the text report.

    Args:
        summary: RandomizationSummary to write.
        path: Output file path.
    """
    path = Path(path)
    logger.info(f"Writing report to {path}")

    with open(path, "w") as f:
        f.write(summary.to_text())


def write_summary_json(summary: RandomizationSummary, path: str | Path) -> None:
    """Write the summary as indented JSON.

    Args:
        summary: RandomizationSummary to write.
        path: Output file path.
    """
    path = Path(path)
    logger.info(f"Writing JSON summary to {path}")

    with open(path, "w") as f:
        json.dump(summary.to_dict(), f, indent=2)
        f.write("\n")
