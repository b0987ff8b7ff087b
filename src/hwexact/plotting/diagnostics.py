"""Diagnostic plots for hwexact.

This module provides plots for judging whether a randomization run was
long enough: the spread and running mean of the batch p-values, and how
often sampled windows allowed and executed switches.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")  # Use non-interactive backend for headless environments

import matplotlib.pyplot as plt
import numpy as np

from hwexact.core.stats import batch_statistics
from hwexact.plotting.style import (
    ACCEPTED_COLOR,
    BATCH_COLOR,
    ELIGIBLE_COLOR,
    ESTIMATE_BAND_ALPHA,
    ESTIMATE_COLOR,
    RUNNING_MEAN_COLOR,
    set_publication_style,
)
from hwexact.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hwexact.core.models import RandomizationResult

logger = get_logger(__name__)


def plot_batch_pvalues(
    batch_p_values: Sequence[float] | np.ndarray,
    output_path: str | Path | None = None,
    figsize: tuple[float, float] = (10, 4),
    dpi: int = 150,
) -> plt.Figure:
    """Plot the distribution and running mean of batch p-values.

    Two-panel figure:
    - Left: Histogram of batch p-values with the pooled estimate
    - Right: Running mean over batches with a +/- 2 SE band

    A running mean that is still drifting at the last batch suggests
    more batches or a longer burn-in.

    Args:
        batch_p_values: One p-value per batch.
        output_path: If provided, save figure to this path (PNG).
        figsize: Figure dimensions (width, height) in inches.
        dpi: Resolution for PNG output.

    Returns:
        matplotlib Figure object.
    """
    set_publication_style()

    p = np.asarray(batch_p_values, dtype=np.float64)
    fig, (ax_hist, ax_trace) = plt.subplots(1, 2, figsize=figsize)

    if p.size < 2:
        logger.warning("At least two batches are needed for the batch p-value plot")
        return fig

    logger.info("Generating batch p-value plot...")

    mean, se = batch_statistics(p)

    ax_hist.hist(
        p,
        bins=min(50, max(10, p.size // 10)),
        color=BATCH_COLOR,
        edgecolor="white",
        linewidth=0.5,
        alpha=0.8,
    )
    ax_hist.axvline(x=mean, color=ESTIMATE_COLOR, linestyle="--", linewidth=1)
    ax_hist.set_xlabel("Batch P-value")
    ax_hist.set_ylabel("Batches")
    ax_hist.set_title("Batch P-value Distribution")

    batches = np.arange(1, p.size + 1)
    running_mean = np.cumsum(p) / batches
    ax_trace.plot(batches, running_mean, color=RUNNING_MEAN_COLOR)
    ax_trace.axhline(y=mean, color=ESTIMATE_COLOR, linestyle="--", linewidth=1)
    ax_trace.axhspan(
        mean - 2 * se,
        mean + 2 * se,
        color=ESTIMATE_COLOR,
        alpha=ESTIMATE_BAND_ALPHA,
        linewidth=0,
    )
    ax_trace.set_xlabel("Batch")
    ax_trace.set_ylabel("Running mean P-value")
    ax_trace.set_title("Convergence")

    fig.suptitle(
        f"P = {mean:.4g} (SE {se:.2g}, {p.size:,} batches)",
        fontsize=14,
        fontweight="bold",
    )

    plt.tight_layout()

    if output_path:
        _save_figure(fig, Path(output_path), dpi)

    return fig


def plot_switch_rates(
    result: RandomizationResult,
    output_path: str | Path | None = None,
    figsize: tuple[float, float] = (6, 4),
    dpi: int = 150,
) -> plt.Figure:
    """Plot switch eligibility against switch acceptance.

    For partial and full windows, shows the percentage of iterations
    whose window allowed a switch next to the percentage that executed
    one.

    Args:
        result: Finished randomization result.
        output_path: If provided, save figure to this path (PNG).
        figsize: Figure dimensions (width, height) in inches.
        dpi: Resolution for PNG output.

    Returns:
        matplotlib Figure object.
    """
    set_publication_style()
    logger.info("Generating switch rate plot...")

    total = max(result.total_steps, 1)
    labels = ["Partial", "Full"]
    eligible = [100.0 * result.switch_counts[i] / total for i in (1, 2)]
    accepted = [100.0 * result.accepted_counts[i] / total for i in (1, 2)]

    fig, ax = plt.subplots(figsize=figsize)
    x = np.arange(len(labels))
    width = 0.35
    ax.bar(x - width / 2, eligible, width, color=ELIGIBLE_COLOR, label="Eligible windows")
    ax.bar(x + width / 2, accepted, width, color=ACCEPTED_COLOR, label="Executed switches")
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Percentage of iterations")
    ax.set_title(f"Switch Rates ({result.total_steps:,} iterations)")
    ax.legend(frameon=False)

    plt.tight_layout()

    if output_path:
        _save_figure(fig, Path(output_path), dpi)

    return fig


def _save_figure(fig: plt.Figure, output_path: Path, dpi: int = 150) -> None:
    """Save figure as PNG next to ``output_path``.

    Args:
        fig: matplotlib Figure to save.
        output_path: Output path; a missing ``.png`` suffix is appended.
        dpi: Resolution for PNG output.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix != ".png":
        output_path = output_path.parent / f"{output_path.name}.png"

    fig.savefig(output_path, dpi=dpi, bbox_inches="tight", facecolor="white")
    logger.info(f"Saved: {output_path}")
