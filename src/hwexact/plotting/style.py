"""Matplotlib style configuration for hwexact plots.

Diagnostic figures share one rc configuration and one palette so the
batch p-value and switch-rate plots read as a set.
"""

from __future__ import annotations

import matplotlib.pyplot as plt

# rc settings applied by set_publication_style
PUBLICATION_RC = {
    "font.family": "sans-serif",
    "font.sans-serif": ["Arial", "DejaVu Sans", "Helvetica"],
    "font.size": 10,
    "axes.titlesize": 12,
    "axes.labelsize": 10,
    "xtick.labelsize": 9,
    "ytick.labelsize": 9,
    "legend.fontsize": 9,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "axes.linewidth": 0.8,
    "lines.linewidth": 1.2,
    # Horizontal guides only
    "axes.grid": True,
    "axes.grid.axis": "y",
    "grid.alpha": 0.3,
    "figure.facecolor": "white",
    "axes.facecolor": "white",
    "savefig.facecolor": "white",
    "savefig.bbox": "tight",
    "savefig.pad_inches": 0.1,
}


def set_publication_style() -> None:
    """Configure matplotlib for publication-quality figures."""
    plt.rcParams.update(PUBLICATION_RC)


def reset_style() -> None:
    """Reset matplotlib to default style."""
    plt.rcdefaults()


# Batch p-value histogram bars
BATCH_COLOR = "#1f77b4"  # Blue

# Running mean of batch p-values
RUNNING_MEAN_COLOR = "#2ca02c"  # Green

# Final estimate and its +/- 2 SE band
ESTIMATE_COLOR = "#d62728"  # Red
ESTIMATE_BAND_ALPHA = 0.15

# Switch-rate bars: eligible windows vs executed switches
ELIGIBLE_COLOR = "#7f7f7f"  # Gray
ACCEPTED_COLOR = "#ff7f0e"  # Orange
