"""Plotting modules for hwexact.

This package provides diagnostic figures for randomization runs.
"""

from hwexact.plotting.diagnostics import plot_batch_pvalues, plot_switch_rates
from hwexact.plotting.style import reset_style, set_publication_style

__all__ = [
    "plot_batch_pvalues",
    "plot_switch_rates",
    "reset_style",
    "set_publication_style",
]
