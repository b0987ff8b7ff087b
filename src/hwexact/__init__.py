"""
hwexact: exact test for Hardy-Weinberg equilibrium at multi-allelic markers.

This package estimates, by Markov chain Monte Carlo over genotype tables
with fixed allele counts, the exact p-value of an observed genotype
configuration under Hardy-Weinberg proportions.
"""

__version__ = "1.0.0"
__author__ = "hwexact Authors"

from hwexact.core.models import GenotypeTable, RandomizationParameters

__all__ = ["GenotypeTable", "RandomizationParameters", "__version__"]
