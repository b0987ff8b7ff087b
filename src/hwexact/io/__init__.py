"""I/O utilities for hwexact."""

from hwexact.io.readers import HWEInput, parse_input_text, read_batches_tsv, read_input
from hwexact.io.summary import RandomizationSummary, write_summary, write_summary_json
from hwexact.io.writers import format_genotype_table, write_batches_tsv

__all__ = [
    # Readers
    "HWEInput",
    "parse_input_text",
    "read_batches_tsv",
    "read_input",
    # Writers
    "format_genotype_table",
    "write_batches_tsv",
    # Summary
    "RandomizationSummary",
    "write_summary",
    "write_summary_json",
]
