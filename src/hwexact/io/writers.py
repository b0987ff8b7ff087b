"""Output writers for hwexact.

This module provides the boxed text rendering of triangular genotype
tables used by the report and the ``check`` command, and a TSV writer
for per-batch p-values.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from hwexact.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hwexact.core.models import RandomizationResult

logger = get_logger(__name__)


def format_genotype_table(rows: Sequence[Sequence[float]], precision: int = 0) -> str:
    """Render a lower-triangular table as a box drawing.

    Each row is preceded by a rule that grows by one cell per row::

        ------
        |   5|
        -----------
        |   2|   5|
        -----------

    Args:
        rows: Rows of the table, row i holding i + 1 values.
        precision: Decimal places; 0 renders integers in 4 columns,
            otherwise values are rendered in ``precision + 5`` columns.

    Returns:
        The rendered table, without a trailing newline.
    """
    width = 4 if precision == 0 else precision + 5
    lines = []
    rule = "-"
    for row in rows:
        rule += "-" * (width + 1)
        lines.append(rule)
        if precision == 0:
            cells = "".join(f"{int(value):{width}d}|" for value in row)
        else:
            cells = "".join(f"{value:{width}.{precision}f}|" for value in row)
        lines.append("|" + cells)
    lines.append(rule)
    return "\n".join(lines)


def write_batches_tsv(result: RandomizationResult, path: str | Path) -> int:
    """Write per-batch p-values to a TSV file.

    Columns:
        batch, p_value

    Args:
        result: Finished randomization result.
        path: Output file path.

    Returns:
        Number of batches written.
    """
    path = Path(path)
    logger.info(f"Writing batch p-values to {path}")

    count = 0
    with open(path, "w") as f:
        f.write("batch\tp_value\n")
        for batch, p_value in enumerate(result.batch_p_values, start=1):
            f.write(f"{batch}\t{p_value:.10g}\n")
            count += 1

    logger.info(f"Wrote {count:,} batches to {path}")
    return count
