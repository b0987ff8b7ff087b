"""Input file readers for hwexact.

The exact test reads a free-format, whitespace-separated file::

    K
    a(1,1)
    a(2,1) a(2,2)
    ...
    a(K,1) ... a(K,K)
    step group size

Line breaks carry no meaning; only the order of the tokens does. This
module also reads back the batch p-values written by
:func:`hwexact.io.writers.write_batches_tsv`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from hwexact.core.models import (
    DEFAULT_MAX_ALLELES,
    GenotypeTable,
    RandomizationParameters,
)
from hwexact.utils.errors import (
    MalformedParametersError,
    MalformedTableError,
    format_file_not_found,
    format_invalid_count,
)
from hwexact.utils.logging import get_logger
from hwexact.utils.validation import validate_allele_count

logger = get_logger(__name__)


@dataclass
class HWEInput:
    """Parsed exact-test input.

    Attributes:
        table: Observed genotype table.
        params: Randomization parameters.
        source: Where the input was read from.
    """

    table: GenotypeTable
    params: RandomizationParameters
    source: str = "<string>"


def _parse_int(token: str) -> int | None:
    try:
        return int(token)
    except ValueError:
        return None


def parse_input_text(
    text: str,
    max_alleles: int = DEFAULT_MAX_ALLELES,
    source: str = "<string>",
) -> HWEInput:
    """Parse the contents of an exact-test input file.

    Args:
        text: File contents.
        max_alleles: Largest allowed number of alleles.
        source: Name used in log messages.

    Returns:
        HWEInput with the table and parameters.

    Raises:
        MalformedTableError: If K or a genotype count is missing or invalid.
        MalformedParametersError: If the parameters are missing or invalid.
    """
    tokens = text.split()
    if not tokens:
        raise MalformedTableError("Please supply the number of alleles")

    n_alleles = _parse_int(tokens[0])
    if n_alleles is None:
        raise MalformedTableError(
            f"Number of alleles must be an integer, got {tokens[0]!r}"
        )
    validate_allele_count(n_alleles, max_alleles)

    pos = 1
    counts = []
    for i in range(n_alleles):
        for j in range(i + 1):
            if pos >= len(tokens):
                raise MalformedTableError(
                    f"Genotype table ends early: row {i + 1} needs {i + 1} "
                    f"count(s), the file holds {len(counts)} of "
                    f"{n_alleles * (n_alleles + 1) // 2} counts"
                )
            token = tokens[pos]
            value = _parse_int(token)
            if value is None:
                raise MalformedTableError(
                    format_invalid_count(i + 1, j + 1, token, "not an integer")
                )
            if value < 0:
                raise MalformedTableError(
                    format_invalid_count(i + 1, j + 1, token, "negative count")
                )
            counts.append(value)
            pos += 1

    table = GenotypeTable(n_alleles, counts, max_alleles=max_alleles)

    param_tokens = tokens[pos : pos + 3]
    values = [_parse_int(t) for t in param_tokens]
    if len(values) != 3 or any(v is None for v in values):
        raise MalformedParametersError(
            "Please supply the parameters: burn-in steps, number of batches, "
            f"batch size (found {' '.join(param_tokens) or 'nothing'})"
        )
    params = RandomizationParameters(*values)

    if len(tokens) > pos + 3:
        logger.warning(
            f"Ignoring {len(tokens) - pos - 3} trailing token(s) in {source}"
        )

    logger.debug(
        f"Read {n_alleles} alleles, {table.total()} individuals from {source}"
    )
    return HWEInput(table=table, params=params, source=source)


def read_input(
    path: str | Path,
    max_alleles: int = DEFAULT_MAX_ALLELES,
) -> HWEInput:
    """Read an exact-test input file.

    Args:
        path: Path to the input file.
        max_alleles: Largest allowed number of alleles.

    Returns:
        HWEInput with the table and parameters.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedInput: If the table or parameters are invalid.
    """
    path = Path(path)
    logger.info(f"Reading genotype table from {path}")

    if not path.exists():
        raise FileNotFoundError(format_file_not_found(path, "Input file"))

    return parse_input_text(path.read_text(), max_alleles=max_alleles, source=str(path))


def read_batches_tsv(path: str | Path) -> np.ndarray:
    """Read batch p-values from a TSV file.

    Expects a header with a ``p_value`` column.

    Args:
        path: Path to batches TSV file.

    Returns:
        Array of batch p-values in file order.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If the p_value column is missing.
    """
    path = Path(path)
    logger.info(f"Reading batch p-values from {path}")

    if not path.exists():
        raise FileNotFoundError(format_file_not_found(path, "Batches file"))

    values = []
    with open(path) as f:
        header = f.readline().strip().split("\t")
        if "p_value" not in header:
            raise ValueError(f"Missing required column 'p_value' in {path}")
        col = header.index("p_value")

        for line_num, line in enumerate(f, start=2):
            line = line.strip()
            if not line:
                continue
            fields = line.split("\t")
            try:
                values.append(float(fields[col]))
            except (IndexError, ValueError) as e:
                logger.warning(f"Skipping invalid line {line_num}: {e}")
                continue

    logger.info(f"Read {len(values):,} batches from {path}")
    return np.asarray(values, dtype=np.float64)
