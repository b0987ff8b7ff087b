"""Pytest configuration and fixtures for hwexact tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from hwexact.core.models import GenotypeTable, RandomizationParameters


# Three-allele marker with the parameters of a full-length run
SAMPLE_INPUT = """\
3
5
2 5
1 1 5
2000 1000 1000
"""

# Same table with parameters small enough for CLI tests
SMALL_INPUT = """\
3
5
2 5
1 1 5
200 20 100
"""

# Five alleles, tokens spread over lines arbitrarily
FIVE_ALLELE_INPUT = """\
5
3 4 2
0 1 6
2 0 1 3 1 1 0 2 0
500 10 200
"""

# Every individual is homozygous for the first allele
MONOMORPHIC_INPUT = """\
3
4
0 0
0 0 0
100 10 50
"""

BIALLELIC_INPUT = """\
2
5
3 5
100 10 100
"""

NEGATIVE_COUNT_INPUT = """\
3
5
2 -1
1 1 5
100 10 100
"""

MISSING_PARAMETERS_INPUT = """\
3
5
2 5
1 1 5
"""

SINGLE_BATCH_INPUT = """\
3
5
2 5
1 1 5
100 1 100
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


@pytest.fixture
def sample_table() -> GenotypeTable:
    """Three-allele table with N = 19 and allele counts (13, 13, 12).

    Returns:
        GenotypeTable with rows [[5], [2, 5], [1, 1, 5]].
    """
    return GenotypeTable.from_rows([[5], [2, 5], [1, 1, 5]])


@pytest.fixture
def monomorphic_table() -> GenotypeTable:
    """Table whose only non-zero cell is the first homozygote.

    No window of this table allows a switch.
    """
    return GenotypeTable.from_rows([[4], [0, 0], [0, 0, 0]])


@pytest.fixture
def small_params() -> RandomizationParameters:
    """Short randomization run for fast tests."""
    return RandomizationParameters(step=200, group=20, size=100)


@pytest.fixture
def sample_input_path(tmp_path: Path) -> Path:
    """Create an input file with the full-length run parameters.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "marker.dat", SAMPLE_INPUT)


@pytest.fixture
def small_input_path(tmp_path: Path) -> Path:
    """Create an input file with short run parameters.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "small.dat", SMALL_INPUT)


@pytest.fixture
def five_allele_input_path(tmp_path: Path) -> Path:
    """Create a five-allele input file.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "five.dat", FIVE_ALLELE_INPUT)


@pytest.fixture
def monomorphic_input_path(tmp_path: Path) -> Path:
    """Create an input file whose chain can never move.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "monomorphic.dat", MONOMORPHIC_INPUT)


@pytest.fixture
def biallelic_input_path(tmp_path: Path) -> Path:
    """Create an input file declaring only two alleles.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "biallelic.dat", BIALLELIC_INPUT)


@pytest.fixture
def negative_count_input_path(tmp_path: Path) -> Path:
    """Create an input file with a negative genotype count.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "negative.dat", NEGATIVE_COUNT_INPUT)


@pytest.fixture
def missing_parameters_input_path(tmp_path: Path) -> Path:
    """Create an input file without randomization parameters.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "noparams.dat", MISSING_PARAMETERS_INPUT)


@pytest.fixture
def single_batch_input_path(tmp_path: Path) -> Path:
    """Create an input file asking for a single batch.

    Returns:
        Path to the temporary input file.
    """
    return _write(tmp_path, "onebatch.dat", SINGLE_BATCH_INPUT)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory.

    Returns:
        Path to the temporary output directory.
    """
    out_dir = tmp_path / "output"
    out_dir.mkdir()
    return out_dir


@pytest.fixture
def readonly_dir(tmp_path: Path) -> Path:
    """Create a read-only directory for testing permission errors.

    Returns:
        Path to the read-only directory.
    """
    ro_dir = tmp_path / "readonly"
    ro_dir.mkdir()
    ro_dir.chmod(0o444)
    yield ro_dir
    # Restore permissions for cleanup
    ro_dir.chmod(0o755)
