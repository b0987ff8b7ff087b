"""Tests for core data models."""

from __future__ import annotations

import numpy as np
import pytest

from hwexact.core.models import (
    Feasibility,
    GenotypeTable,
    MoveWindow,
    RandomizationParameters,
    RandomizationResult,
    SwitchEvaluation,
    SwitchType,
    cell_index,
)
from hwexact.utils.errors import (
    InvariantViolation,
    MalformedParametersError,
    MalformedTableError,
)


class TestCellIndex:
    """Tests for the lower-triangular cell layout."""

    def test_row_major_order(self) -> None:
        """Test that cells are numbered row by row."""
        order = [cell_index(i, j) for i in range(4) for j in range(i + 1)]
        assert order == list(range(10))

    def test_symmetric(self) -> None:
        """Test that (a, b) and (b, a) address the same cell."""
        for a in range(5):
            for b in range(5):
                assert cell_index(a, b) == cell_index(b, a)


class TestGenotypeTable:
    """Tests for GenotypeTable."""

    def test_from_rows(self, sample_table: GenotypeTable) -> None:
        """Test building a table from rows."""
        assert sample_table.n_alleles == 3
        assert sample_table.counts == [5, 2, 5, 1, 1, 5]
        assert sample_table.rows() == [[5], [2, 5], [1, 1, 5]]

    def test_symmetric_access(self, sample_table: GenotypeTable) -> None:
        """Test that get() ignores argument order."""
        assert sample_table.get(1, 0) == 2
        assert sample_table.get(0, 1) == 2
        assert sample_table.get(2, 1) == sample_table.get(1, 2) == 1

    def test_set(self, sample_table: GenotypeTable) -> None:
        """Test writing a cell through either index order."""
        sample_table.set(0, 2, 7)
        assert sample_table.get(2, 0) == 7

    def test_total(self, sample_table: GenotypeTable) -> None:
        """Test number of individuals."""
        assert sample_table.total() == 19

    def test_allele_counts(self, sample_table: GenotypeTable) -> None:
        """Test allele counts: homozygotes count twice."""
        counts = sample_table.allele_counts()

        assert counts == [13, 13, 12]
        assert sum(counts) == 2 * sample_table.total()

    def test_heterozygote_total(self, sample_table: GenotypeTable) -> None:
        """Test number of heterozygotes."""
        assert sample_table.heterozygote_total() == 4

    def test_copy_is_independent(self, sample_table: GenotypeTable) -> None:
        """Test that mutating a copy leaves the original untouched."""
        clone = sample_table.copy()
        clone.set(0, 0, 0)

        assert sample_table.get(0, 0) == 5
        assert clone != sample_table

    def test_equality(self, sample_table: GenotypeTable) -> None:
        """Test value equality."""
        assert sample_table == GenotypeTable(3, [5, 2, 5, 1, 1, 5])

    def test_repr(self, sample_table: GenotypeTable) -> None:
        """Test string representation."""
        assert "K=3" in repr(sample_table)
        assert "N=19" in repr(sample_table)

    def test_integral_floats_accepted(self) -> None:
        """Test that counts like 5.0 are stored as ints."""
        table = GenotypeTable(3, [5.0, 2, 5, 1, 1, 5])
        assert table.counts[0] == 5
        assert isinstance(table.counts[0], int)

    def test_empty_table_allowed(self) -> None:
        """Test that an all-zero table is a valid table."""
        table = GenotypeTable(3, [0] * 6)
        assert table.total() == 0
        assert table.allele_counts() == [0, 0, 0]

    def test_too_few_alleles(self) -> None:
        """Test that bi-allelic tables are rejected."""
        with pytest.raises(MalformedTableError, match="less than 3"):
            GenotypeTable(2, [1, 2, 3])

    def test_too_many_alleles(self) -> None:
        """Test the configurable allele limit."""
        k = 5
        counts = [1] * (k * (k + 1) // 2)

        with pytest.raises(MalformedTableError, match="at most 4"):
            GenotypeTable(k, counts, max_alleles=4)

        assert GenotypeTable(k, counts, max_alleles=5).n_alleles == k

    def test_wrong_number_of_counts(self) -> None:
        """Test that the flat list must have K(K+1)/2 entries."""
        with pytest.raises(MalformedTableError, match="needs 6"):
            GenotypeTable(3, [1, 2, 3])

    def test_negative_count(self) -> None:
        """Test that negative counts are rejected."""
        with pytest.raises(MalformedTableError, match="negative"):
            GenotypeTable(3, [5, 2, -1, 1, 1, 5])

    def test_non_integral_count(self) -> None:
        """Test that fractional counts are rejected."""
        with pytest.raises(MalformedTableError, match="not an integer"):
            GenotypeTable(3, [5, 2, 1.5, 1, 1, 5])

    def test_ragged_rows(self) -> None:
        """Test that row i must hold i + 1 counts."""
        with pytest.raises(MalformedTableError, match="Row 2"):
            GenotypeTable.from_rows([[5], [2], [1, 1, 5]])

    def test_check_margins_passes(self, sample_table: GenotypeTable) -> None:
        """Test that an unchanged table passes the margin check."""
        sample_table.check_margins([13, 13, 12])

    def test_check_margins_detects_change(self, sample_table: GenotypeTable) -> None:
        """Test that a changed margin is reported."""
        expected = sample_table.allele_counts()
        sample_table.set(0, 0, 6)

        with pytest.raises(InvariantViolation, match="Allele counts changed"):
            sample_table.check_margins(expected)

    def test_check_margins_detects_negative(self, sample_table: GenotypeTable) -> None:
        """Test that a negative cell is reported."""
        sample_table.counts[1] = -1

        with pytest.raises(InvariantViolation, match="Negative"):
            sample_table.check_margins(sample_table.allele_counts())


class TestMoveWindow:
    """Tests for MoveWindow coincidence and scale factor."""

    def test_disjoint_pairs(self) -> None:
        """Test a window whose row and column pairs share no allele."""
        window = MoveWindow.from_indices(0, 1, 2, 3)

        assert window.coincidence == 0
        assert window.cst == 1.0
        assert not window.merged

    def test_diagonal_hit(self) -> None:
        """Test that a shared first allele doubles the scale factor."""
        window = MoveWindow.from_indices(0, 2, 0, 1)

        assert window.coincidence == 1
        assert window.cst == 2.0

    def test_off_diagonal_hit(self) -> None:
        """Test that a shared allele off the diagonal halves the scale factor."""
        window = MoveWindow.from_indices(0, 1, 1, 2)

        assert window.coincidence == 1
        assert window.cst == 0.5

    def test_merged_window(self) -> None:
        """Test identical row and column pairs."""
        window = MoveWindow.from_indices(0, 1, 0, 1)

        assert window.coincidence == 2
        assert window.cst == 4.0
        assert window.merged


class TestSwitchEvaluation:
    """Tests for SwitchEvaluation."""

    def test_partial_ratio(self) -> None:
        """Test that ratio picks the legal direction."""
        d_only = SwitchEvaluation(Feasibility.PARTIAL, SwitchType.D, ratio_d=3.0)
        r_only = SwitchEvaluation(Feasibility.PARTIAL, SwitchType.R, ratio_r=0.25)

        assert d_only.ratio == 3.0
        assert r_only.ratio == 0.25

    def test_none_has_no_ratio(self) -> None:
        """Test that a blocked window carries no ratio."""
        assert SwitchEvaluation(Feasibility.NONE).ratio is None


class TestRandomizationParameters:
    """Tests for RandomizationParameters."""

    def test_total_steps(self) -> None:
        """Test total number of iterations."""
        params = RandomizationParameters(step=2000, group=1000, size=1000)
        assert params.total_steps == 1_002_000

    def test_frozen(self) -> None:
        """Test that parameters cannot be modified."""
        params = RandomizationParameters(10, 10, 10)
        with pytest.raises(AttributeError):
            params.step = 5  # type: ignore[misc]

    def test_integral_floats_stored_as_ints(self) -> None:
        """Test that 10.0 is accepted and stored as the int 10."""
        params = RandomizationParameters(10.0, 2.0, 5)  # type: ignore[arg-type]

        assert params == RandomizationParameters(10, 2, 5)
        assert all(type(v) is int for v in (params.step, params.group, params.size))
        assert params.total_steps == 20

    @pytest.mark.parametrize(
        ("step", "group", "size"),
        [
            (0, 10, 10),
            (10, 1, 10),
            (10, 0, 10),
            (10, 10, 0),
            (10, 10, -5),
        ],
    )
    def test_invalid(self, step: int, group: int, size: int) -> None:
        """Test rejection of out-of-range parameters."""
        with pytest.raises(MalformedParametersError):
            RandomizationParameters(step, group, size)


class TestRandomizationResult:
    """Tests for RandomizationResult rates."""

    def test_rates(self) -> None:
        """Test switch percentages relative to all iterations."""
        result = RandomizationResult(
            p_value=0.5,
            se=0.01,
            ln_p_observed=-3.0,
            ln_p_final=-2.5,
            batch_p_values=np.array([0.4, 0.6]),
            switch_counts=[50, 30, 20],
            accepted_counts=[0, 10, 5],
            total_steps=100,
        )

        assert result.partial_switch_rate == pytest.approx(30.0)
        assert result.full_switch_rate == pytest.approx(20.0)
        assert result.switch_rate == pytest.approx(50.0)
        assert result.acceptance_rate == pytest.approx(15.0)

    def test_rates_without_steps(self) -> None:
        """Test that an empty result reports zero rates."""
        result = RandomizationResult(
            p_value=0.0,
            se=0.0,
            ln_p_observed=0.0,
            ln_p_final=0.0,
            batch_p_values=np.array([]),
        )

        assert result.switch_rate == 0.0
        assert result.acceptance_rate == 0.0
