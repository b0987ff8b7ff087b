"""Tests for input validation utilities."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from hwexact.utils.errors import (
    ChainCancelled,
    HWEError,
    MalformedParametersError,
    MalformedTableError,
    format_file_not_found,
    format_invalid_count,
    format_invalid_parameter,
    format_too_few_alleles,
)
from hwexact.utils.validation import (
    validate_allele_count,
    validate_counts,
    validate_output_path,
    validate_parameters,
)


class TestValidateAlleleCount:
    """Tests for validate_allele_count function."""

    def test_valid(self) -> None:
        """Test accepted allele counts."""
        assert validate_allele_count(3, 20) == 3
        assert validate_allele_count(20, 20) == 20

    def test_below_minimum(self) -> None:
        """Test that fewer than three alleles are rejected."""
        with pytest.raises(MalformedTableError, match="less than 3"):
            validate_allele_count(2, 20)

    def test_above_maximum(self) -> None:
        """Test the upper limit and its suggestion."""
        with pytest.raises(MalformedTableError, match="--max-alleles"):
            validate_allele_count(21, 20)

    @pytest.mark.parametrize("value", ["3", 3.5, True, None])
    def test_not_integer(self, value: object) -> None:
        """Test that non-integral values are rejected."""
        with pytest.raises(MalformedTableError, match="must be an integer"):
            validate_allele_count(value, 20)


class TestValidateCounts:
    """Tests for validate_counts function."""

    def test_valid(self) -> None:
        """Test that valid counts come back as ints."""
        assert validate_counts([5, 2.0, 5, 1, 1, 5], 3) == [5, 2, 5, 1, 1, 5]

    def test_returns_copy(self) -> None:
        """Test that the input list is not aliased."""
        counts = [1, 1, 1, 1, 1, 1]
        validated = validate_counts(counts, 3)
        validated[0] = 9
        assert counts[0] == 1

    def test_wrong_length(self) -> None:
        """Test a count list of the wrong size."""
        with pytest.raises(MalformedTableError, match="needs 10"):
            validate_counts([1] * 6, 4)

    def test_negative(self) -> None:
        """Test that a negative count names its position."""
        with pytest.raises(MalformedTableError, match="#4"):
            validate_counts([1, 1, 1, -2, 1, 1], 3)


class TestValidateParameters:
    """Tests for validate_parameters function."""

    def test_valid_parameters(self) -> None:
        """Test that valid parameters pass validation."""
        validate_parameters(step=1, group=2, size=1)
        validate_parameters(step=2000, group=1000, size=1000)

    def test_step_zero(self) -> None:
        """Test error when there is no burn-in."""
        with pytest.raises(MalformedParametersError, match="step"):
            validate_parameters(step=0, group=10, size=10)

    def test_group_one(self) -> None:
        """Test error when only one batch is requested."""
        with pytest.raises(MalformedParametersError, match="two batches"):
            validate_parameters(step=10, group=1, size=10)

    def test_size_zero(self) -> None:
        """Test error for empty batches."""
        with pytest.raises(MalformedParametersError, match="size"):
            validate_parameters(step=10, group=10, size=0)

    def test_non_integer(self) -> None:
        """Test error for a fractional parameter."""
        with pytest.raises(MalformedParametersError, match="must be an integer"):
            validate_parameters(step=10, group=2.5, size=10)


class TestValidateOutputPath:
    """Tests for validate_output_path function."""

    def test_valid_output_path(self, tmp_path: Path) -> None:
        """Test validation of valid output path."""
        out_prefix = tmp_path / "results"
        result = validate_output_path(out_prefix)

        assert result == out_prefix.resolve()

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """Test that parent directories are created."""
        out_prefix = tmp_path / "new_dir" / "subdir" / "results"
        validate_output_path(out_prefix)

        assert out_prefix.parent.exists()

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0,
        reason="root ignores directory permissions",
    )
    def test_unwritable_directory(self, readonly_dir: Path) -> None:
        """Test error for a directory without write permission."""
        with pytest.raises(OSError, match="Cannot write output"):
            validate_output_path(readonly_dir / "results")


class TestErrorFormatting:
    """Tests for error types and message helpers."""

    def test_hierarchy(self) -> None:
        """Test that all input errors are HWEErrors."""
        assert issubclass(MalformedTableError, HWEError)
        assert issubclass(MalformedParametersError, HWEError)
        assert issubclass(ChainCancelled, HWEError)

    def test_error_attributes(self) -> None:
        """Test message and suggestion storage."""
        error = HWEError("bad table", suggestion="fix it")

        assert str(error) == "bad table"
        assert error.suggestion == "fix it"

    def test_chain_cancelled_message(self) -> None:
        """Test the cancellation message."""
        error = ChainCancelled(1500, 3000)

        assert error.completed == 1500
        assert "1,500 of 3,000" in error.message

    def test_display(self) -> None:
        """Test that display() renders without raising."""
        HWEError("bad table", suggestion="fix it").display()

    def test_format_invalid_parameter(self) -> None:
        """Test parameter message with a suggestion."""
        msg = format_invalid_parameter("group", 1, "too small", "Use 2 or more.")

        assert "Invalid value for group: 1" in msg
        assert "Reason: too small" in msg
        assert "Suggestion: Use 2 or more." in msg

    def test_format_invalid_count(self) -> None:
        """Test genotype count message."""
        msg = format_invalid_count(3, 2, "x", "not an integer")

        assert "row 3, column 2" in msg
        assert "'x'" in msg

    def test_format_too_few_alleles(self) -> None:
        """Test allele count message."""
        assert "found 2" in format_too_few_alleles(2)

    def test_format_file_not_found(self, tmp_path: Path) -> None:
        """Test missing-parent hint."""
        msg = format_file_not_found(tmp_path / "nowhere" / "x.dat", "Input file")

        assert msg.startswith("Input file not found")
        assert "parent directory does not exist" in msg
