"""
Tests for tolerance windows.
"""
from __future__ import annotations

import time

import pytest

from eis.tolerance import ToleranceWindow, create_tolerance_window, is_within_tolerance


class TestCreateToleranceWindow:
    """Tests for window creation."""

    def test_stores_values_verbatim(self) -> None:
        before = time.time() * 1000
        window = create_tolerance_window(0.5, 0.1)
        after = time.time() * 1000

        assert window.baseline == 0.5
        assert window.variance == 0.1
        assert before <= window.created_at <= after

    def test_window_is_immutable(self) -> None:
        window = create_tolerance_window(10, 2)
        with pytest.raises(AttributeError):
            window.baseline = 11  # type: ignore[misc]

    def test_negative_variance_accepted_with_warning(self) -> None:
        with pytest.warns(RuntimeWarning, match="negative tolerance variance"):
            window = create_tolerance_window(10, -2)

        assert window.variance == -2
        assert is_within_tolerance(10, window) is False


class TestIsWithinTolerance:
    """Tests for membership checks."""

    window = ToleranceWindow(baseline=50, variance=10, created_at=0)

    def test_inside(self) -> None:
        assert is_within_tolerance(55, self.window) is True

    def test_bounds_are_inclusive(self) -> None:
        assert is_within_tolerance(40, self.window) is True
        assert is_within_tolerance(60, self.window) is True

    def test_outside(self) -> None:
        assert is_within_tolerance(39.9, self.window) is False
        assert is_within_tolerance(60.1, self.window) is False

    def test_zero_variance_matches_baseline_only(self) -> None:
        window = ToleranceWindow(baseline=3, variance=0, created_at=0)
        assert is_within_tolerance(3, window) is True
        assert is_within_tolerance(3.001, window) is False

    def test_bounds_property(self) -> None:
        assert self.window.bounds == (40, 60)
