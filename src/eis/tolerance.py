"""
Tolerance windows for scalar signals.

A window is a baseline plus a symmetric variance. Membership is inclusive
on both bounds.
"""
from __future__ import annotations

import time
import warnings
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ToleranceWindow:
    """
    Immutable baseline/variance envelope.

    Attributes:
        baseline: Centre of the window
        variance: Half-width of the window (stored verbatim, may be negative)
        created_at: Creation time in epoch milliseconds
    """
    baseline: float
    variance: float
    created_at: float

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.baseline - self.variance, self.baseline + self.variance)


def create_tolerance_window(baseline: float, variance: float) -> ToleranceWindow:
    """
    Create a tolerance window stamped with the current time.

    Values are stored as given. A negative variance produces an empty
    window (lower bound above upper bound); it is accepted but flagged
    with a RuntimeWarning.
    """
    if variance < 0:
        warnings.warn(
            f"negative tolerance variance {variance!r}: window contains no values",
            RuntimeWarning,
            stacklevel=2,
        )
    return ToleranceWindow(
        baseline=baseline,
        variance=variance,
        created_at=time.time() * 1000,
    )


def is_within_tolerance(value: float, window: ToleranceWindow) -> bool:
    """
    Check whether ``value`` falls inside the window.

    Examples:
        >>> w = ToleranceWindow(baseline=50, variance=10, created_at=0)
        >>> is_within_tolerance(60, w)
        True
        >>> is_within_tolerance(60.5, w)
        False
    """
    lower, upper = window.bounds
    return lower <= value <= upper


__all__ = [
    "ToleranceWindow",
    "create_tolerance_window",
    "is_within_tolerance",
]
