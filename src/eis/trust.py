"""
Trust delta calculation.

Signed difference between a baseline and a current trust value. No
range restriction is applied to either input or to the result.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class TrustMetrics:
    """
    Baseline, current and delta for one trust reading.

    Attributes:
        baseline: Reference trust value
        current: Observed trust value
        delta: current - baseline (exactly 0 when both are 0)
    """
    baseline: float
    current: float
    delta: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_trust_delta(baseline: float, current: float) -> TrustMetrics:
    """
    Compute the signed trust change.

    The zero/zero case is the "no signal" reading and yields an exact 0.

    Examples:
        >>> calculate_trust_delta(0, 0).delta
        0
        >>> round(calculate_trust_delta(0.8, 0.6).delta, 6)
        -0.2
    """
    if baseline == 0 and current == 0:
        return TrustMetrics(baseline=baseline, current=current, delta=0)
    return TrustMetrics(baseline=baseline, current=current, delta=current - baseline)


__all__ = [
    "TrustMetrics",
    "calculate_trust_delta",
]
