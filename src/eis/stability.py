"""
Integrity and system-state derivation.

A single saturation scalar (0-100) drives two integrity axes:

- custody:    100 - saturation  (falls as load rises)
- regulation: saturation        (rises with load)

The axes always sum to 100. The coarse system state depends only on the
weaker axis, so the system is healthiest at saturation 50 and degrades
towards either extreme.
"""
from __future__ import annotations

from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Deque, Dict, List, NamedTuple, Optional

if TYPE_CHECKING:
    from eis.audit import AuditTrail

SATURATION_MIN = 0.0
SATURATION_MAX = 100.0

DEFAULT_COUPLING_THRESHOLD = 20.0

STATE_TRANSITION_EVENT = "state-transition"


class SystemState(str, Enum):
    FRACTURED = "fractured"
    CRITICAL = "critical"
    NARROWED = "narrowed"
    STABLE = "stable"


# Lower bounds of each band, ascending. A band owns [bound, next_bound).
STATE_BANDS = (
    (0.0, SystemState.FRACTURED),
    (20.0, SystemState.CRITICAL),
    (40.0, SystemState.NARROWED),
    (80.0, SystemState.STABLE),
)


class Integrity(NamedTuple):
    """Two-axis integrity reading, both on [0, 100]."""
    custody: float
    regulation: float


class StabilityStatus(NamedTuple):
    """Full reading for one saturation value."""
    saturation: float
    integrity: Integrity
    state: SystemState
    coupled: bool


def clamp(value: float, min_val: float = SATURATION_MIN, max_val: float = SATURATION_MAX) -> float:
    """Clamp value to [min_val, max_val] range."""
    return max(min_val, min(max_val, value))


def calculate_integrity(saturation: float) -> Integrity:
    """
    Derive both integrity axes from saturation.

    Saturation is clamped first, so out-of-range input still yields axes
    within [0, 100].

    Examples:
        >>> calculate_integrity(20)
        Integrity(custody=80.0, regulation=20.0)
        >>> calculate_integrity(150)
        Integrity(custody=0.0, regulation=100.0)
    """
    s = float(clamp(saturation))
    return Integrity(custody=SATURATION_MAX - s, regulation=s)


def classify_state(integrity: Integrity) -> SystemState:
    """
    Classify the system by its weaker integrity axis.

    Examples:
        >>> classify_state(Integrity(90, 10))
        <SystemState.FRACTURED: 'fractured'>
        >>> classify_state(Integrity(80, 20))
        <SystemState.CRITICAL: 'critical'>
        >>> classify_state(Integrity(50, 50))
        <SystemState.NARROWED: 'narrowed'>
    """
    weakest = min(integrity.custody, integrity.regulation)
    state = SystemState.FRACTURED
    for bound, band in STATE_BANDS:
        if weakest >= bound:
            state = band
    return state


get_system_state = classify_state


def is_coupled(integrity: Integrity, threshold: float = DEFAULT_COUPLING_THRESHOLD) -> bool:
    """
    True when both axes are at or above ``threshold``.

    At the default threshold coupling is lost exactly when the state
    becomes FRACTURED.
    """
    return integrity.custody >= threshold and integrity.regulation >= threshold


def check_stability(
    saturation: float,
    coupling_threshold: float = DEFAULT_COUPLING_THRESHOLD,
) -> StabilityStatus:
    """Compute integrity, state and coupling for one saturation value."""
    integrity = calculate_integrity(saturation)
    return StabilityStatus(
        saturation=float(clamp(saturation)),
        integrity=integrity,
        state=classify_state(integrity),
        coupled=is_coupled(integrity, coupling_threshold),
    )


def format_stability_status(status: StabilityStatus) -> str:
    """Format a stability reading for CLI display."""
    coupling = "COUPLED" if status.coupled else "DECOUPLED"
    lines = [
        f"Saturation: {status.saturation:g}",
        f"Custody integrity: {status.integrity.custody:g}",
        f"Regulation integrity: {status.integrity.regulation:g}",
        f"Coupling: {coupling}",
    ]
    return f"{status.state.value.upper()}\n" + "\n".join(lines)


class StabilityTracker:
    """
    Follows saturation over time and records state transitions.

    The first reading establishes the state without logging. Each later
    reading that lands in a different state is kept in ``transitions``
    (bounded to ``history`` entries) and, if a trail is attached, appended
    as a ``state-transition`` event.
    """

    def __init__(
        self,
        trail: Optional["AuditTrail"] = None,
        subject_id: str = "system",
        coupling_threshold: float = DEFAULT_COUPLING_THRESHOLD,
        history: int = 50,
    ):
        self.trail = trail
        self.subject_id = subject_id
        self.coupling_threshold = coupling_threshold
        self._status: Optional[StabilityStatus] = None
        self._transitions: Deque[Dict[str, object]] = deque(maxlen=history)

    def update(self, saturation: float, subject_id: Optional[str] = None) -> StabilityStatus:
        """Classify ``saturation`` and log a transition under ``subject_id``
        (the tracker default when omitted).
        """
        status = check_stability(saturation, self.coupling_threshold)
        previous = self._status
        self._status = status

        if previous is not None and previous.state != status.state:
            entry = {
                "prev_state": previous.state.value,
                "next_state": status.state.value,
                "saturation": status.saturation,
            }
            self._transitions.append(entry)
            if self.trail is not None:
                self.trail.append(STATE_TRANSITION_EVENT, subject_id or self.subject_id, entry)

        return status

    @property
    def status(self) -> Optional[StabilityStatus]:
        return self._status

    @property
    def transitions(self) -> List[Dict[str, object]]:
        return [dict(t) for t in self._transitions]


__all__ = [
    "SATURATION_MIN",
    "SATURATION_MAX",
    "DEFAULT_COUPLING_THRESHOLD",
    "STATE_TRANSITION_EVENT",
    "SystemState",
    "STATE_BANDS",
    "Integrity",
    "StabilityStatus",
    "clamp",
    "calculate_integrity",
    "classify_state",
    "get_system_state",
    "is_coupled",
    "check_stability",
    "format_stability_status",
    "StabilityTracker",
]
