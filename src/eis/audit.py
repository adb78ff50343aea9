"""
Append-only audit trail and trace validation.

The trail lives in memory for the lifetime of its owner. Events are
stamped on append, never reordered, mutated or removed, and every read
hands back copies so callers cannot alias the trail's internal state.

Thread-safe: append and read are serialised with a re-entrant lock, which
keeps append order and timestamp order consistent.
"""
from __future__ import annotations

import copy
import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------

E_ORDER_INVERSION = "E_ORDER_INVERSION"
E_EVENT_INVALID = "E_EVENT_INVALID"


def _now_ms() -> float:
    return time.time() * 1000


class AuditEvent(BaseModel):
    """
    A single audit record.

    ``payload`` values are expected to be JSON-like (str, number, bool,
    None or a nested mapping of the same). The trail does not enforce
    this; appends never fail on payload contents.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: float
    event_type: str
    subject_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class AuditTrail:
    """
    In-memory, append-only sequence of AuditEvents.

    Timestamps are epoch milliseconds from ``clock`` (wall clock by
    default). If the clock steps backwards between appends, the new event
    reuses the previous timestamp so the trail always passes
    ``validate_trace``.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or _now_ms
        self._events: List[AuditEvent] = []
        self._last_ts: float = float("-inf")
        self._lock = threading.RLock()

    def append(
        self,
        event_type: str,
        subject_id: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        """Stamp and store an event. Returns a copy of the stored event."""
        with self._lock:
            now = max(self._clock(), self._last_ts)
            event = AuditEvent(
                timestamp=now,
                event_type=event_type,
                subject_id=subject_id,
                payload=copy.deepcopy(dict(payload or {})),
            )
            self._events.append(event)
            self._last_ts = now
            return event.model_copy(deep=True)

    def read_all(self) -> List[AuditEvent]:
        """Snapshot of all events in append order."""
        with self._lock:
            return [e.model_copy(deep=True) for e in self._events]

    def to_jsonl(self) -> str:
        """Serialise the snapshot as JSON Lines (one event per line).

        Payload values that are not JSON-native are written as ``str(value)``.
        """
        return "".join(
            json.dumps(e.model_dump(mode="python"), sort_keys=True, default=str) + "\n"
            for e in self.read_all()
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def load_events(lines: Iterable[str]) -> List[AuditEvent]:
    """Parse JSON Lines into AuditEvents. Blank lines are skipped.

    Raises ValueError naming the offending line on malformed input.
    """
    events: List[AuditEvent] = []
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            events.append(AuditEvent.model_validate(json.loads(line)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"line {lineno}: {exc}") from exc
    return events


# ---------------------------------------------------------------------------
# Trace validation
# ---------------------------------------------------------------------------

@dataclass
class TraceError:
    """A single trace-ordering problem."""

    code: str
    message: str
    event_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.event_index is not None:
            d["event_index"] = self.event_index
        return d


@dataclass
class TraceResult:
    """Outcome of checking a trace."""

    passed: bool
    event_count: int = 0
    errors: List[TraceError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "event_count": self.event_count,
            "errors": [e.to_dict() for e in self.errors],
        }


def check_trace(events: Sequence[AuditEvent]) -> TraceResult:
    """Walk the trace once and report the first timestamp inversion.

    Equal consecutive timestamps are allowed. Read-only: the trace is
    never repaired.
    """
    for i in range(1, len(events)):
        prev_ts = events[i - 1].timestamp
        ts = events[i].timestamp
        if ts < prev_ts:
            return TraceResult(
                passed=False,
                event_count=len(events),
                errors=[TraceError(
                    code=E_ORDER_INVERSION,
                    message=f"event {i} timestamp {ts} precedes event {i - 1} timestamp {prev_ts}",
                    event_index=i,
                )],
            )
    return TraceResult(passed=True, event_count=len(events))


def validate_trace(events: Sequence[AuditEvent]) -> bool:
    """
    True if timestamps never decrease along the trace.

    An empty trace is valid.
    """
    return check_trace(events).passed


__all__ = [
    "E_ORDER_INVERSION",
    "E_EVENT_INVALID",
    "AuditEvent",
    "AuditTrail",
    "load_events",
    "TraceError",
    "TraceResult",
    "check_trace",
    "validate_trace",
]
