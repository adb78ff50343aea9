"""
Consent lifecycle state machine.

Every consent record starts PENDING and may only move along the edges of
VALID_TRANSITIONS. REVOKED and EXPIRED are terminal.

Rejected transitions are not errors: ``transition`` returns False and the
state stays where it was. Callers must check the return value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Union


class ConsentState(str, Enum):
    PENDING = "pending"
    GRANTED = "granted"
    REVOKED = "revoked"
    EXPIRED = "expired"


StateLike = Union[ConsentState, str]

VALID_TRANSITIONS: Mapping[ConsentState, FrozenSet[ConsentState]] = MappingProxyType({
    ConsentState.PENDING: frozenset({ConsentState.GRANTED, ConsentState.REVOKED}),
    ConsentState.GRANTED: frozenset({ConsentState.REVOKED, ConsentState.EXPIRED}),
    ConsentState.REVOKED: frozenset(),
    ConsentState.EXPIRED: frozenset(),
})

TERMINAL_STATES: FrozenSet[ConsentState] = frozenset(
    state for state, targets in VALID_TRANSITIONS.items() if not targets
)


def coerce_state(state: StateLike) -> ConsentState:
    """Accept a ConsentState or its string value ("granted", ...).

    Raises ValueError for an unknown state name; that is a caller bug, not
    a rejected transition.
    """
    if isinstance(state, ConsentState):
        return state
    try:
        return ConsentState(str(state).lower())
    except ValueError:
        valid = ", ".join(s.value for s in ConsentState)
        raise ValueError(f"Unknown consent state {state!r} (expected one of: {valid})") from None


def is_valid_transition(from_state: StateLike, to_state: StateLike) -> bool:
    """
    Look up a transition in the fixed table.

    Examples:
        >>> is_valid_transition(ConsentState.PENDING, ConsentState.GRANTED)
        True
        >>> is_valid_transition("revoked", "granted")
        False
        >>> is_valid_transition("granted", "granted")
        False
    """
    return coerce_state(to_state) in VALID_TRANSITIONS[coerce_state(from_state)]


class ConsentStateMachine:
    """Tracks the state of a single consent record."""

    def __init__(self, initial_state: StateLike = ConsentState.PENDING):
        self._state = coerce_state(initial_state)

    @property
    def state(self) -> ConsentState:
        return self._state

    def current_state(self) -> ConsentState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def can_transition(self, to_state: StateLike) -> bool:
        return is_valid_transition(self._state, to_state)

    def transition(self, to_state: StateLike) -> bool:
        """
        Move to ``to_state`` if the table allows it.

        Returns True on success. On rejection the state is unchanged and
        False is returned.
        """
        target = coerce_state(to_state)
        if not is_valid_transition(self._state, target):
            return False
        self._state = target
        return True

    def __repr__(self) -> str:
        return f"ConsentStateMachine(state={self._state.value!r})"


@dataclass
class ConsentRecord:
    """A CTID paired with the lifecycle that governs it."""

    ctid: str
    machine: ConsentStateMachine = field(default_factory=ConsentStateMachine)

    @property
    def state(self) -> ConsentState:
        return self.machine.state

    def transition(self, to_state: StateLike) -> bool:
        return self.machine.transition(to_state)

    def to_dict(self) -> Dict[str, Any]:
        return {"ctid": self.ctid, "state": self.state.value}


__all__ = [
    "ConsentState",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "coerce_state",
    "is_valid_transition",
    "ConsentStateMachine",
    "ConsentRecord",
]
