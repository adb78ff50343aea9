"""
High-level EIS client.

Ties the pieces together for callers that want one object per session:

    client = EISClient()
    ctid = client.grant_consent("user-123", scope="emotional-analysis")
    client.record_saturation("user-123", 35)
    client.calculate_trust_delta("user-123", baseline=0.8, current=0.85)
    client.revoke_consent("user-123", ctid)

Every observable step lands in the client's AuditTrail.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from eis.audit import AuditEvent, AuditTrail, TraceResult, check_trace
from eis.config import EISConfig
from eis.consent import ConsentRecord, ConsentState
from eis.ctid import CTIDIssuer
from eis.stability import StabilityStatus, StabilityTracker
from eis.trust import TrustMetrics, calculate_trust_delta

EVENT_CONSENT_GRANTED = "consent-granted"
EVENT_CONSENT_REVOKED = "consent-revoked"
EVENT_CONSENT_EXPIRED = "consent-expired"
EVENT_TRANSITION_REJECTED = "consent-transition-rejected"
EVENT_TRUST_DELTA = "trust-delta-calculated"
EVENT_SATURATION = "saturation-changed"

_TRANSITION_EVENTS = {
    ConsentState.REVOKED: EVENT_CONSENT_REVOKED,
    ConsentState.EXPIRED: EVENT_CONSENT_EXPIRED,
}


class EISClient:
    """Session-scoped facade over consent, stability, trust and audit."""

    def __init__(
        self,
        config: Optional[EISConfig] = None,
        trail: Optional[AuditTrail] = None,
        issuer: Optional[CTIDIssuer] = None,
    ):
        self.config = config or EISConfig()
        self.trail = trail if trail is not None else AuditTrail()
        self.issuer = issuer or CTIDIssuer(prefix=self.config.ctid_prefix)
        self.tracker = StabilityTracker(
            trail=self.trail,
            coupling_threshold=self.config.coupling_threshold,
            history=self.config.transition_history,
        )
        self._records: Dict[str, ConsentRecord] = {}

    # -- consent ------------------------------------------------------------

    def grant_consent(self, subject_id: str, scope: str) -> str:
        """Open a consent transaction and grant it. Returns the CTID."""
        ctid = self.issuer.issue()
        record = ConsentRecord(ctid=ctid)
        record.transition(ConsentState.GRANTED)
        self._records[ctid] = record
        self.trail.append(EVENT_CONSENT_GRANTED, subject_id, {"ctid": ctid, "scope": scope})
        return ctid

    def revoke_consent(self, subject_id: str, ctid: str) -> bool:
        return self._move(subject_id, ctid, ConsentState.REVOKED)

    def expire_consent(self, subject_id: str, ctid: str) -> bool:
        return self._move(subject_id, ctid, ConsentState.EXPIRED)

    def _move(self, subject_id: str, ctid: str, target: ConsentState) -> bool:
        record = self._records.get(ctid)
        if record is None:
            self.trail.append(EVENT_TRANSITION_REJECTED, subject_id, {
                "ctid": ctid,
                "to_state": target.value,
                "reason": "UNKNOWN_CTID",
            })
            return False

        from_state = record.state
        if not record.transition(target):
            self.trail.append(EVENT_TRANSITION_REJECTED, subject_id, {
                "ctid": ctid,
                "from_state": from_state.value,
                "to_state": target.value,
                "reason": "INVALID_TRANSITION",
            })
            return False

        self.trail.append(_TRANSITION_EVENTS[target], subject_id, {
            "ctid": ctid,
            "from_state": from_state.value,
        })
        return True

    def consent_state(self, ctid: str) -> Optional[ConsentState]:
        record = self._records.get(ctid)
        return record.state if record else None

    def consents(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._records.values()]

    # -- audit --------------------------------------------------------------

    def log_audit(
        self,
        event_type: str,
        subject_id: str,
        consent_id: Optional[str] = None,
    ) -> AuditEvent:
        return self.trail.append(event_type, subject_id, {"consent_id": consent_id})

    def events(self) -> List[AuditEvent]:
        return self.trail.read_all()

    def validate(self) -> TraceResult:
        return check_trace(self.trail.read_all())

    # -- metrics ------------------------------------------------------------

    def calculate_trust_delta(self, subject_id: str, baseline: float, current: float) -> TrustMetrics:
        metrics = calculate_trust_delta(baseline, current)
        self.trail.append(EVENT_TRUST_DELTA, subject_id, metrics.to_dict())
        return metrics

    def record_saturation(self, subject_id: str, saturation: float) -> StabilityStatus:
        """Feed a saturation reading through the tracker and log it.

        A state change additionally produces a ``state-transition`` event
        ahead of the ``saturation-changed`` event.
        """
        status = self.tracker.update(saturation, subject_id)
        self.trail.append(EVENT_SATURATION, subject_id, {
            "saturation": status.saturation,
            "custody": status.integrity.custody,
            "regulation": status.integrity.regulation,
            "state": status.state.value,
            "coupled": status.coupled,
        })
        return status


__all__ = [
    "EISClient",
    "EVENT_CONSENT_GRANTED",
    "EVENT_CONSENT_REVOKED",
    "EVENT_CONSENT_EXPIRED",
    "EVENT_TRANSITION_REJECTED",
    "EVENT_TRUST_DELTA",
    "EVENT_SATURATION",
]
