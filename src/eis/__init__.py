"""
EIS: consent lifecycle, integrity scoring and audit trails.

- Issue and format-check Consent Transaction IDs (CTIDs)
- Track consent through PENDING -> GRANTED -> REVOKED / EXPIRED
- Derive custody/regulation integrity and system state from saturation
- Append events to an in-memory audit trail and check its ordering
"""

__version__ = "0.3.0"

from .audit import AuditEvent, AuditTrail, validate_trace
from .client import EISClient
from .consent import ConsentState, ConsentStateMachine, is_valid_transition
from .ctid import generate_ctid, validate_ctid
from .stability import Integrity, SystemState, calculate_integrity, classify_state, is_coupled
from .tolerance import ToleranceWindow, create_tolerance_window, is_within_tolerance
from .trust import TrustMetrics, calculate_trust_delta

__all__ = [
    "__version__",
    "AuditEvent",
    "AuditTrail",
    "validate_trace",
    "EISClient",
    "ConsentState",
    "ConsentStateMachine",
    "is_valid_transition",
    "generate_ctid",
    "validate_ctid",
    "Integrity",
    "SystemState",
    "calculate_integrity",
    "classify_state",
    "is_coupled",
    "ToleranceWindow",
    "create_tolerance_window",
    "is_within_tolerance",
    "TrustMetrics",
    "calculate_trust_delta",
]
