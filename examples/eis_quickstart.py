#!/usr/bin/env python3
"""
EIS Quickstart Example

Demonstrates the complete flow:
1. Grant consent and receive a CTID
2. Feed saturation readings and watch the system state move
3. Record a trust delta
4. Revoke consent, then try an illegal transition
5. Check the audit trail's ordering

Run:
    pip install -e .
    python examples/eis_quickstart.py

Or just run the built-in demo:
    eis demo
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def main():
    from eis.client import EISClient

    print("=" * 60)
    print("EIS QUICKSTART")
    print("=" * 60)

    client = EISClient()

    ctid = client.grant_consent("user-123", scope="emotional-analysis")
    print(f"\n1. Consent granted: {ctid}")

    print("\n2. Saturation sweep:")
    for saturation in (20, 45, 60, 85):
        status = client.record_saturation("user-123", saturation)
        coupling = "coupled" if status.coupled else "decoupled"
        print(
            f"   - s={saturation:>3}  custody={status.integrity.custody:>5.1f}"
            f"  regulation={status.integrity.regulation:>5.1f}"
            f"  -> {status.state.value} ({coupling})"
        )

    metrics = client.calculate_trust_delta("user-123", baseline=0.8, current=0.6)
    print(f"\n3. Trust delta: {metrics.delta:+.2f}")

    revoked = client.revoke_consent("user-123", ctid)
    expired = client.expire_consent("user-123", ctid)
    print(f"\n4. Revoke: {revoked}, expire after revoke: {expired}")
    print(f"   Final state: {client.consent_state(ctid).value}")

    result = client.validate()
    print(f"\n5. Audit trail: {result.event_count} events, ordering {'OK' if result.passed else 'BROKEN'}")
    for event in client.events():
        print(f"   - {event.event_type:<28} {event.payload}")


if __name__ == "__main__":
    main()
