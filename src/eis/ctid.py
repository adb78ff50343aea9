"""
Consent Transaction IDs (CTIDs).

A CTID marks one consent transaction. It combines a millisecond timestamp
with a short random suffix:

    ctid-1718000000000-k3j9x0a1b

NOTE: this is a placeholder generator. The random suffix comes from the
``random`` module, not ``secrets``, so uniqueness is probabilistic and
issuer-local. Validation is a format check only; it does not prove that a
token was issued by any particular issuer.
"""
from __future__ import annotations

import random
import string
import time
from typing import Any, Optional

DEFAULT_PREFIX = "ctid-"

_BASE36 = string.digits + string.ascii_lowercase
_SUFFIX_LEN = 9


def _random_suffix(rng: random.Random) -> str:
    return "".join(rng.choice(_BASE36) for _ in range(_SUFFIX_LEN))


class CTIDIssuer:
    """
    Issues and format-checks CTIDs for one prefix.

    Each issuer owns its own random source. Two issuers constructed with
    the same seed will produce the same suffix sequence, which is what the
    tests rely on; production callers leave ``seed`` unset.
    """

    def __init__(self, prefix: str = DEFAULT_PREFIX, seed: Optional[int] = None):
        if not prefix:
            raise ValueError("CTID prefix must be a non-empty string")
        self.prefix = prefix
        self._rng = random.Random(seed)

    def issue(self) -> str:
        """Return a new CTID."""
        millis = int(time.time() * 1000)
        return f"{self.prefix}{millis}-{_random_suffix(self._rng)}"

    def validate(self, token: Any) -> bool:
        """True if ``token`` is a non-empty string carrying this issuer's prefix."""
        return isinstance(token, str) and bool(token) and token.startswith(self.prefix)


_default_issuer = CTIDIssuer()


def generate_ctid() -> str:
    """Generate a CTID with the default ``ctid-`` prefix."""
    return _default_issuer.issue()


def validate_ctid(ctid: Any) -> bool:
    """
    Check the format of a CTID.

    Examples:
        >>> validate_ctid("ctid-1718000000000-abc123xyz")
        True
        >>> validate_ctid("trace_20250101T000000_deadbeef")
        False
        >>> validate_ctid(None)
        False
    """
    return _default_issuer.validate(ctid)


__all__ = [
    "DEFAULT_PREFIX",
    "CTIDIssuer",
    "generate_ctid",
    "validate_ctid",
]
