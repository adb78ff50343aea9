"""
Runtime configuration for the EIS client.

Defaults can be overridden from the environment:

    EIS_COUPLING_THRESHOLD   float, coupling threshold for both axes
    EIS_CTID_PREFIX          prefix used when issuing/validating CTIDs
    EIS_TRANSITION_HISTORY   number of state transitions kept in memory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from eis.ctid import DEFAULT_PREFIX
from eis.stability import DEFAULT_COUPLING_THRESHOLD


@dataclass
class EISConfig:
    coupling_threshold: float = DEFAULT_COUPLING_THRESHOLD
    ctid_prefix: str = DEFAULT_PREFIX
    transition_history: int = 50

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EISConfig":
        """Build a config from EIS_* variables, falling back to defaults.

        Raises ValueError if a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        cfg = cls()

        raw = env.get("EIS_COUPLING_THRESHOLD")
        if raw:
            try:
                cfg.coupling_threshold = float(raw)
            except ValueError:
                raise ValueError(f"EIS_COUPLING_THRESHOLD must be a number, got {raw!r}") from None

        prefix = env.get("EIS_CTID_PREFIX")
        if prefix:
            cfg.ctid_prefix = prefix

        raw = env.get("EIS_TRANSITION_HISTORY")
        if raw:
            try:
                cfg.transition_history = int(raw)
            except ValueError:
                raise ValueError(f"EIS_TRANSITION_HISTORY must be an integer, got {raw!r}") from None
            if cfg.transition_history < 1:
                raise ValueError("EIS_TRANSITION_HISTORY must be >= 1")

        return cfg


__all__ = ["EISConfig"]
