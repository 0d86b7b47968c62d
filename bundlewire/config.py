"""Mode and trace defaults.

This is the only place that reads ambient environment variables. Callers
resolve once at the edge (CLI, ``compile``) and pass concrete values down.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

DEFAULT_MODE = "development"
MODE_ENV = "MODE"
TRACE_ENV = "BUNDLEWIRE_TRACE"

MODES: Tuple[Optional[str], ...] = ("development", "production", None)


def resolve_mode(mode: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
    if mode:
        return mode
    env = os.environ if environ is None else environ
    return env.get(MODE_ENV) or DEFAULT_MODE


def resolve_trace(trace: Optional[bool] = None, environ: Optional[Mapping[str, str]] = None) -> bool:
    if trace is not None:
        return trace
    env = os.environ if environ is None else environ
    return bool(env.get(TRACE_ENV))
