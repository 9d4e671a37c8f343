from __future__ import annotations

import os as _os

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63

DEBUG_PY_TRACE_ENV = "MONKEY_DEBUG_PY_TRACE"
RECURSION_LIMIT_ENV = "MONKEY_RECURSION_LIMIT"
DEFAULT_RECURSION_LIMIT = 10_000


def to_int64(value: int) -> int:
    """Wrap a Python int into the signed 64-bit range (two's complement)."""
    value &= _INT64_MASK
    return value - (1 << 64) if value & _INT64_SIGN else value


def trunc_div(left: int, right: int) -> int:
    """Integer division rounding toward zero; `right` must be non-zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def debug_py_trace_enabled() -> bool:
    """True when internal Python tracebacks should be shown to the user."""
    raw = _os.environ.get(DEBUG_PY_TRACE_ENV, "")
    return raw.strip().lower() in ("1", "true", "yes", "on")


def recursion_limit() -> int:
    """Python recursion limit the CLI and REPL run programs under."""
    raw = _os.environ.get(RECURSION_LIMIT_ENV)
    if raw is None:
        return DEFAULT_RECURSION_LIMIT

    try:
        return max(1000, int(raw.strip()))
    except ValueError:
        return DEFAULT_RECURSION_LIMIT
