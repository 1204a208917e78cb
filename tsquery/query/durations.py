"""
Duration vocabulary — symbolic time units to query-language duration literals.

Used for ``past(...)`` time windows and ``time(...)`` group buckets.  A
calendar month is approximated as 30 days; this is intentional.
"""
from __future__ import annotations

import re
from datetime import timedelta

_NAMED_DURATIONS: dict[str, str] = {
    "hour": "1h",
    "minute": "1m",
    "second": "1s",
    "millisecond": "1u",
    "ms": "1u",
    "day": "1d",
    "week": "1w",
    "month": "30d",
}

_UNIT_RE = re.compile(r"^[A-Za-z]+$")


def resolve_duration(value: str | int | float | timedelta) -> str:
    """Return the duration literal for *value*.

    - named units (``"hour"``, ``"month"`` …) map through the fixed table
    - a bare unit suffix (``"s"``, ``"h"``) becomes ``"1<unit>"``
    - any other string is passed through verbatim (``"4d"``)
    - numbers and ``timedelta`` are seconds (``"86400s"``)
    """
    if isinstance(value, bool):
        raise TypeError(f"Unsupported duration: {value!r}")
    if isinstance(value, timedelta):
        return f"{int(value.total_seconds())}s"
    if isinstance(value, (int, float)):
        return f"{int(value)}s"
    if isinstance(value, str):
        key = value.strip()
        if key.lower() in _NAMED_DURATIONS:
            return _NAMED_DURATIONS[key.lower()]
        if _UNIT_RE.match(key):
            return f"1{key}"
        return key
    raise TypeError(f"Unsupported duration: {value!r}")
