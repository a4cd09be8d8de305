"""Parse human duration strings such as '15m', '1d' or '30d'."""

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def parse_duration(value: str | int) -> timedelta:
    """
    Convert a duration to a timedelta.

    Accepts a bare number of seconds or a number followed by one unit
    (s, m, h, d, w). Zero and anything unparseable raise ValueError.
    """
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(value or "")
        if match is None:
            raise ValueError(f"Invalid duration {value!r}; expected e.g. '3600', '15m', '1d'")
        seconds = int(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive, got {value!r}")
    return timedelta(seconds=seconds)
