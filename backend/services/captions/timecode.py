"""Timestamp codec for cue timings (HH:MM:SS.mmm)."""

from __future__ import annotations

import math
import re
from decimal import Decimal

from .errors import FormatError, ValidationError

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE

# Hours take two or more digits; there is no upper bound on them.
_TIMESTAMP_PATTERN = re.compile(r"([0-9]{2,}):([0-9]{2}):([0-9]{2})\.([0-9]{3})")


def to_milliseconds(seconds: float) -> int:
    """Truncate a non-negative seconds offset to whole milliseconds."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise ValidationError(f"Timestamp must be a number, got {seconds!r}")
    if not math.isfinite(seconds) or seconds < 0:
        raise ValidationError(f"Timestamp must be a finite non-negative number, got {seconds!r}")
    # Go through the shortest repr so 1.001 truncates to 1001ms, not 1000ms.
    return int(Decimal(str(seconds)) * MS_PER_SECOND)


def encode(seconds: float, separator: str = ".") -> str:
    """Convert seconds to a zero-padded ``HH:MM:SS.mmm`` timestamp.

    The sub-millisecond remainder is truncated, never rounded. Negative or
    non-finite input raises ``ValidationError``.
    """
    total_ms = to_milliseconds(seconds)
    hours, remainder = divmod(total_ms, MS_PER_HOUR)
    minutes, remainder = divmod(remainder, MS_PER_MINUTE)
    secs, millis = divmod(remainder, MS_PER_SECOND)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{separator}{millis:03d}"


def decode(timestamp: str) -> float:
    """Parse a ``HH:MM:SS.mmm`` timestamp back into seconds.

    Raises:
        FormatError: on any deviation from the fixed-width pattern, or when
            the minutes or seconds field is 60 or more.
    """
    if not isinstance(timestamp, str):
        raise FormatError(f"Timestamp must be a string, got {type(timestamp).__name__}")

    match = _TIMESTAMP_PATTERN.fullmatch(timestamp)
    if match is None:
        raise FormatError(f"Malformed timestamp {timestamp!r}, expected HH:MM:SS.mmm")

    hours, minutes, secs, millis = (int(group) for group in match.groups())
    if minutes >= 60:
        raise FormatError(f"Minutes field out of range in timestamp {timestamp!r}")
    if secs >= 60:
        raise FormatError(f"Seconds field out of range in timestamp {timestamp!r}")

    total_ms = hours * MS_PER_HOUR + minutes * MS_PER_MINUTE + secs * MS_PER_SECOND + millis
    return total_ms / MS_PER_SECOND
