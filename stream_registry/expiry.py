"""Expiry expression parsing.

Operators describe when a stream key stops working with one of:

- an empty string: the key never expires
- an ISO-8601 style duration such as ``P1Y2M3DT4H5M6.5S`` or ``PT12H``,
  counted from now with fixed conversions (year = 365 days, month = 30 days)
- an absolute RFC 3339 timestamp with offset, e.g. ``2025-01-01T00:00:00+01:00``

Anything else, any duration that adds up to zero, and any duration that
lands past the year 9999 is invalid.
"""

import logging
import math
import re
import time
from datetime import datetime, timezone
from typing import Optional

from stream_registry.models import ExpiryResult

logger = logging.getLogger(__name__)

_NUMBER = r"(\d+(?:\.\d+)?)"

DURATION_PATTERN = re.compile(
    rf"P(?:{_NUMBER}Y)?(?:{_NUMBER}M)?(?:{_NUMBER}D)?"
    rf"(?:T(?:{_NUMBER}H)?(?:{_NUMBER}M)?(?:{_NUMBER}S)?)?"
)

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

# Order matches the capture groups of DURATION_PATTERN
_UNIT_SECONDS = (
    365 * SECONDS_PER_DAY,  # years
    30 * SECONDS_PER_DAY,  # months
    SECONDS_PER_DAY,  # days
    SECONDS_PER_HOUR,  # hours
    SECONDS_PER_MINUTE,  # minutes
    1,  # seconds
)

# Representable instants, 0001-01-01T00:00:00Z to 9999-12-31T23:59:59Z
MIN_INSTANT = int(datetime(1, 1, 1, tzinfo=timezone.utc).timestamp())
MAX_INSTANT = int(datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc).timestamp())


def parse_duration(expression: str) -> Optional[float]:
    """Parse an ISO-8601 style duration into seconds.

    Args:
        expression: Duration string, e.g. "P1DT12H"

    Returns:
        Total seconds, or None if the expression is not a duration

    Example:
        >>> parse_duration("PT1M30S")
        90.0
    """
    match = DURATION_PATTERN.fullmatch(expression)
    if not match:
        return None

    total = 0.0
    for value, unit in zip(match.groups(), _UNIT_SECONDS):
        if value:
            total += float(value) * unit
    return total


def parse_timestamp(expression: str) -> Optional[int]:
    """Parse an RFC 3339 timestamp into epoch seconds.

    A UTC offset (or a trailing ``Z``) is required; naive timestamps are
    rejected since their instant is ambiguous.

    Args:
        expression: Timestamp string

    Returns:
        Epoch seconds, or None if the expression is not a valid timestamp
    """
    candidate = expression.strip()
    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        return None
    return int(parsed.timestamp())


def parse_expiry(expression: str, now: Optional[float] = None) -> ExpiryResult:
    """Turn an operator supplied expiry expression into an ExpiryResult.

    Args:
        expression: Empty string, duration or absolute timestamp
        now: Reference time in epoch seconds (default: current time)

    Returns:
        ExpiryResult.never() for "", ExpiryResult.at(instant) for a valid
        duration or timestamp, ExpiryResult.invalid() otherwise
    """
    if expression == "":
        return ExpiryResult.never()

    if now is None:
        now = time.time()

    duration = parse_duration(expression)
    if duration is not None:
        if duration == 0:
            logger.debug(f"Zero-length duration rejected: {expression!r}")
            return ExpiryResult.invalid()
        end = now + duration
        # Round up so a positive duration always lands after `now`
        if not math.isfinite(end) or math.ceil(end) > MAX_INSTANT:
            logger.debug(f"Duration out of range rejected: {expression!r}")
            return ExpiryResult.invalid()
        return ExpiryResult.at(math.ceil(end))

    instant = parse_timestamp(expression)
    if instant is not None:
        if not MIN_INSTANT <= instant <= MAX_INSTANT:
            logger.debug(f"Timestamp out of range rejected: {expression!r}")
            return ExpiryResult.invalid()
        return ExpiryResult.at(instant)

    logger.debug(f"Unparseable expiry expression: {expression!r}")
    return ExpiryResult.invalid()
