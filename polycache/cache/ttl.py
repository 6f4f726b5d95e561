"""
polycache — TTL Normalization

Converts the TTL forms accepted by the cache contract into a plain second
count:

- None -> the cache's default TTL
- int -> passed through; 0 means persist indefinitely, negative means
  expire immediately
- timedelta / relativedelta -> seconds between now and now + duration

Calendar-aware durations (``relativedelta(months=1)``) resolve against the
current instant, so "one month" is 28 to 31 days depending on when it is used.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from ..errors import InvalidArgumentError

DURATION_TYPES = (timedelta, relativedelta)

Ttl = int | timedelta | relativedelta | None


def normalize_ttl(ttl: Any, default_ttl: int, now: datetime | None = None) -> int:
    """
    Normalize a TTL to an integer number of seconds.

    Args:
        ttl: None, an int second count, or a duration
        default_ttl: Seconds to use when ttl is None
        now: Reference instant for durations (defaults to the current UTC time)

    Returns:
        Second count; zero and negative values are preserved

    Raises:
        InvalidArgumentError: If ttl has an unsupported type
    """
    if ttl is None:
        return default_ttl

    if isinstance(ttl, DURATION_TYPES):
        reference = now if now is not None else datetime.now(UTC)
        end_time = reference + ttl
        return int((end_time - reference).total_seconds())

    # bool is an int subclass but never a meaningful TTL
    if isinstance(ttl, int) and not isinstance(ttl, bool):
        return ttl

    raise InvalidArgumentError(
        f"Invalid TTL: expected int, timedelta, relativedelta or None, got {type(ttl).__name__}",
        {"ttl_type": type(ttl).__name__},
    )


def expiry_timestamp(ttl_seconds: int, now: float | None = None) -> float | None:
    """
    Convert a normalized TTL into an absolute expiry timestamp.

    Returns None for 0 (never expires). Negative TTLs produce a timestamp in
    the past, so the entry is already expired when it is written.
    """
    if ttl_seconds == 0:
        return None
    reference = now if now is not None else time.time()
    return reference + ttl_seconds
