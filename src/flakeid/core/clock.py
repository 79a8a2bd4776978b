"""Clock sources for the sequence allocator."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol

# Zero value of a timestamp: 0001-01-01 00:00:00 UTC
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Clock(Protocol):
    """Anything that reports the current UTC time in milliseconds since the Unix epoch."""

    def now_ms(self) -> int: ...


class SystemClock:
    """
    Wall clock backed by time.time_ns().

    Not monotonic: NTP corrections and VM pauses can step it backwards.
    """

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000

    def __repr__(self) -> str:
        return "SystemClock()"


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: datetime) -> datetime:
    """Normalise a datetime to UTC; naive values are taken as already UTC."""
    return _as_aware(value).astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    """Milliseconds between the Unix epoch and `value` (negative before 1970)."""
    # aware subtraction works on offsets, so values near datetime.min never overflow
    delta = _as_aware(value) - UNIX_EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def is_zero_time(value: datetime | None) -> bool:
    return value is None or _as_aware(value) == ZERO_TIME


__all__ = ["Clock", "SystemClock", "ZERO_TIME", "is_zero_time", "to_epoch_ms", "to_utc"]
