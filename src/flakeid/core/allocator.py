# allocator.py
from __future__ import annotations

import threading
from typing import NamedTuple

from flakeid.core.clock import Clock
from flakeid.core.constants import MAX_SEQUENCE, MAX_TIMESTAMP_DELTA
from flakeid.core.errors import (
    ClockMovedBackwardError,
    EpochTooOldError,
    GeneratorClosedError,
)
from flakeid.monitoring.metrics import SEQUENCE_EXHAUSTED
from flakeid.utils.logging import get_logger

logger = get_logger(__name__)


class Allocation(NamedTuple):
    """One (timestamp_delta, sequence) slot handed out by the allocator."""

    timestamp_delta: int
    sequence: int


class SequenceAllocator:
    """
    Hands out strictly increasing (timestamp_delta, sequence) pairs.

    State (last_timestamp_ms, sequence, closed) is only touched while holding
    `_lock`, which makes every allocate() call a single linearization point
    across threads.

    Policy:
        - clock moved backwards  -> ClockMovedBackwardError (fail fast)
        - sequence exhausted     -> spin until the next millisecond
        - epoch budget exhausted -> EpochTooOldError, on every call
    """

    def __init__(self, epoch_ms: int, clock: Clock):
        self.epoch_ms = epoch_ms
        self.clock = clock

        self._lock = threading.Lock()
        self._last_ms = -1
        self._seq = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_timestamp_ms(self) -> int:
        return self._last_ms

    @property
    def sequence(self) -> int:
        return self._seq

    def _delta(self, now_ms: int) -> int:
        delta = now_ms - self.epoch_ms
        # a clock before the epoch wraps to a huge unsigned delta
        if delta < 0 or delta > MAX_TIMESTAMP_DELTA:
            raise EpochTooOldError(self.epoch_ms, now_ms)
        return delta

    def _wait_next_ms(self) -> int:
        now_ms = self.clock.now_ms()
        while now_ms <= self._last_ms:
            now_ms = self.clock.now_ms()
        return now_ms

    def _allocate_locked(self) -> Allocation:
        if self._closed:
            raise GeneratorClosedError()

        now_ms = self.clock.now_ms()
        delta = self._delta(now_ms)

        if now_ms < self._last_ms:
            raise ClockMovedBackwardError(self._last_ms, now_ms)

        # state is only written back once every check has passed
        seq = 0
        if now_ms == self._last_ms:
            seq = (self._seq + 1) & MAX_SEQUENCE
            if seq == 0:
                # overflow - wait for the next millisecond
                SEQUENCE_EXHAUSTED.inc()
                logger.debug("sequence_exhausted", last_ms=self._last_ms)
                now_ms = self._wait_next_ms()
                delta = self._delta(now_ms)

        self._last_ms = now_ms
        self._seq = seq
        return Allocation(delta, seq)

    def allocate(self) -> Allocation:
        with self._lock:
            return self._allocate_locked()

    def allocate_many(self, count: int) -> list[Allocation]:
        """
        Allocate `count` consecutive slots under one lock acquisition.

        All-or-nothing: if any slot fails, the error propagates and the slots
        already taken are discarded (they are never reissued).
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        with self._lock:
            return [self._allocate_locked() for _ in range(count)]

    def close(self) -> bool:
        """
        Mark the allocator closed.

        Returns True for the call that performed the transition. Once this
        returns, every allocate() fails with GeneratorClosedError.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            return True

    def __repr__(self) -> str:
        return (
            f"SequenceAllocator(epoch_ms={self.epoch_ms}, "
            f"last_ms={self._last_ms}, seq={self._seq}, closed={self._closed})"
        )


__all__ = ["Allocation", "SequenceAllocator"]
