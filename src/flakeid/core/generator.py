"""
Snowflake ID generator facade.

Layout of a generated ID (63 bits, high to low):

    [ timestamp_delta (41 b) ][ node_id (8 b) ][ sequence (14 b) ]

timestamp_delta = milliseconds since the configured epoch (~69.7 years)
node_id         = caller-assigned, 0-255, unique per running process
sequence        = per-millisecond counter, 0-16383
"""

from __future__ import annotations

from datetime import datetime
from types import TracebackType
from typing import Optional, Type

from flakeid.core.allocator import SequenceAllocator
from flakeid.core.clock import Clock, SystemClock, is_zero_time, to_epoch_ms, to_utc
from flakeid.core.constants import MAX_NODE_ID, MAX_TIMESTAMP_DELTA
from flakeid.core.errors import (
    ClockMovedBackwardError,
    EpochInFutureError,
    EpochTooOldError,
    EpochZeroError,
    GeneratorClosedError,
    InvalidNodeError,
)
from flakeid.core.layout import SnowflakeParts, pack, unpack
from flakeid.monitoring.metrics import (
    ACTIVE_GENERATORS,
    ALLOCATION_ERRORS,
    IDS_GENERATED,
)
from flakeid.utils.logging import get_logger, log_context
from flakeid.utils.retry import retry

logger = get_logger(__name__)

_ERROR_REASONS: dict[type, str] = {
    ClockMovedBackwardError: "clock_moved_backward",
    EpochTooOldError: "epoch_too_old",
    GeneratorClosedError: "generator_closed",
}


def _validate_node(node_id: object) -> int:
    # bool is an int subclass but never a meaningful node id
    if isinstance(node_id, bool) or not isinstance(node_id, int):
        raise InvalidNodeError(node_id)
    if not (0 <= node_id <= MAX_NODE_ID):
        raise InvalidNodeError(node_id)
    return node_id


def _validate_epoch(epoch: Optional[datetime], now_ms: int) -> datetime:
    if epoch is None or is_zero_time(epoch):
        raise EpochZeroError()
    epoch_ms = to_epoch_ms(epoch)
    if epoch_ms > now_ms:
        raise EpochInFutureError(epoch_ms, now_ms)
    if now_ms - epoch_ms > MAX_TIMESTAMP_DELTA:
        raise EpochTooOldError(epoch_ms, now_ms)
    return to_utc(epoch)


class SnowflakeGenerator:
    """
    Thread-safe Snowflake ID generator.

    Instances are caller-owned: construct one per node, share it between
    threads, and close() it when done. Closing is terminal.

    Args:
        node_id: Node identifier in [0, 255], unique per running process
        epoch: Zero point of the timestamp field (naive values are UTC)
        clock: Millisecond clock; defaults to the system wall clock

    Raises:
        InvalidNodeError, EpochZeroError, EpochInFutureError, EpochTooOldError
    """

    def __init__(
        self,
        node_id: int,
        epoch: Optional[datetime],
        *,
        clock: Optional[Clock] = None,
    ):
        self.clock: Clock = clock or SystemClock()
        self.node_id = _validate_node(node_id)
        self.epoch = _validate_epoch(epoch, self.clock.now_ms())
        self.epoch_ms = to_epoch_ms(self.epoch)

        self._allocator = SequenceAllocator(self.epoch_ms, self.clock)
        self._node_label = str(self.node_id)

        ACTIVE_GENERATORS.inc()
        logger.info(
            "generator_created",
            node_id=self.node_id,
            epoch=self.epoch.isoformat(),
        )

    @property
    def closed(self) -> bool:
        return self._allocator.closed

    def _record_error(self, exc: BaseException) -> None:
        reason = _ERROR_REASONS.get(type(exc))
        if reason is not None:
            ALLOCATION_ERRORS.labels(reason=reason).inc()

    def next_id(self) -> int:
        """
        Mint the next ID.

        Raises:
            GeneratorClosedError: after close()
            ClockMovedBackwardError: the clock stepped back since the last ID
            EpochTooOldError: the 41-bit timestamp budget is spent
        """
        if self._allocator.closed:
            ALLOCATION_ERRORS.labels(reason="generator_closed").inc()
            raise GeneratorClosedError()

        try:
            slot = self._allocator.allocate()
        except (ClockMovedBackwardError, EpochTooOldError, GeneratorClosedError) as exc:
            self._record_error(exc)
            raise

        IDS_GENERATED.labels(node_id=self._node_label).inc()
        return pack(slot.timestamp_delta, self.node_id, slot.sequence)

    def next_ids(self, count: int) -> list[int]:
        """Mint `count` consecutive IDs in one critical section, ascending."""
        if self._allocator.closed:
            ALLOCATION_ERRORS.labels(reason="generator_closed").inc()
            raise GeneratorClosedError()

        try:
            slots = self._allocator.allocate_many(count)
        except (ClockMovedBackwardError, EpochTooOldError, GeneratorClosedError) as exc:
            self._record_error(exc)
            raise

        IDS_GENERATED.labels(node_id=self._node_label).inc(len(slots))
        return [pack(s.timestamp_delta, self.node_id, s.sequence) for s in slots]

    def next_id_with_retry(
        self, max_attempts: int = 3, backoff_base: float = 0.001
    ) -> int:
        """
        Like next_id(), but waits out a clock that stepped backwards.

        Only ClockMovedBackwardError is retried; everything else propagates
        on the first failure.
        """
        with log_context(node_id=self.node_id):
            return retry(
                max_attempts=max_attempts,
                backoff_base=backoff_base,
                exceptions=(ClockMovedBackwardError,),
            )(self.next_id)()

    def decode(self, snowflake: int) -> SnowflakeParts:
        return unpack(snowflake)

    def timestamp_of(self, snowflake: int) -> datetime:
        """UTC creation time of an ID minted under this generator's epoch."""
        return unpack(snowflake).timestamp(self.epoch)

    def close(self) -> None:
        """Shut the generator down. Idempotent."""
        if self._allocator.close():
            ACTIVE_GENERATORS.dec()
            logger.info("generator_closed", node_id=self.node_id)

    def __enter__(self) -> "SnowflakeGenerator":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "active"
        return (
            f"SnowflakeGenerator(node_id={self.node_id}, "
            f"epoch={self.epoch.isoformat()!r}, {state})"
        )


def new_generator(
    node_id: int,
    epoch: Optional[datetime],
    *,
    clock: Optional[Clock] = None,
) -> SnowflakeGenerator:
    """Validate parameters and return a ready, caller-owned generator."""
    return SnowflakeGenerator(node_id, epoch, clock=clock)


__all__ = ["SnowflakeGenerator", "new_generator"]
