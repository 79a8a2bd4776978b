"""
Exception hierarchy for flakeid.

All errors derive from SnowflakeError so callers can catch the whole family,
or branch on a specific kind:

    try:
        snowflake = gen.next_id()
    except ClockMovedBackwardError:
        ...  # transient, retry after a delay
    except (EpochTooOldError, GeneratorClosedError):
        ...  # fatal for this instance
"""

from __future__ import annotations

from flakeid.core.constants import MAX_NODE_ID


class SnowflakeError(Exception):
    """Base class for every error raised by flakeid."""


class InvalidNodeError(SnowflakeError, ValueError):
    """Node identifier outside [0, MAX_NODE_ID]."""

    def __init__(self, node_id: object):
        self.node_id = node_id
        super().__init__(
            f"invalid node id {node_id!r}; must be 0 <= id <= {MAX_NODE_ID}"
        )


class EpochError(SnowflakeError, ValueError):
    """Invalid epoch configuration."""


class EpochZeroError(EpochError):
    def __init__(self) -> None:
        super().__init__("the epoch cannot be a zero value")


class EpochInFutureError(EpochError):
    def __init__(self, epoch_ms: int, now_ms: int):
        self.epoch_ms = epoch_ms
        self.now_ms = now_ms
        super().__init__(
            f"the epoch cannot be later than the current millisecond "
            f"(epoch_ms={epoch_ms}, now_ms={now_ms})"
        )


class EpochTooOldError(EpochError):
    """
    More than 2**41 - 1 ms have passed since the epoch.

    Raised at construction and by any allocation once the 69-year budget is
    spent; the generator cannot mint further IDs without a newer epoch.
    """

    def __init__(self, epoch_ms: int, now_ms: int):
        self.epoch_ms = epoch_ms
        self.now_ms = now_ms
        super().__init__(
            "the maximum life cycle of the snowflake algorithm is 69 years "
            f"(epoch_ms={epoch_ms}, now_ms={now_ms})"
        )


class ClockMovedBackwardError(SnowflakeError):
    """The clock reported a time earlier than the last allocation. Retryable."""

    def __init__(self, last_ms: int, current_ms: int):
        self.last_ms = last_ms
        self.current_ms = current_ms
        super().__init__(
            f"clock moved backwards by {self.drift_ms}ms; refusing to generate id"
        )

    @property
    def drift_ms(self) -> int:
        return self.last_ms - self.current_ms


class GeneratorClosedError(SnowflakeError):
    def __init__(self) -> None:
        super().__init__("generator is closed")


class GeneratorConflictError(SnowflakeError):
    """The process-wide generator is active with different parameters."""


class GeneratorNotInitializedError(SnowflakeError):
    """No active process-wide generator."""


__all__ = [
    "SnowflakeError",
    "InvalidNodeError",
    "EpochError",
    "EpochZeroError",
    "EpochInFutureError",
    "EpochTooOldError",
    "ClockMovedBackwardError",
    "GeneratorClosedError",
    "GeneratorConflictError",
    "GeneratorNotInitializedError",
]
