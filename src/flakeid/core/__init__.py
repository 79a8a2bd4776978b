"""flakeid core: bit layout, clock, allocator and generator."""

from .allocator import Allocation, SequenceAllocator
from .clock import Clock, SystemClock
from .constants import MAX_NODE_ID, MAX_SEQUENCE, MAX_TIMESTAMP_DELTA
from .errors import (
    ClockMovedBackwardError,
    EpochError,
    EpochInFutureError,
    EpochTooOldError,
    EpochZeroError,
    GeneratorClosedError,
    GeneratorConflictError,
    GeneratorNotInitializedError,
    InvalidNodeError,
    SnowflakeError,
)
from .generator import SnowflakeGenerator, new_generator
from .layout import SnowflakeParts, pack, unpack
from .registry import close_default, get_default, init_default

__all__ = [
    "Allocation",
    "SequenceAllocator",
    "Clock",
    "SystemClock",
    "MAX_NODE_ID",
    "MAX_SEQUENCE",
    "MAX_TIMESTAMP_DELTA",
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
    "SnowflakeGenerator",
    "new_generator",
    "SnowflakeParts",
    "pack",
    "unpack",
    "init_default",
    "get_default",
    "close_default",
]
