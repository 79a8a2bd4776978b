"""flakeid - Snowflake ID generator."""

__version__ = "0.1.0"

from .core import (  # noqa: E402
    ClockMovedBackwardError,
    EpochInFutureError,
    EpochTooOldError,
    EpochZeroError,
    GeneratorClosedError,
    GeneratorConflictError,
    GeneratorNotInitializedError,
    InvalidNodeError,
    SnowflakeError,
    SnowflakeGenerator,
    SnowflakeParts,
    close_default,
    get_default,
    init_default,
    new_generator,
    pack,
    unpack,
)

__all__ = [
    "SnowflakeGenerator",
    "SnowflakeParts",
    "new_generator",
    "pack",
    "unpack",
    "init_default",
    "get_default",
    "close_default",
    "SnowflakeError",
    "InvalidNodeError",
    "EpochZeroError",
    "EpochInFutureError",
    "EpochTooOldError",
    "ClockMovedBackwardError",
    "GeneratorClosedError",
    "GeneratorConflictError",
    "GeneratorNotInitializedError",
]
