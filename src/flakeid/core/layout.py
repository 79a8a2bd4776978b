"""
Packing and unpacking of Snowflake IDs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from flakeid.core.clock import to_utc
from flakeid.core.constants import (
    MAX_ID,
    MAX_NODE_ID,
    MAX_SEQUENCE,
    MAX_TIMESTAMP_DELTA,
    NODE_SHIFT,
    TIMESTAMP_SHIFT,
)


@dataclass(frozen=True)
class SnowflakeParts:
    """
    Decoded fields of a packed Snowflake ID.

    Attributes:
        timestamp_delta: Milliseconds elapsed since the generator epoch
        node_id: Node identifier (0-255)
        sequence: Per-millisecond counter (0-16383)
    """

    timestamp_delta: int
    node_id: int
    sequence: int

    def timestamp(self, epoch: datetime) -> datetime:
        """Absolute UTC creation time, given the epoch the ID was minted under."""
        return to_utc(epoch) + timedelta(milliseconds=self.timestamp_delta)

    def pack(self) -> int:
        return pack(self.timestamp_delta, self.node_id, self.sequence)


def _check_field(name: str, value: int, upper: int) -> None:
    if not (0 <= value <= upper):
        raise ValueError(f"{name} must be in [0, {upper}], got {value}")


def pack(timestamp_delta: int, node_id: int, sequence: int) -> int:
    """
    Compose a 63-bit ID: delta << 22 | node_id << 14 | sequence.

    Fields outside their width are an internal invariant violation (the
    allocator never produces them) and raise ValueError instead of being
    silently masked.
    """
    _check_field("timestamp_delta", timestamp_delta, MAX_TIMESTAMP_DELTA)
    _check_field("node_id", node_id, MAX_NODE_ID)
    _check_field("sequence", sequence, MAX_SEQUENCE)
    return (timestamp_delta << TIMESTAMP_SHIFT) | (node_id << NODE_SHIFT) | sequence


def unpack(packed: int) -> SnowflakeParts:
    """Split a packed ID back into its (timestamp_delta, node_id, sequence) fields."""
    _check_field("packed", packed, MAX_ID)
    return SnowflakeParts(
        timestamp_delta=packed >> TIMESTAMP_SHIFT,
        node_id=(packed >> NODE_SHIFT) & MAX_NODE_ID,
        sequence=packed & MAX_SEQUENCE,
    )


__all__ = ["SnowflakeParts", "pack", "unpack"]
