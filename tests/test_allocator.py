"""Tests for the per-millisecond sequence allocator."""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from prometheus_client import REGISTRY

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from flakeid.core.allocator import Allocation, SequenceAllocator  # noqa: E402
from flakeid.core.clock import SystemClock, to_epoch_ms  # noqa: E402
from flakeid.core.constants import MAX_SEQUENCE, MAX_TIMESTAMP_DELTA  # noqa: E402
from flakeid.core.errors import (  # noqa: E402
    ClockMovedBackwardError,
    EpochTooOldError,
    GeneratorClosedError,
)

EPOCH_MS = to_epoch_ms(datetime(2024, 1, 1, tzinfo=timezone.utc))
BASE_MS = to_epoch_ms(datetime(2025, 1, 1, tzinfo=timezone.utc))
BASE_DELTA = BASE_MS - EPOCH_MS


@pytest.mark.unit
def test_initial_state(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    assert allocator.last_timestamp_ms == -1
    assert allocator.sequence == 0
    assert not allocator.closed
    assert fake_clock.reads == 0


@pytest.mark.unit
def test_same_millisecond_increments_sequence(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)

    slots = [allocator.allocate() for _ in range(4)]

    assert slots == [Allocation(BASE_DELTA, seq) for seq in range(4)]
    assert allocator.last_timestamp_ms == BASE_MS


@pytest.mark.unit
def test_new_millisecond_resets_sequence(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    allocator.allocate()
    allocator.allocate()

    fake_clock.advance(5)
    slot = allocator.allocate()

    assert slot == Allocation(BASE_DELTA + 5, 0)


@pytest.mark.unit
def test_sequence_exhaustion_waits_for_next_millisecond(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    for expected in range(MAX_SEQUENCE + 1):
        assert allocator.allocate().sequence == expected

    before = REGISTRY.get_sample_value("flakeid_sequence_exhausted_total") or 0.0
    # wrap read, two spinning reads still on BASE_MS, then the clock ticks
    fake_clock.queue(BASE_MS, BASE_MS, BASE_MS, BASE_MS + 1)
    reads_before = fake_clock.reads

    slot = allocator.allocate()

    assert slot == Allocation(BASE_DELTA + 1, 0)
    assert fake_clock.reads - reads_before == 4
    assert allocator.last_timestamp_ms == BASE_MS + 1
    after = REGISTRY.get_sample_value("flakeid_sequence_exhausted_total")
    assert after == before + 1


@pytest.mark.unit
def test_failed_wait_after_exhaustion_does_not_reissue(fake_clock) -> None:
    """An error after the overflow wait leaves the last issued slot untouched."""
    allocator = SequenceAllocator(BASE_MS - MAX_TIMESTAMP_DELTA, fake_clock)
    issued = {allocator.allocate() for _ in range(MAX_SEQUENCE + 1)}
    assert len(issued) == MAX_SEQUENCE + 1

    # the wait lands one millisecond past the 41-bit budget
    fake_clock.queue(BASE_MS, BASE_MS + 1)
    with pytest.raises(EpochTooOldError):
        allocator.allocate()
    assert allocator.last_timestamp_ms == BASE_MS
    assert allocator.sequence == MAX_SEQUENCE

    # clock steps back into the window: the millisecond is still exhausted
    fake_clock.set(BASE_MS)
    fake_clock.queue(BASE_MS, BASE_MS, BASE_MS + 1)
    with pytest.raises(EpochTooOldError):
        allocator.allocate()
    assert allocator.sequence == MAX_SEQUENCE


@pytest.mark.unit
def test_clock_moved_backward_fails_fast(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    allocator.allocate()

    fake_clock.set(BASE_MS - 3)
    with pytest.raises(ClockMovedBackwardError) as excinfo:
        allocator.allocate()

    assert excinfo.value.last_ms == BASE_MS
    assert excinfo.value.current_ms == BASE_MS - 3
    assert excinfo.value.drift_ms == 3
    # state untouched, so the next tick still orders after the last slot
    assert allocator.last_timestamp_ms == BASE_MS

    fake_clock.set(BASE_MS)
    assert allocator.allocate() == Allocation(BASE_DELTA, 1)


@pytest.mark.unit
def test_epoch_exhaustion_checked_on_every_call(fake_clock) -> None:
    allocator = SequenceAllocator(BASE_MS - MAX_TIMESTAMP_DELTA, fake_clock)
    assert allocator.allocate() == Allocation(MAX_TIMESTAMP_DELTA, 0)

    fake_clock.advance(1)
    with pytest.raises(EpochTooOldError):
        allocator.allocate()


@pytest.mark.unit
def test_epoch_exhausted_on_first_call() -> None:
    """An allocator built with an epoch older than 2**41 - 1 ms fails immediately."""
    ancient = to_epoch_ms(datetime(1954, 1, 1, tzinfo=timezone.utc))
    allocator = SequenceAllocator(ancient, SystemClock())

    with pytest.raises(EpochTooOldError):
        allocator.allocate()


@pytest.mark.unit
def test_clock_before_epoch_counts_as_exhausted(fake_clock) -> None:
    allocator = SequenceAllocator(BASE_MS + 10, fake_clock)
    with pytest.raises(EpochTooOldError):
        allocator.allocate()


@pytest.mark.unit
def test_closed_allocator_rejects_without_reading_clock(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    assert allocator.close() is True
    assert allocator.close() is False

    reads = fake_clock.reads
    with pytest.raises(GeneratorClosedError):
        allocator.allocate()
    assert fake_clock.reads == reads


@pytest.mark.unit
def test_allocate_many_is_consecutive(fake_clock) -> None:
    allocator = SequenceAllocator(EPOCH_MS, fake_clock)
    allocator.allocate()

    slots = allocator.allocate_many(3)

    assert slots == [Allocation(BASE_DELTA, seq) for seq in (1, 2, 3)]
    with pytest.raises(ValueError):
        allocator.allocate_many(0)
