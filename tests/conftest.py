import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest

# Ensure src/ is on sys.path for local test runs without installation
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from flakeid.core.clock import to_epoch_ms  # noqa: E402
from flakeid.core.registry import close_default  # noqa: E402

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)
EPOCH_MS = to_epoch_ms(EPOCH)
# 2025-01-01T00:00:00Z, well inside the 41-bit window of EPOCH
BASE_MS = to_epoch_ms(datetime(2025, 1, 1, tzinfo=timezone.utc))


class FakeClock:
    """
    Deterministic millisecond clock.

    Readings come from the queued script first, then from `now`.
    `set`/`advance` move `now`; queued values also update it as they are read.
    """

    def __init__(self, start_ms: int = BASE_MS) -> None:
        self.now = start_ms
        self.reads = 0
        self._script: deque[int] = deque()

    def queue(self, *values: int) -> None:
        self._script.extend(values)

    def set(self, ms: int) -> None:
        self.now = ms

    def advance(self, ms: int = 1) -> None:
        self.now += ms

    def now_ms(self) -> int:
        self.reads += 1
        if self._script:
            self.now = self._script.popleft()
        return self.now


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: tests that exercise real clocks and threads",
    )
    config.addinivalue_line("markers", "slow: slow-running tests")


@pytest.fixture
def epoch() -> datetime:
    """Fixed epoch used across the suite (2024-01-01 UTC)."""
    return EPOCH


@pytest.fixture
def fake_clock() -> FakeClock:
    """Scripted clock parked at 2025-01-01 UTC."""
    return FakeClock()


@pytest.fixture
def make_clock():
    """Factory for additional FakeClock instances."""
    return FakeClock


@pytest.fixture(autouse=True)
def _reset_default_generator() -> Iterator[None]:
    close_default()
    yield
    close_default()
