"""
Optional process-wide default generator.

Caller-owned SnowflakeGenerator instances are the normal way to use flakeid.
This module is for applications that need global access to one generator:

    init_default(node_id=3, epoch=datetime(2024, 1, 1, tzinfo=timezone.utc))
    snowflake = get_default().next_id()
    close_default()

Re-initialising after close_default() is the only way to reconfigure. An
init_default() call that would reuse an active generator configured with
different parameters raises GeneratorConflictError instead of silently
handing back the old instance.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

from flakeid.core.clock import Clock, SystemClock, to_epoch_ms
from flakeid.core.errors import GeneratorConflictError, GeneratorNotInitializedError
from flakeid.core.generator import SnowflakeGenerator, _validate_epoch, _validate_node
from flakeid.utils.logging import get_logger

logger = get_logger(__name__)

_default_lock = threading.Lock()
_default: Optional[SnowflakeGenerator] = None


def init_default(
    node_id: int,
    epoch: Optional[datetime],
    *,
    clock: Optional[Clock] = None,
) -> SnowflakeGenerator:
    """
    Create the process-wide generator, or return it if already active with the same parameters.

    `node_id` and `epoch` are validated first, so invalid values raise the
    same typed errors whether or not a default exists. Identity is
    (node_id, epoch in ms); `clock` is not compared, and when omitted the
    active default's clock is used for validation.
    """
    global _default

    with _default_lock:
        active = _default if _default is not None and not _default.closed else None
        check_clock: Clock = clock or (active.clock if active is not None else SystemClock())
        valid_node = _validate_node(node_id)
        valid_epoch = _validate_epoch(epoch, check_clock.now_ms())

        if active is not None:
            if active.node_id == valid_node and active.epoch_ms == to_epoch_ms(valid_epoch):
                logger.info("default_generator_reused", node_id=valid_node)
                return active
            raise GeneratorConflictError(
                f"default generator already active with node_id={active.node_id}, "
                f"epoch={active.epoch.isoformat()}; close it before reconfiguring"
            )

        generator = SnowflakeGenerator(valid_node, valid_epoch, clock=clock)
        _default = generator
        logger.info("default_generator_initialized", node_id=valid_node)
        return generator


def get_default() -> SnowflakeGenerator:
    current = _default
    if current is None or current.closed:
        raise GeneratorNotInitializedError(
            "no active default generator; call init_default() first"
        )
    return current


def close_default() -> None:
    """Close the process-wide generator if there is one. Idempotent."""
    with _default_lock:
        if _default is not None:
            _default.close()


__all__ = ["init_default", "get_default", "close_default"]
