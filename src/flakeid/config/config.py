from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from flakeid.core.clock import Clock
from flakeid.core.generator import SnowflakeGenerator, new_generator
from flakeid.utils.logging import configure_logging as apply_logging_settings

DEFAULT_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class GeneratorConfig(BaseModel):
    """Generator settings for services that mint IDs."""

    node_id: int = Field(
        0,
        description="Node identifier (0-255), unique per running process",
    )
    epoch: datetime = Field(
        DEFAULT_EPOCH,
        description="Zero point of the timestamp field (ISO-8601, UTC if naive)",
    )
    log_level: str = Field(
        "INFO",
        description="Root log level applied by configure_logging()",
    )
    json_logs: bool = Field(
        True,
        description="Render logs as JSON (False: console renderer)",
    )

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        epoch_raw = os.getenv("FLAKEID_EPOCH", "")
        return cls(
            node_id=int(os.getenv("FLAKEID_NODE_ID", "0")),
            epoch=datetime.fromisoformat(epoch_raw) if epoch_raw else DEFAULT_EPOCH,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("FLAKEID_JSON_LOGS", "true").lower() == "true",
        )

    def build_generator(self, clock: Optional[Clock] = None) -> SnowflakeGenerator:
        """Construct a generator; node/epoch validation raises the usual typed errors."""
        return new_generator(self.node_id, self.epoch, clock=clock)

    def configure_logging(self) -> None:
        """Apply log level and renderer, binding node_id to every log record."""
        apply_logging_settings(self.log_level, self.json_logs, node_id=self.node_id)
