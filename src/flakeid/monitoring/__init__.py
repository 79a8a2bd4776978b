"""
Monitoring utilities for flakeid.
"""

from flakeid.monitoring.metrics import (
    ACTIVE_GENERATORS,
    ALLOCATION_ERRORS,
    CONTENT_TYPE_LATEST,
    IDS_GENERATED,
    SEQUENCE_EXHAUSTED,
    generate_latest,
)

__all__ = [
    "IDS_GENERATED",
    "ALLOCATION_ERRORS",
    "SEQUENCE_EXHAUSTED",
    "ACTIVE_GENERATORS",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
