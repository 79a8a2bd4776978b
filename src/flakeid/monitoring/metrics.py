"""Prometheus metrics for flakeid generators."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    generate_latest,
)

# Counters
IDS_GENERATED = Counter(
    "flakeid_ids_generated_total", "Number of IDs minted", ["node_id"]
)
ALLOCATION_ERRORS = Counter(
    "flakeid_allocation_errors_total",
    "Failed ID allocations by reason",
    ["reason"],
)
SEQUENCE_EXHAUSTED = Counter(
    "flakeid_sequence_exhausted_total",
    "Times the per-millisecond sequence space ran out and allocation waited for the next tick",
)

# Gauges
ACTIVE_GENERATORS = Gauge(
    "flakeid_active_generators",
    "Generators constructed and not yet closed",
)

__all__ = [
    "IDS_GENERATED",
    "ALLOCATION_ERRORS",
    "SEQUENCE_EXHAUSTED",
    "ACTIVE_GENERATORS",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
