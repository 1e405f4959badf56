"""Optimistic client state and the aggregates derived from it."""

from sigeg.reconciliation.aggregates import (
    compare,
    delivered,
    filter_tasks,
    pending,
    summarize,
    total,
)
from sigeg.reconciliation.client import (
    LOAD_ERROR_MESSAGE,
    ReconciliationClient,
    UnknownTaskError,
)

__all__ = [
    "LOAD_ERROR_MESSAGE",
    "ReconciliationClient",
    "UnknownTaskError",
    "compare",
    "delivered",
    "filter_tasks",
    "pending",
    "summarize",
    "total",
]
