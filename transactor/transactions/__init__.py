"""
transactions/ - Transaction Log

This module provides the buffered edit log: add, undo/redo over save
points, latest-edge collapsing, superimpose and batched or serialized
flushes to caller-supplied workers.
"""

from .schemas import (
    TransactionOptionsInput,
    TransactionOptions,
    Transaction,
    InstanceOptions,
    FlushResult,
    normalize_options,
)

from .edge import (
    latest_edge,
    superimpose,
)

from .queue import (
    WorkStatus,
    WorkItem,
    SerialWorkQueue,
)

from .manager import TransactionLog

from .context import Transactor

__all__ = [
    # Schemas
    "TransactionOptionsInput",
    "TransactionOptions",
    "Transaction",
    "InstanceOptions",
    "FlushResult",
    "normalize_options",
    # Edge
    "latest_edge",
    "superimpose",
    # Queue
    "WorkStatus",
    "WorkItem",
    "SerialWorkQueue",
    # Engine
    "TransactionLog",
    "Transactor",
]
