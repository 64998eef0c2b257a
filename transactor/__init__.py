"""
transactor - In-memory transaction log

Buffers create/update/delete edits against a client-side data set,
offers undo/redo over save points, previews pending edits on top of a
baseline, and flushes them to caller-supplied workers.
"""

from transactor.core import (
    OperationKind,
    TransactorConfig,
    load_config,
)

from transactor.errors import (
    TransactorError,
    MissingWorkerError,
    InvalidOptionsError,
    StoreModeError,
    InstanceDestroyedError,
)

from transactor.storage import StoreAdapter

from transactor.transactions import (
    Transaction,
    TransactionOptions,
    InstanceOptions,
    FlushResult,
    TransactionLog,
    Transactor,
    latest_edge,
    superimpose,
)

from transactor.bootstrap import (
    setup_logging,
    build_transactor,
)

__version__ = "1.0.0"

__all__ = [
    "OperationKind",
    "TransactorConfig",
    "load_config",
    "TransactorError",
    "MissingWorkerError",
    "InvalidOptionsError",
    "StoreModeError",
    "InstanceDestroyedError",
    "StoreAdapter",
    "Transaction",
    "TransactionOptions",
    "InstanceOptions",
    "FlushResult",
    "TransactionLog",
    "Transactor",
    "latest_edge",
    "superimpose",
    "setup_logging",
    "build_transactor",
]
