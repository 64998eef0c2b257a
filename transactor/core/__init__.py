"""
transactor Core Module

Contains the foundation layer shared by every other package:
- OperationKind: add / update / delete tag carried by each transaction
- Configuration dataclasses loaded from files or the environment
"""

from transactor.core.enums import OperationKind
from transactor.core.config import (
    TransactorConfig,
    StoreConfig,
    FlushConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "OperationKind",
    "TransactorConfig",
    "StoreConfig",
    "FlushConfig",
    "LoggingConfig",
    "load_config",
]
