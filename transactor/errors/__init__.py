"""
errors/ - Error Taxonomy

This module provides structured error classification for the
transaction log.
"""

from .taxonomy import (
    ErrorCategory,
    ErrorCode,
    TransactorError,
    MissingWorkerError,
    InvalidOptionsError,
    StoreModeError,
    InstanceDestroyedError,
)

__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "TransactorError",
    "MissingWorkerError",
    "InvalidOptionsError",
    "StoreModeError",
    "InstanceDestroyedError",
]
