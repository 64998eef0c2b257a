"""
errors/taxonomy.py - Error classification system

Structured error types raised by the transaction log. Store errors and
worker failures are never wrapped; they reach the caller unchanged.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
from enum import Enum

from transactor.core.enums import OperationKind


class ErrorCategory(Enum):
    """Error categories."""
    # Validation errors (1xxx)
    VALIDATION = "validation"

    # State errors (5xxx)
    STATE = "state"

    # Configuration errors (6xxx)
    CONFIGURATION = "configuration"

    # Store access errors
    STORE = "store"


class ErrorCode(Enum):
    """Specific error codes."""

    # Validation (1xxx)
    VAL_OPTIONS = 1001

    # State (5xxx)
    STA_DESTROYED = 5001

    # Configuration (6xxx)
    CFG_MISSING_WORKER = 6001
    CFG_STORE_MODE = 6002


class TransactorError(Exception):
    """
    Base class for transaction log errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Detailed context for debugging
    """

    code: ErrorCode = ErrorCode.VAL_OPTIONS
    category: ErrorCategory = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str = "",
        *,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Transactor error"
        self.details = details or {}
        self.details.update(kwargs)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "code": self.code.value,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


class MissingWorkerError(TransactorError):
    """No worker was supplied for a kind with pending transactions."""

    code = ErrorCode.CFG_MISSING_WORKER
    category = ErrorCategory.CONFIGURATION

    def __init__(self, kind: OperationKind, pending: int = 0, **kwargs):
        self.kind = OperationKind(kind)
        message = (
            f"No callable '{self.kind.worker_name}' worker for {pending} pending "
            f"{self.kind.value} transaction(s)"
        )
        super().__init__(message, kind=self.kind.value, pending=pending, **kwargs)


class InvalidOptionsError(TransactorError):
    """Transaction options could not be normalized."""

    code = ErrorCode.VAL_OPTIONS
    category = ErrorCategory.VALIDATION


class StoreModeError(TransactorError):
    """An awaitable store was used through a synchronous method."""

    code = ErrorCode.CFG_STORE_MODE
    category = ErrorCategory.STORE

    def __init__(self, operation: str, **kwargs):
        message = (
            f"Store {operation} returned an awaitable; use the async_* methods "
            f"with an asynchronous store"
        )
        super().__init__(message, operation=operation, **kwargs)


class InstanceDestroyedError(TransactorError):
    """The transaction log instance was destroyed and can no longer be used."""

    code = ErrorCode.STA_DESTROYED
    category = ErrorCategory.STATE

    def __init__(self, key: int, **kwargs):
        super().__init__(f"Transaction log {key} was destroyed", key=key, **kwargs)
