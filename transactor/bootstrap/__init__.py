"""
bootstrap/ - Bootstrap Layer

Logging setup and configured Transactor construction.
"""

from .entrypoints import (
    JSONFormatter,
    setup_logging,
    build_transactor,
)

__all__ = [
    "JSONFormatter",
    "setup_logging",
    "build_transactor",
]
