"""
storage/ - Store adapter

Uniform sync/async access to the namespace that holds every instance's
transaction log.
"""

from .adapter import (
    StoreAdapter,
    Namespace,
    DEFAULT_NAMESPACE_KEY,
)

__all__ = [
    "StoreAdapter",
    "Namespace",
    "DEFAULT_NAMESPACE_KEY",
]
