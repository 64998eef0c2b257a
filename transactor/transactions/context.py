"""
transactions/context.py - Transactor context

A Transactor binds one store adapter, one serialized work queue and one
instance-key counter to a namespace. Transaction logs are created through
it; logs created by different contexts share nothing.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional, Union
import logging
import threading

from transactor.core.config import TransactorConfig
from transactor.storage import Namespace, StoreAdapter
from transactor.storage.adapter import Getter, Setter

from .manager import TransactionLog
from .queue import SerialWorkQueue
from .schemas import InstanceOptions

logger = logging.getLogger("transactions.context")

InstanceOptionsLike = Union[InstanceOptions, Mapping[str, Any], None]


class Transactor:
    """
    Factory and shared state for transaction logs over one namespace.

    Usage:
        transactor = Transactor().configure(getter, setter)
        log = transactor.create()
        other = transactor.create()      # distinct key, same namespace
    """

    def __init__(
        self,
        config: Optional[TransactorConfig] = None,
        adapter: Optional[StoreAdapter] = None,
    ):
        self.config = config or TransactorConfig()
        self.adapter = adapter or StoreAdapter(namespace_key=self.config.store.namespace_key)
        self.queue = SerialWorkQueue(name=f"transactor:{self.adapter.namespace_key}")
        self.lock = threading.RLock()

        # Highest key handed out, so a destroyed log's key is never reused
        self._last_key: Optional[int] = None

    def configure(self, getter: Getter = None, setter: Setter = None) -> "Transactor":
        """Install the store getter/setter; omitted sides use the in-memory store."""
        self.adapter.configure(getter, setter)
        return self

    def _next_key(self, namespace: Namespace) -> int:
        keys = list(namespace.keys())
        if self._last_key is not None:
            keys.append(self._last_key)
        key = max(keys) + 1 if keys else 0
        self._last_key = key
        return key

    def create(self, options: InstanceOptionsLike = None) -> TransactionLog:
        """Create a transaction log with an empty slice of the namespace."""
        with self.lock:
            if not self.adapter.is_configured:
                self.configure()

            namespace = self.adapter.get()
            key = self._next_key(namespace)
            namespace[key] = []
            self.adapter.set(namespace)

        logger.info(f"Transaction log {key} created")
        return TransactionLog(self, key, InstanceOptions.from_value(options))

    async def async_create(self, options: InstanceOptionsLike = None) -> TransactionLog:
        """As create(), for stores whose getter/setter return awaitables."""
        return await self.queue.submit(self._apply_create, options, label="create")

    async def _apply_create(self, options: InstanceOptionsLike) -> TransactionLog:
        if not self.adapter.is_configured:
            self.configure()

        namespace = await self.adapter.aget()
        key = self._next_key(namespace)
        namespace[key] = []
        await self.adapter.aset(namespace)

        logger.info(f"Transaction log {key} created")
        return TransactionLog(self, key, InstanceOptions.from_value(options))

    async def join(self) -> None:
        """Wait for every queued operation to finish."""
        await self.queue.join()

    async def aclose(self) -> None:
        """Stop the work queue consumer."""
        await self.queue.aclose()
