"""
storage/adapter.py - Store adapter

Normalizes a caller-supplied getter/setter pair into one access contract
for the shared namespace. The namespace maps instance keys to serialized
transaction logs and is always read and written whole.

Getters and setters may be plain functions or return awaitables. The
synchronous accessors refuse awaitables; the asynchronous accessors accept
both.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
import copy
import inspect
import logging

from transactor.errors import StoreModeError

logger = logging.getLogger("storage.adapter")

Namespace = Dict[int, List[Dict[str, Any]]]
Getter = Callable[[], Any]
Setter = Callable[[Namespace], Any]

DEFAULT_NAMESPACE_KEY = "transactions"


def _normalize_namespace(raw: Any) -> Namespace:
    """Coerce whatever the getter returned into an int-keyed namespace."""
    if raw is None:
        return {}
    namespace: Namespace = {}
    for key, log in dict(raw).items():
        namespace[int(key)] = list(log or [])
    return namespace


def _discard(awaitable: Any) -> None:
    if inspect.iscoroutine(awaitable):
        awaitable.close()


class StoreAdapter:
    """
    Indirection layer between the transaction log and its backing store.

    Usage:
        adapter = StoreAdapter()
        adapter.configure(lambda: store.get("tx"), lambda ns: store.put("tx", ns))
        namespace = adapter.get()
    """

    def __init__(self, namespace_key: str = DEFAULT_NAMESPACE_KEY):
        self.namespace_key = namespace_key
        self._store: Dict[str, Namespace] = {}
        self._getter: Optional[Getter] = None
        self._setter: Optional[Setter] = None

    @property
    def is_configured(self) -> bool:
        return self._getter is not None and self._setter is not None

    def configure(self, getter: Getter = None, setter: Setter = None) -> "StoreAdapter":
        """
        Install a getter/setter pair.

        Either function may be omitted, in which case the internal
        in-memory namespace is used for that side. Calling again replaces
        the previous pair.
        """
        self._getter = getter or self._default_get
        self._setter = setter or self._default_set

        logger.debug(
            f"Store configured (getter={'custom' if getter else 'default'}, "
            f"setter={'custom' if setter else 'default'})"
        )
        return self

    def reset(self) -> None:
        """Drop the internal in-memory namespace."""
        self._store.clear()

    # === DEFAULT STORE ===

    def _default_get(self) -> Namespace:
        return copy.deepcopy(self._store.get(self.namespace_key, {}))

    def _default_set(self, namespace: Namespace) -> None:
        self._store[self.namespace_key] = copy.deepcopy(namespace)

    # === SYNC ACCESS ===

    def get(self) -> Namespace:
        """Read the whole namespace from a synchronous store."""
        self._ensure_configured()
        raw = self._getter()
        if inspect.isawaitable(raw):
            _discard(raw)
            logger.error("Synchronous read against an asynchronous store")
            raise StoreModeError("getter")
        return _normalize_namespace(raw)

    def set(self, namespace: Namespace) -> None:
        """Write the whole namespace to a synchronous store."""
        self._ensure_configured()
        result = self._setter(namespace)
        if inspect.isawaitable(result):
            _discard(result)
            logger.error("Synchronous write against an asynchronous store")
            raise StoreModeError("setter")

    # === ASYNC ACCESS ===

    async def aget(self) -> Namespace:
        """Read the whole namespace, awaiting the getter if needed."""
        self._ensure_configured()
        raw = self._getter()
        if inspect.isawaitable(raw):
            raw = await raw
        return _normalize_namespace(raw)

    async def aset(self, namespace: Namespace) -> None:
        """Write the whole namespace, awaiting the setter if needed."""
        self._ensure_configured()
        result = self._setter(namespace)
        if inspect.isawaitable(result):
            await result

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            self.configure()
