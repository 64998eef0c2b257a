"""
Unit tests for StoreAdapter.
"""

import pytest

from transactor.errors import StoreModeError
from transactor.storage import StoreAdapter


class TestDefaultStore:
    """Test the in-memory default store."""

    def test_empty_namespace(self):
        """Test the namespace starts empty."""
        assert StoreAdapter().get() == {}

    def test_configure_is_idempotent(self):
        """Test configure can be called repeatedly."""
        adapter = StoreAdapter()
        adapter.configure()
        adapter.set({0: []})
        adapter.configure()

        assert adapter.is_configured
        assert adapter.get() == {0: []}

    def test_get_returns_copy(self):
        """Test mutating a read namespace does not reach the store."""
        adapter = StoreAdapter().configure()
        adapter.set({0: [{"id": 1}]})

        namespace = adapter.get()
        namespace[0].append({"id": 2})
        namespace[1] = []

        assert adapter.get() == {0: [{"id": 1}]}

    def test_set_stores_copy(self):
        """Test mutating a written namespace does not reach the store."""
        adapter = StoreAdapter().configure()
        namespace = {0: [{"id": 1}]}
        adapter.set(namespace)

        namespace[0][0]["id"] = 99

        assert adapter.get() == {0: [{"id": 1}]}

    def test_namespace_key(self):
        """Test the namespace is kept under the configured key."""
        adapter = StoreAdapter(namespace_key="pending").configure()
        adapter.set({3: []})

        assert adapter._store == {"pending": {3: []}}

    def test_reset(self):
        """Test reset drops the in-memory namespace."""
        adapter = StoreAdapter().configure()
        adapter.set({0: []})
        adapter.reset()
        assert adapter.get() == {}


class TestCustomStore:
    """Test caller-supplied getters and setters."""

    def test_getter_and_setter_called(self, store):
        """Test reads and writes go through the supplied functions."""
        adapter = StoreAdapter().configure(store.get, store.set)

        adapter.set({0: []})
        adapter.get()

        assert store.sets == 1
        assert store.gets == 1

    def test_none_means_empty(self):
        """Test a getter returning None yields an empty namespace."""
        adapter = StoreAdapter().configure(lambda: None, lambda ns: None)
        assert adapter.get() == {}

    def test_string_keys_normalized(self):
        """Test keys read back as strings become ints."""
        adapter = StoreAdapter().configure(lambda: {"0": [], "12": [{"id": 1}]}, lambda ns: None)
        assert adapter.get() == {0: [], 12: [{"id": 1}]}

    def test_only_setter_supplied(self, store):
        """Test a missing getter falls back to the in-memory store."""
        adapter = StoreAdapter().configure(setter=store.set)
        adapter.set({0: []})

        assert store.namespace == {0: []}
        assert adapter.get() == {}

    def test_getter_errors_propagate(self):
        """Test store failures reach the caller unchanged."""

        def broken():
            raise ConnectionError("store offline")

        adapter = StoreAdapter().configure(broken, lambda ns: None)
        with pytest.raises(ConnectionError, match="store offline"):
            adapter.get()


class TestStoreModes:
    """Test sync and async access."""

    def test_sync_get_refuses_async_store(self, async_store):
        """Test a coroutine getter cannot be read synchronously."""
        adapter = StoreAdapter().configure(async_store.get, async_store.set)

        with pytest.raises(StoreModeError) as exc_info:
            adapter.get()
        assert exc_info.value.details["operation"] == "getter"

    def test_sync_set_refuses_async_store(self, async_store):
        """Test a coroutine setter cannot be written synchronously."""
        adapter = StoreAdapter().configure(lambda: {}, async_store.set)

        with pytest.raises(StoreModeError):
            adapter.set({0: []})

    @pytest.mark.asyncio
    async def test_async_access_awaits(self, async_store):
        """Test aget/aset await coroutine store functions."""
        adapter = StoreAdapter().configure(async_store.get, async_store.set)

        await adapter.aset({0: [{"id": 1}]})

        assert await adapter.aget() == {0: [{"id": 1}]}
        assert async_store.sets == 1

    @pytest.mark.asyncio
    async def test_async_access_with_sync_store(self, store):
        """Test aget/aset also work with plain functions."""
        adapter = StoreAdapter().configure(store.get, store.set)

        await adapter.aset({5: []})

        assert await adapter.aget() == {5: []}
