"""
transactor Test Configuration and Fixtures

Provides a recording key-value store and transactors bound to it.
"""

import asyncio
import copy

import pytest


class RecordingStore:
    """
    Dict-backed store exposing the getter/setter pair the adapter expects.

    Usage:
        store = RecordingStore()
        transactor.configure(store.get, store.set)
        store.namespace[0]   # log of instance 0
    """

    def __init__(self):
        self.namespace = {}
        self.gets = 0
        self.sets = 0

    def get(self):
        self.gets += 1
        return self.namespace

    def set(self, value):
        self.sets += 1
        self.namespace = value


class AsyncRecordingStore(RecordingStore):
    """Same store, but getter and setter are coroutines that yield to the loop."""

    async def get(self):
        await asyncio.sleep(0)
        self.gets += 1
        return copy.deepcopy(self.namespace)

    async def set(self, value):
        await asyncio.sleep(0)
        self.sets += 1
        self.namespace = copy.deepcopy(value)


@pytest.fixture
def store():
    """Fresh synchronous store."""
    return RecordingStore()


@pytest.fixture
def async_store():
    """Fresh asynchronous store."""
    return AsyncRecordingStore()


@pytest.fixture
def transactor(store):
    """Transactor bound to the synchronous store."""
    from transactor import Transactor

    return Transactor().configure(store.get, store.set)


@pytest.fixture
def log(transactor):
    """First transaction log of the synchronous store (key 0)."""
    return transactor.create()


@pytest.fixture
def mock_item():
    return {"id": 1, "value": "test"}
