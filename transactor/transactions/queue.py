"""
transactions/queue.py - Serialized work queue

Strict FIFO execution of submitted work functions. One consumer task
drains the queue, so an item starts only after the previous item's work
was invoked and its awaitable (if any) completed.

No timeouts: a work function that never completes stalls every item
submitted after it.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import asyncio
import inspect
import itertools
import logging

logger = logging.getLogger("transactions.queue")


class WorkStatus(Enum):
    """Work item execution status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class WorkItem:
    """One submitted unit of work."""

    item_id: int
    work: Callable[..., Any]
    future: asyncio.Future
    args: tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    label: str = ""
    status: WorkStatus = WorkStatus.PENDING
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SerialWorkQueue:
    """
    FIFO work queue with a single consumer.

    Usage:
        queue = SerialWorkQueue()
        first = queue.submit(write, record_a)
        second = queue.submit(write, record_b)   # starts after first completes
        await second
    """

    def __init__(self, name: str = "transactor"):
        self.name = name
        self._queue: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closing = False
        self._ids = itertools.count(1)
        self._stats = {
            "submitted": 0,
            "completed": 0,
            "failed": 0,
        }

    @property
    def pending_count(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def get_stats(self) -> Dict[str, Any]:
        return dict(self._stats, pending=self.pending_count, name=self.name)

    def submit(self, work: Callable[..., Any], *args, label: str = "", **kwargs) -> asyncio.Future:
        """
        Enqueue work and return a future for its result.

        Must be called from a running event loop. The work function may be
        synchronous or return an awaitable.
        """
        self._ensure_consumer()

        item = WorkItem(
            item_id=next(self._ids),
            work=work,
            future=self._loop.create_future(),
            args=args,
            kwargs=kwargs,
            label=label or getattr(work, "__name__", "work"),
        )
        self._queue.put_nowait(item)
        self._stats["submitted"] += 1

        logger.debug(f"Queued {self.name} item {item.item_id} ({item.label})")
        return item.future

    async def join(self) -> None:
        """Wait until every submitted item has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def aclose(self) -> None:
        """Stop the consumer and cancel items that never started."""
        consumer, self._consumer = self._consumer, None
        if consumer is not None and not consumer.done():
            self._closing = True
            try:
                consumer.cancel()
                await asyncio.gather(consumer, return_exceptions=True)
            finally:
                self._closing = False

        cancelled = 0
        while self._queue is not None and not self._queue.empty():
            item = self._queue.get_nowait()
            item.status = WorkStatus.CANCELLED
            item.future.cancel()
            self._queue.task_done()
            cancelled += 1

        if cancelled:
            logger.info(f"Cancelled {cancelled} pending {self.name} item(s)")

    def _ensure_consumer(self) -> None:
        loop = asyncio.get_running_loop()

        if loop is not self._loop:
            # Queues are bound to the loop they were first used on
            self._loop = loop
            self._queue = asyncio.Queue()
            self._consumer = None

        if self._consumer is None or self._consumer.done():
            self._consumer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        """Consumer loop."""
        queue = self._queue
        while True:
            item = await queue.get()
            try:
                await self._run(item)
            finally:
                queue.task_done()

    async def _run(self, item: WorkItem) -> None:
        if item.future.cancelled():
            item.status = WorkStatus.CANCELLED
            return

        item.status = WorkStatus.RUNNING
        try:
            result = item.work(*item.args, **item.kwargs)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            item.status = WorkStatus.CANCELLED
            item.future.cancel()
            if self._stopping():
                raise
            # Work cancelled on its own; the items behind it still run
            logger.warning(f"{self.name} item {item.item_id} ({item.label}) was cancelled")
        except Exception as e:
            item.status = WorkStatus.FAILED
            self._stats["failed"] += 1
            logger.warning(f"{self.name} item {item.item_id} ({item.label}) failed: {e}")
            if not item.future.done():
                item.future.set_exception(e)
        else:
            item.status = WorkStatus.COMPLETED
            self._stats["completed"] += 1
            if not item.future.done():
                item.future.set_result(result)

    def _stopping(self) -> bool:
        """True when the consumer task itself is being cancelled."""
        if self._closing:
            return True
        task = asyncio.current_task()
        cancelling = getattr(task, "cancelling", None)
        return bool(cancelling and cancelling())
