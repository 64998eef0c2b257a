"""
transactions/manager.py - Transaction log engine

One TransactionLog owns one instance's ordered list of buffered edits
inside the shared namespace. Every operation reads the whole namespace,
changes this instance's slice and writes the whole namespace back.

Synchronous methods require a synchronous store. The async_* methods are
submitted through the context's serialized work queue and return a future
immediately, so callers can issue several without awaiting each one and
still have them applied in submission order.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING
from contextlib import contextmanager
import asyncio
import inspect
import logging

from transactor.core.enums import OperationKind
from transactor.errors import InstanceDestroyedError, MissingWorkerError
from transactor.storage import Namespace

from .edge import latest_edge, superimpose
from .schemas import (
    FlushResult,
    InstanceOptions,
    OptionsLike,
    Transaction,
    TransactionOptions,
    normalize_options,
)

if TYPE_CHECKING:
    from .context import Transactor

Worker = Callable[[Any], Any]


def _next_transaction_id(transactions: List[Transaction], id: Any) -> int:
    """max(existing) + 1, or the caller's id when the log is empty."""
    if transactions:
        return max(tx.transaction_id for tx in transactions) + 1
    if isinstance(id, int) and not isinstance(id, bool):
        return id
    return 0


def _take_save_run(source: List[Transaction]) -> List[Transaction]:
    """
    Pop from the end of source up to and including the last save point.

    Returns the popped run in original order, or [] (leaving source
    untouched) when source holds no save point.
    """
    if not any(tx.save for tx in source):
        return []

    run: List[Transaction] = []
    while source:
        tx = source.pop()
        run.insert(0, tx)
        if tx.save:
            break
    return run


async def _invoke(worker: Worker, payload: Any) -> Any:
    result = worker(payload)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _invoke_in_order(calls: List[Tuple[Worker, Any]]) -> List[Any]:
    """Await each worker call before starting the next."""
    results = []
    for worker, payload in calls:
        results.append(await _invoke(worker, payload))
    return results


class TransactionLog:
    """
    Buffered edits for one client-side data set.

    Usage:
        log = transactor.create()
        log.add(1, {"name": "draft"}, {"add": True})
        log.add(1, {"name": "final"})
        await log.save(put=api.put_many, post=api.post_many, delete=api.delete_many)
    """

    def __init__(
        self,
        context: "Transactor",
        key: int,
        options: Optional[InstanceOptions] = None,
    ):
        self._context = context
        self.key = key
        self.options = InstanceOptions.from_value(options)
        self.logger = logging.getLogger("transactions")

        # Runs popped by back(), oldest first
        self._reverted: List[Transaction] = []
        self._destroyed = False

    def __repr__(self) -> str:
        return f"TransactionLog(key={self.key}, destroyed={self._destroyed})"

    def __len__(self) -> int:
        return len(self.transactions())

    def __bool__(self) -> bool:
        """Always true; an empty log is still a live instance."""
        return True

    @property
    def reverted(self) -> List[Transaction]:
        """Copy of the redo stack."""
        return list(self._reverted)

    @property
    def can_back(self) -> bool:
        return any(tx.save for tx in self.transactions())

    @property
    def can_forward(self) -> bool:
        return any(tx.save for tx in self._reverted)

    # === NAMESPACE ACCESS ===

    def _check_alive(self) -> None:
        if self._destroyed:
            raise InstanceDestroyedError(self.key)

    @contextmanager
    def _guard(self):
        self._check_alive()
        with self._context.lock:
            yield

    def _load(self, namespace: Namespace) -> List[Transaction]:
        return [Transaction.from_dict(item) for item in namespace.get(self.key, [])]

    def _dump(self, namespace: Namespace, transactions: Iterable[Transaction]) -> Namespace:
        namespace[self.key] = [tx.to_dict() for tx in transactions]
        return namespace

    def _submit(self, work: Callable[..., Any], *args, label: str) -> asyncio.Future:
        self._check_alive()
        return self._context.queue.submit(work, *args, label=f"{label} [log {self.key}]")

    async def _aload(self) -> List[Transaction]:
        self._check_alive()
        return self._load(await self._context.adapter.aget())

    # === MUTATIONS ===

    def _append(
        self,
        transactions: List[Transaction],
        id: Any,
        data: Any,
        options: TransactionOptions,
    ) -> Transaction:
        tx = Transaction(
            id=id,
            data=data,
            options=options,
            transaction_id=_next_transaction_id(transactions, id),
        )
        transactions.append(tx)
        self.logger.debug(
            f"Log {self.key}: {tx.kind.value} id={id!r} _id={tx.transaction_id} save={tx.save}"
        )
        return tx

    def add(self, id: Any, data: Any = None, options: OptionsLike = None) -> Transaction:
        """Append an edit and invalidate the redo stack."""
        normalized = normalize_options(options)

        with self._guard():
            namespace = self._context.adapter.get()
            transactions = self._load(namespace)
            tx = self._append(transactions, id, data, normalized)
            self._context.adapter.set(self._dump(namespace, transactions))
            self._reverted = []

        return tx

    def async_add(self, id: Any, data: Any = None, options: OptionsLike = None) -> asyncio.Future:
        """Queue an add; resolves to the stored Transaction."""
        normalized = normalize_options(options)
        return self._submit(self._apply_add, id, data, normalized, label="add")

    async def _apply_add(self, id: Any, data: Any, options: TransactionOptions) -> Transaction:
        self._check_alive()
        namespace = await self._context.adapter.aget()
        transactions = self._load(namespace)
        tx = self._append(transactions, id, data, options)
        await self._context.adapter.aset(self._dump(namespace, transactions))
        self._reverted = []
        return tx

    def back(self) -> List[Transaction]:
        """
        Undo up to and including the last save point.

        Returns the undone run; empty when there was nothing to undo.
        """
        with self._guard():
            namespace = self._context.adapter.get()
            transactions = self._load(namespace)
            run = _take_save_run(transactions)
            if run:
                self._context.adapter.set(self._dump(namespace, transactions))
                self._reverted.extend(run)

        self._log_move("back", run)
        return run

    def async_back(self) -> asyncio.Future:
        return self._submit(self._apply_back, label="back")

    async def _apply_back(self) -> List[Transaction]:
        self._check_alive()
        namespace = await self._context.adapter.aget()
        transactions = self._load(namespace)
        run = _take_save_run(transactions)
        if run:
            await self._context.adapter.aset(self._dump(namespace, transactions))
            self._reverted.extend(run)

        self._log_move("back", run)
        return run

    def forward(self) -> List[Transaction]:
        """
        Redo the most recently undone run.

        Returns the redone run; empty when there was nothing to redo.
        """
        with self._guard():
            reverted = list(self._reverted)
            run = _take_save_run(reverted)
            if run:
                namespace = self._context.adapter.get()
                transactions = self._load(namespace) + run
                self._context.adapter.set(self._dump(namespace, transactions))
                self._reverted = reverted

        self._log_move("forward", run)
        return run

    def async_forward(self) -> asyncio.Future:
        return self._submit(self._apply_forward, label="forward")

    async def _apply_forward(self) -> List[Transaction]:
        self._check_alive()
        reverted = list(self._reverted)
        run = _take_save_run(reverted)
        if run:
            namespace = await self._context.adapter.aget()
            transactions = self._load(namespace) + run
            await self._context.adapter.aset(self._dump(namespace, transactions))
            self._reverted = reverted

        self._log_move("forward", run)
        return run

    def _log_move(self, direction: str, run: List[Transaction]) -> None:
        if run:
            self.logger.debug(f"Log {self.key}: {direction} moved {len(run)} transaction(s)")
        else:
            self.logger.debug(f"Log {self.key}: {direction} had no save point, nothing moved")

    def clear(self) -> None:
        """Empty this log and its redo stack."""
        with self._guard():
            namespace = self._context.adapter.get()
            self._context.adapter.set(self._dump(namespace, []))
            self._reverted = []

        self.logger.info(f"Log {self.key} cleared")

    def async_clear(self) -> asyncio.Future:
        return self._submit(self._apply_clear, label="clear")

    async def _apply_clear(self) -> None:
        self._check_alive()
        namespace = await self._context.adapter.aget()
        await self._context.adapter.aset(self._dump(namespace, []))
        self._reverted = []
        self.logger.info(f"Log {self.key} cleared")

    def destroy(self) -> None:
        """Remove this log from the namespace. The instance is unusable afterwards."""
        with self._guard():
            namespace = self._context.adapter.get()
            namespace.pop(self.key, None)
            self._context.adapter.set(namespace)
            self._mark_destroyed()

    def async_destroy(self) -> asyncio.Future:
        return self._submit(self._apply_destroy, label="destroy")

    async def _apply_destroy(self) -> None:
        self._check_alive()
        namespace = await self._context.adapter.aget()
        namespace.pop(self.key, None)
        await self._context.adapter.aset(namespace)
        self._mark_destroyed()

    def _mark_destroyed(self) -> None:
        self._destroyed = True
        self._reverted = []
        self.logger.info(f"Log {self.key} destroyed")

    # === READS ===

    def transactions(self) -> List[Transaction]:
        """The full ordered log as Transaction objects."""
        self._check_alive()
        return self._load(self._context.adapter.get())

    def get(self) -> List[Dict[str, Any]]:
        """The full ordered log as {id, data, options} records."""
        return [tx.to_record() for tx in self.transactions()]

    def async_get(self) -> asyncio.Future:
        return self._submit(self._apply_get, label="get")

    async def _apply_get(self) -> List[Dict[str, Any]]:
        return [tx.to_record() for tx in await self._aload()]

    def get_latest_edge(self) -> List[Dict[str, Any]]:
        """One record per logical id; uncommitted add+delete pairs vanish."""
        return [tx.to_record() for tx in latest_edge(self.transactions())]

    def async_get_latest_edge(self) -> asyncio.Future:
        return self._submit(self._apply_get_latest_edge, label="get_latest_edge")

    async def _apply_get_latest_edge(self) -> List[Dict[str, Any]]:
        return [tx.to_record() for tx in latest_edge(await self._aload())]

    def superimpose(self, baseline: Iterable[Any]) -> List[Dict[str, Any]]:
        """Preview baseline records with the pending edits applied."""
        return superimpose(baseline, self.transactions())

    # === FLUSH ===

    async def save(self, put: Worker = None, post: Worker = None, delete: Worker = None) -> FlushResult:
        """
        Call each kind's worker once with the list of its saveable data.

        Workers run concurrently; the first failure propagates.
        """
        snapshot = await self._submit(self._aload, label="save snapshot")
        return await self._save_batched(snapshot, put, post, delete, "save")

    async def save_latest_edge(
        self, put: Worker = None, post: Worker = None, delete: Worker = None
    ) -> FlushResult:
        """As save(), over the latest edge of the log."""
        snapshot = await self._submit(self._aload, label="save_latest_edge snapshot")
        return await self._save_batched(latest_edge(snapshot), put, post, delete, "save_latest_edge")

    async def save_each(
        self,
        put: Worker = None,
        post: Worker = None,
        delete: Worker = None,
        sequential: Optional[bool] = None,
    ) -> FlushResult:
        """
        Call the matching worker once per saveable transaction.

        With sequential (the configured default), each call goes through
        the work queue and completes before the next one starts.
        """
        snapshot = await self._submit(self._aload, label="save_each snapshot")
        return await self._save_individually(snapshot, put, post, delete, sequential, "save_each")

    async def save_each_edge(
        self,
        put: Worker = None,
        post: Worker = None,
        delete: Worker = None,
        sequential: Optional[bool] = None,
    ) -> FlushResult:
        """As save_each(), over the latest edge of the log."""
        snapshot = await self._submit(self._aload, label="save_each_edge snapshot")
        return await self._save_individually(
            latest_edge(snapshot), put, post, delete, sequential, "save_each_edge"
        )

    def _partition(
        self,
        transactions: Iterable[Transaction],
        workers: Dict[OperationKind, Optional[Worker]],
    ) -> Dict[OperationKind, List[Transaction]]:
        """Group saveable transactions by kind and check every needed worker exists."""
        partition: Dict[OperationKind, List[Transaction]] = {kind: [] for kind in OperationKind}
        for tx in transactions:
            if tx.save:
                partition[tx.kind].append(tx)

        for kind, pending in partition.items():
            if pending and not callable(workers.get(kind)):
                self.logger.error(
                    f"Log {self.key}: {len(pending)} {kind.value} transaction(s) "
                    f"but no '{kind.worker_name}' worker"
                )
                raise MissingWorkerError(kind, pending=len(pending), key=self.key)

        return partition

    async def _save_batched(
        self,
        transactions: List[Transaction],
        put: Optional[Worker],
        post: Optional[Worker],
        delete: Optional[Worker],
        operation: str,
    ) -> FlushResult:
        workers = {OperationKind.UPDATE: put, OperationKind.ADD: post, OperationKind.DELETE: delete}
        partition = self._partition(transactions, workers)

        kinds = [kind for kind in OperationKind if partition[kind]]
        payloads = {kind: [tx.data for tx in partition[kind]] for kind in kinds}

        outcomes = await asyncio.gather(
            *(_invoke(workers[kind], payloads[kind]) for kind in kinds)
        )

        result = FlushResult(
            counts={kind: len(payloads[kind]) for kind in kinds},
            results={kind: [outcome] for kind, outcome in zip(kinds, outcomes)},
        )
        self.logger.info(f"Log {self.key}: {operation} flushed {result.to_dict()['counts']}")
        return result

    async def _save_individually(
        self,
        transactions: List[Transaction],
        put: Optional[Worker],
        post: Optional[Worker],
        delete: Optional[Worker],
        sequential: Optional[bool],
        operation: str,
    ) -> FlushResult:
        workers = {OperationKind.UPDATE: put, OperationKind.ADD: post, OperationKind.DELETE: delete}
        partition = self._partition(transactions, workers)

        if sequential is None:
            sequential = self._context.config.flush.sequential_save_each

        pending = [tx for tx in transactions if tx.save]

        if sequential:
            # One queue item; stops at the first failing call
            outcomes = await self._context.queue.submit(
                _invoke_in_order,
                [(workers[tx.kind], tx.data) for tx in pending],
                label=f"{operation} x{len(pending)} [log {self.key}]",
            )
        else:
            outcomes = await asyncio.gather(
                *(_invoke(workers[tx.kind], tx.data) for tx in pending)
            )

        result = FlushResult(
            counts={kind: len(txs) for kind, txs in partition.items() if txs},
        )
        for tx, outcome in zip(pending, outcomes):
            result.results.setdefault(tx.kind, []).append(outcome)

        self.logger.info(
            f"Log {self.key}: {operation} flushed {result.to_dict()['counts']} "
            f"({'sequential' if sequential else 'concurrent'})"
        )
        return result
