"""
transactions/edge.py - Latest-edge collapsing and superimpose

Pure functions over lists of transactions. Neither function mutates its
inputs.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional
import copy

from transactor.core.enums import OperationKind
from .schemas import Transaction, TransactionOptions


def latest_edge(transactions: Iterable[Transaction]) -> List[Transaction]:
    """
    Collapse a log to one authoritative transaction per logical id.

    Later transactions win, except that:
    - an uncommitted add followed by a delete cancels out entirely
    - an edit to an uncommitted add is still an add
    Each id keeps the position of its first appearance.
    """
    # Matched by ==; ids may be unhashable
    retained: List[Transaction] = []

    for tx in transactions:
        index = _find(retained, tx.id)

        if index is None:
            retained.append(tx)
            continue

        if retained[index].options.add:
            if tx.options.delete:
                del retained[index]
                continue
            tx = replace(
                tx,
                options=TransactionOptions(save=tx.options.save, kind=OperationKind.ADD),
            )

        retained[index] = tx

    return retained


def _find(entries: List[Any], id: Any) -> Optional[int]:
    return next(
        (i for i, entry in enumerate(entries) if _entry_id(entry) == id),
        None,
    )


def _entry_id(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("id")
    return getattr(entry, "id", None)


def _entry_dict(entry: Any) -> Dict[str, Any]:
    if isinstance(entry, Mapping):
        return copy.deepcopy(dict(entry))
    return {"id": getattr(entry, "id", None), "data": copy.deepcopy(getattr(entry, "data", None))}


def superimpose(baseline: Iterable[Any], transactions: Iterable[Transaction]) -> List[Dict[str, Any]]:
    """
    Project pending transactions onto a baseline list of {id, data} records.

    Args:
        baseline: Server-confirmed records (mappings or objects with id/data)
        transactions: Raw log; collapsed to its latest edge first

    Returns:
        New list of records; the baseline and its entries are left untouched
    """
    result = [_entry_dict(entry) for entry in baseline]

    for tx in latest_edge(transactions):
        index = _find(result, tx.id)

        if index is None:
            if not tx.options.delete:
                result.append({"id": tx.id, "data": copy.deepcopy(tx.data)})
        elif tx.options.delete:
            del result[index]
        else:
            result[index]["data"] = copy.deepcopy(tx.data)

    return result
