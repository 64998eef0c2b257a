"""
transactions/schemas.py - Transaction data structures
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, ValidationError

from transactor.core.enums import OperationKind
from transactor.errors import InvalidOptionsError


class TransactionOptionsInput(BaseModel):
    """Raw option flags as callers pass them to add()."""

    model_config = ConfigDict(extra="allow")

    save: bool = True
    add: bool = False
    update: bool = False
    delete: bool = False


@dataclass(frozen=True)
class TransactionOptions:
    """Normalized options: a save flag plus exactly one operation kind."""

    save: bool = True
    kind: OperationKind = OperationKind.UPDATE

    # Unrecognized caller flags, kept as given
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def add(self) -> bool:
        return self.kind is OperationKind.ADD

    @property
    def update(self) -> bool:
        return self.kind is OperationKind.UPDATE

    @property
    def delete(self) -> bool:
        return self.kind is OperationKind.DELETE

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "save": self.save,
            "add": self.add,
            "update": self.update,
            "delete": self.delete,
        })
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionOptions":
        """Validate and normalize a flag mapping."""
        try:
            parsed = TransactionOptionsInput.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidOptionsError(
                f"Invalid transaction options: {exc.error_count()} error(s)",
                options=dict(data),
            ) from exc

        kinds = [kind for kind in OperationKind if getattr(parsed, kind.value)]
        if len(kinds) > 1:
            raise InvalidOptionsError(
                f"Transaction options set more than one kind: {[k.value for k in kinds]}",
                options=dict(data),
            )

        return cls(
            save=parsed.save,
            kind=kinds[0] if kinds else OperationKind.UPDATE,
            extra=dict(parsed.model_extra or {}),
        )


OptionsLike = Union[TransactionOptions, Mapping[str, Any], None]


def normalize_options(options: OptionsLike = None) -> TransactionOptions:
    """Apply the save/update defaults to whatever the caller passed."""
    if options is None:
        return TransactionOptions()
    if isinstance(options, TransactionOptions):
        return options
    if isinstance(options, Mapping):
        return TransactionOptions.from_dict(options)
    raise InvalidOptionsError(
        f"Transaction options must be a mapping, got {type(options).__name__}"
    )


@dataclass
class Transaction:
    """One buffered edit."""

    id: Any = None
    data: Any = None
    options: TransactionOptions = field(default_factory=TransactionOptions)

    # Unique within one log; serialized as "_id"
    transaction_id: int = 0

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def kind(self) -> OperationKind:
        return self.options.kind

    @property
    def save(self) -> bool:
        return self.options.save

    def to_record(self) -> Dict[str, Any]:
        """Public {id, data, options} view."""
        return {
            "id": self.id,
            "data": self.data,
            "options": self.options.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        record = self.to_record()
        record["_id"] = self.transaction_id
        record["created_at"] = self.created_at.isoformat()
        return record

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        """Rebuild a transaction from its namespace form."""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif not isinstance(created_at, datetime):
            created_at = datetime.now(timezone.utc)

        return cls(
            id=data.get("id"),
            data=data.get("data"),
            options=normalize_options(data.get("options")),
            transaction_id=int(data.get("_id", 0)),
            created_at=created_at,
        )


@dataclass(frozen=True)
class InstanceOptions:
    """
    Creation-time options of a transaction log.

    Both flags are legacy: logs always record every edit as its own entry
    and never rewrite caller ids.
    """

    save_as_sequence: bool = True
    force_unique_ids: bool = False

    @classmethod
    def from_value(cls, value: Union["InstanceOptions", Mapping[str, Any], None]) -> "InstanceOptions":
        if value is None:
            return cls()
        if isinstance(value, InstanceOptions):
            return value
        return cls(
            save_as_sequence=bool(value.get("save_as_sequence", value.get("saveAsSequence", True))),
            force_unique_ids=bool(value.get("force_unique_ids", value.get("forceUniqueIds", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "save_as_sequence": self.save_as_sequence,
            "force_unique_ids": self.force_unique_ids,
        }


@dataclass
class FlushResult:
    """Outcome of one flush call."""

    # Number of transactions handed to each kind's worker
    counts: Dict[OperationKind, int] = field(default_factory=dict)

    # Worker return values, in invocation order per kind
    results: Dict[OperationKind, List[Any]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def invoked(self) -> List[OperationKind]:
        return [kind for kind in OperationKind if kind in self.results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "counts": {kind.value: count for kind, count in self.counts.items()},
            "invoked": [kind.value for kind in self.invoked],
            "total": self.total,
        }
