"""
Unit tests for transaction schemas and option normalization.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from transactor.core.enums import OperationKind
from transactor.errors import InvalidOptionsError
from transactor.transactions import (
    FlushResult,
    InstanceOptions,
    Transaction,
    TransactionOptions,
    normalize_options,
)


class TestNormalizeOptions:
    """Test normalize_options."""

    def test_none_gives_defaults(self):
        """Test no options means a saved update."""
        options = normalize_options(None)
        assert options.save is True
        assert options.kind is OperationKind.UPDATE

    def test_kind_flag(self):
        """Test a single kind flag selects the kind."""
        assert normalize_options({"add": True}).kind is OperationKind.ADD
        assert normalize_options({"delete": True}).kind is OperationKind.DELETE

    def test_save_false_keeps_update_default(self):
        """Test save can be turned off without a kind."""
        options = normalize_options({"save": False})
        assert options.save is False
        assert options.update

    def test_false_flags_ignored(self):
        """Test explicitly false kind flags do not count."""
        options = normalize_options({"add": False, "delete": True, "update": False})
        assert options.kind is OperationKind.DELETE

    def test_two_kinds_rejected(self):
        """Test more than one kind flag is an error."""
        with pytest.raises(InvalidOptionsError) as exc_info:
            normalize_options({"add": True, "update": True})
        assert "more than one kind" in exc_info.value.message

    def test_bad_flag_type_rejected(self):
        """Test a flag that is not a boolean is an error."""
        with pytest.raises(InvalidOptionsError):
            normalize_options({"save": "sometimes"})

    def test_non_mapping_rejected(self):
        """Test options must be a mapping."""
        with pytest.raises(InvalidOptionsError):
            normalize_options(["add"])

    def test_options_instance_passes_through(self):
        """Test already-normalized options are returned as is."""
        options = TransactionOptions(save=False, kind=OperationKind.DELETE)
        assert normalize_options(options) is options

    def test_to_dict_has_exactly_one_kind(self):
        """Test the serialized form carries all flags with one true kind."""
        data = normalize_options({"add": True, "source": "form"}).to_dict()

        assert data == {
            "source": "form",
            "save": True,
            "add": True,
            "update": False,
            "delete": False,
        }


class TestTransaction:
    """Test Transaction serialization."""

    def test_namespace_form(self):
        """Test to_dict carries _id and survives from_dict."""
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        original = Transaction(
            id="row-1",
            data={"name": "x"},
            options=TransactionOptions(save=False, kind=OperationKind.ADD),
            transaction_id=7,
            created_at=created,
        )

        data = original.to_dict()

        assert data["_id"] == 7
        assert data["options"]["add"] is True
        assert Transaction.from_dict(data) == original

    def test_record_form(self):
        """Test to_record exposes only id, data and options."""
        record = Transaction(id=1, data="d").to_record()
        assert set(record) == {"id", "data", "options"}


class TestInstanceOptions:
    """Test InstanceOptions."""

    def test_legacy_camel_case(self):
        """Test the legacy camelCase flags are accepted."""
        options = InstanceOptions.from_value({"saveAsSequence": False, "forceUniqueIds": True})
        assert options == InstanceOptions(save_as_sequence=False, force_unique_ids=True)

    def test_immutable(self):
        """Test instance options cannot be changed after creation."""
        options = InstanceOptions()
        with pytest.raises(FrozenInstanceError):
            options.save_as_sequence = False


class TestFlushResult:
    """Test FlushResult."""

    def test_totals(self):
        result = FlushResult(
            counts={OperationKind.UPDATE: 2, OperationKind.DELETE: 1},
            results={OperationKind.DELETE: [None], OperationKind.UPDATE: [None]},
        )

        assert result.total == 3
        assert result.invoked == [OperationKind.UPDATE, OperationKind.DELETE]
        assert result.to_dict()["counts"] == {"update": 2, "delete": 1}
