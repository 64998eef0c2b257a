"""
Unit tests for the error taxonomy.
"""

from transactor.core.enums import OperationKind
from transactor.errors import (
    ErrorCategory,
    ErrorCode,
    InstanceDestroyedError,
    InvalidOptionsError,
    MissingWorkerError,
    StoreModeError,
    TransactorError,
)


class TestMissingWorkerError:
    """Test MissingWorkerError."""

    def test_identifies_kind(self):
        """Test the error names the kind and its worker."""
        error = MissingWorkerError(OperationKind.ADD, pending=2)

        assert error.kind is OperationKind.ADD
        assert error.code is ErrorCode.CFG_MISSING_WORKER
        assert error.category is ErrorCategory.CONFIGURATION
        assert "'post'" in error.message
        assert error.details == {"kind": "add", "pending": 2}

    def test_accepts_kind_value(self):
        """Test the kind may be given by value."""
        assert MissingWorkerError("delete").kind is OperationKind.DELETE

    def test_to_dict(self):
        """Test dictionary form."""
        data = MissingWorkerError(OperationKind.UPDATE, pending=1).to_dict()

        assert data["code"] == 6001
        assert data["category"] == "configuration"
        assert data["details"]["kind"] == "update"


class TestTransactorError:
    """Test the base class and the other subclasses."""

    def test_str_has_code(self):
        """Test string form leads with the code name."""
        error = InvalidOptionsError("bad flags")
        assert str(error) == "[VAL_OPTIONS] bad flags"

    def test_default_message_from_docstring(self):
        """Test a bare error uses its class docstring."""
        assert InvalidOptionsError().message == InvalidOptionsError.__doc__

    def test_subclasses(self):
        """Test every error is a TransactorError."""
        for error in (
            MissingWorkerError(OperationKind.ADD),
            InvalidOptionsError("x"),
            StoreModeError("getter"),
            InstanceDestroyedError(3),
        ):
            assert isinstance(error, TransactorError)

    def test_destroyed_details(self):
        """Test the destroyed log key is recorded."""
        error = InstanceDestroyedError(3)

        assert error.details == {"key": 3}
        assert error.category is ErrorCategory.STATE
