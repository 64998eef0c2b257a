"""
transactor Core Enumerations

Enumeration types shared by the transaction log, the flush workers and
the error taxonomy.
"""

from enum import Enum


class OperationKind(str, Enum):
    """
    Kind of a buffered edit.

    The value doubles as the legacy option flag name, so a serialized
    transaction carries {"add": True} rather than {"kind": "add"}.
    """
    ADD = "add"          # Record does not exist on the backend yet
    UPDATE = "update"    # Record exists and is being changed
    DELETE = "delete"    # Record exists and is being removed

    @property
    def worker_name(self) -> str:
        """Name of the flush worker argument that handles this kind."""
        return _WORKER_NAMES[self]


_WORKER_NAMES = {
    OperationKind.ADD: "post",
    OperationKind.UPDATE: "put",
    OperationKind.DELETE: "delete",
}
