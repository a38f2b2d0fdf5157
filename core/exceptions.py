"""
==========================================
Error taxonomy for warehouse table operations.
==========================================

Every fault raised by the engine derives from TableOperationsError and carries
a ``retriable`` flag so callers can tell apart:

    - Retriable faults: transport or transient lock problems; the same call
      may succeed after a backoff (ConnectivityError, TransientWarehouseError)
    - Caller faults: the input is wrong and retrying as-is cannot succeed
      (SchemaMismatchError, InvalidStreamDescriptorError, ...)

"Already satisfied" situations (dropping something absent) are not faults at
all and never reach this module.

Example:
    >>> from core.exceptions import TableOperationsError
    >>>
    >>> try:
    ...     client.upsert_table(stream, mapping, source, target)
    ... except TableOperationsError as e:
    ...     if e.retriable:
    ...         schedule_retry()
    ...     else:
    ...         raise
"""

from typing import Any, Dict, Optional


class TableOperationsError(Exception):
    """Base exception for all table-operation faults."""

    retriable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# RETRIABLE ERRORS
# =============================================================================

class ConnectivityError(TableOperationsError):
    """Warehouse unreachable: network failure, refused connection, bad credentials."""

    retriable = True


class TransientWarehouseError(TableOperationsError):
    """Serialization failure, deadlock or lock timeout reported by the warehouse."""

    retriable = True


# =============================================================================
# NON-RETRIABLE ERRORS
# =============================================================================

class NotFoundError(TableOperationsError):
    """A namespace or table that had to exist is absent."""


class NamespaceNotFoundError(NotFoundError):
    """The namespace (schema) does not exist."""


class TableNotFoundError(NotFoundError):
    """The table does not exist."""


class SourceNotFoundError(TableNotFoundError):
    """The source table of an overwrite, copy or upsert does not exist."""


class AlreadyExistsError(TableOperationsError):
    """An object is present where the operation required it to be absent."""


class TableAlreadyExistsError(AlreadyExistsError):
    """Table exists and creation was requested without replacement."""


class SchemaMismatchError(TableOperationsError):
    """A record or table does not line up with the declared column mapping."""


class InvalidStreamDescriptorError(TableOperationsError):
    """Stream descriptor cannot drive the requested operation (mode, keys, cursor)."""


class InvalidIdentifierError(TableOperationsError):
    """Namespace, table or column identifier is empty or malformed."""


class WarehouseExecutionError(TableOperationsError):
    """Statement failed in the warehouse for a reason outside the categories above."""
