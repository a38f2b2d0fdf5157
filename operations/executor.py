"""
=====================================
Warehouse executor over SQLAlchemy.
=====================================

The single seam between the operation engines and PostgreSQL. Engines hand
it SQL text produced by sql/ and get back plain Python values; every driver
failure leaves this module as a TableOperationsError subclass.

Transactions:
    ``transaction()`` opens one ``engine.begin()`` block. Statements executed
    inside it (through this executor, on the same thread) share the
    connection and commit or roll back together. Outside a transaction,
    each call runs in its own short transaction.

Error classification (PostgreSQL SQLSTATE via psycopg2.errorcodes):
    - class 08, auth failures, admin shutdown, failed connects -> ConnectivityError
    - serialization failure, deadlock, lock not available -> TransientWarehouseError
    - undefined table -> TableNotFoundError
    - invalid schema name -> NamespaceNotFoundError
    - duplicate table -> TableAlreadyExistsError
    - anything else -> WarehouseExecutionError

Example:
    >>> from operations.executor import WarehouseExecutor
    >>>
    >>> executor = WarehouseExecutor.from_config()
    >>> executor.ping()
    True
    >>> with executor.transaction():
    ...     executor.execute(drop_table(target))
    ...     executor.execute(rename_table(source, target.name))
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from psycopg2 import errorcodes
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from core.exceptions import (
    ConnectivityError,
    NamespaceNotFoundError,
    TableAlreadyExistsError,
    TableNotFoundError,
    TableOperationsError,
    TransientWarehouseError,
    WarehouseExecutionError,
)
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)

TRANSIENT_SQLSTATES = frozenset({
    errorcodes.SERIALIZATION_FAILURE,
    errorcodes.DEADLOCK_DETECTED,
    errorcodes.LOCK_NOT_AVAILABLE,
})

CONNECTIVITY_SQLSTATES = frozenset({
    errorcodes.INVALID_AUTHORIZATION_SPECIFICATION,
    errorcodes.INVALID_PASSWORD,
    errorcodes.ADMIN_SHUTDOWN,
    errorcodes.CRASH_SHUTDOWN,
    errorcodes.CANNOT_CONNECT_NOW,
})


def classify_error(error: SQLAlchemyError) -> TableOperationsError:
    """
    Translate a SQLAlchemy/psycopg2 failure into the operation error taxonomy.

    Args:
        error: Exception raised by SQLAlchemy

    Returns:
        TableOperationsError subclass instance (not raised)
    """
    pgcode = None
    if isinstance(error, DBAPIError):
        pgcode = getattr(error.orig, 'pgcode', None)

    details = {'sqlstate': pgcode, 'error_type': type(error).__name__}
    message = str(getattr(error, 'orig', None) or error).strip()

    if pgcode in TRANSIENT_SQLSTATES:
        return TransientWarehouseError(message, details)

    if (
        pgcode in CONNECTIVITY_SQLSTATES
        or (pgcode and pgcode.startswith(errorcodes.CLASS_CONNECTION_EXCEPTION))
        or (isinstance(error, DBAPIError) and error.connection_invalidated)
        # psycopg2 reports refused/unreachable connects without a SQLSTATE
        or (pgcode is None and isinstance(error, OperationalError))
    ):
        return ConnectivityError(message, details)

    if pgcode == errorcodes.UNDEFINED_TABLE:
        return TableNotFoundError(message, details)
    if pgcode == errorcodes.INVALID_SCHEMA_NAME:
        return NamespaceNotFoundError(message, details)
    if pgcode == errorcodes.DUPLICATE_TABLE:
        return TableAlreadyExistsError(message, details)

    return WarehouseExecutionError(message, details)


class WarehouseExecutor:
    """Runs SQL text against the warehouse through a pooled SQLAlchemy engine.

    Attributes:
        engine: SQLAlchemy Engine used for every statement
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    @classmethod
    def from_config(cls) -> 'WarehouseExecutor':
        """Build an executor on a pooled engine configured from core.config."""
        return cls(create_sqlalchemy_engine())

    @property
    def in_transaction(self) -> bool:
        return getattr(self._local, 'connection', None) is not None

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """
        Run the enclosed statements in one transaction.

        Nested calls join the outermost transaction. Driver failures are
        classified once, at the outermost level, including failures raised
        while committing.

        Yields:
            The SQLAlchemy Connection bound to the transaction
        """
        if self.in_transaction:
            yield self._local.connection
            return

        try:
            with self.engine.begin() as conn:
                self._local.connection = conn
                try:
                    yield conn
                finally:
                    self._local.connection = None
        except SQLAlchemyError as e:
            classified = classify_error(e)
            logger.debug(f"Transaction rolled back: {type(classified).__name__}: {classified.message}")
            raise classified from e

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """
        Execute one statement.

        Args:
            sql: SQL text (named binds as ``:name``)
            params: Bind values

        Returns:
            Number of rows affected as reported by the driver
        """
        logger.debug(f"Executing SQL: {sql}")
        with self.transaction() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return result.rowcount

    def execute_many(self, sql: str, rows: Sequence[Mapping[str, Any]]) -> int:
        """
        Execute one statement for many parameter sets (DBAPI executemany).

        Args:
            sql: SQL text with named binds
            rows: One bind mapping per execution

        Returns:
            Number of parameter sets sent
        """
        if not rows:
            return 0
        logger.debug(f"Executing SQL for {len(rows)} rows: {sql}")
        with self.transaction() as conn:
            conn.execute(text(sql), [dict(row) for row in rows])
        return len(rows)

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a query and return every row as a dict keyed by column name."""
        logger.debug(f"Fetching rows: {sql}")
        with self.transaction() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return [dict(row._mapping) for row in result]

    def fetch_scalar(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Run a query and return the first column of the first row, or None."""
        logger.debug(f"Fetching scalar: {sql}")
        with self.transaction() as conn:
            return conn.execute(text(sql), dict(params or {})).scalar()

    def ping(self) -> bool:
        """
        Verify the warehouse answers a trivial query.

        Returns:
            True when the warehouse responded

        Raises:
            ConnectivityError: If the warehouse cannot be reached or queried
        """
        try:
            self.fetch_scalar("SELECT 1")
        except ConnectivityError:
            raise
        except TableOperationsError as e:
            raise ConnectivityError(f"Warehouse ping failed: {e.message}", e.details) from e
        return True

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
