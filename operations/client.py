"""
=========================================
Client facade for warehouse table operations.
=========================================

TableOperationsClient is the entry point replication jobs use. It wires the
namespace and table managers, the writer and the three promotion engines
onto one WarehouseExecutor and exposes every operation through one object.

Typical Job Flow:
    1. create_table(staging, ..., replace=True)
    2. insert_records(staging, batch, mapping)   (repeated per batch)
    3. one of overwrite_table / copy_table / upsert_table
    4. drop_table(staging)

Each call is atomic on its own; the client adds no transaction across calls.

Example:
    >>> from operations.client import TableOperationsClient
    >>>
    >>> with TableOperationsClient() as client:
    ...     client.wait_until_available()
    ...     client.create_namespace('raw')
    ...     client.create_table(staging, mapping, stream, replace=True)
    ...     client.insert_records(staging, records, mapping)
    ...     client.upsert_table(stream, mapping, staging, target)
    ...     client.drop_table(staging)
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from core.config import config
from models.identifiers import ColumnNameMapping, Namespace, TableName
from models.stream import StreamDescriptor, TableCreateMode
from operations.copy_engine import CopyEngine
from operations.executor import WarehouseExecutor
from operations.namespace_manager import NamespaceManager
from operations.overwrite_engine import OverwriteEngine
from operations.table_manager import TableManager
from operations.upsert_engine import UpsertEngine
from operations.writer import RecordWriter
from utils.database_utils import retry_with_backoff

logger = logging.getLogger(__name__)


class TableOperationsClient:
    """All namespace, table and promotion operations over one executor.

    Attributes:
        executor: Shared WarehouseExecutor
        namespaces: NamespaceManager
        tables: TableManager
        writer: RecordWriter
        overwrite_engine: OverwriteEngine
        copy_engine: CopyEngine
        upsert_engine: UpsertEngine
    """

    def __init__(
        self,
        executor: Optional[WarehouseExecutor] = None,
        insert_batch_size: Optional[int] = None
    ):
        """Initialize the client.

        Args:
            executor: Executor to use (built from core.config when omitted)
            insert_batch_size: Rows per executemany chunk for insert_records
        """
        self.executor = executor or WarehouseExecutor.from_config()
        self.namespaces = NamespaceManager(self.executor)
        self.tables = TableManager(self.executor, self.namespaces)
        self.writer = RecordWriter(self.executor, batch_size=insert_batch_size)
        self.overwrite_engine = OverwriteEngine(self.executor, self.tables)
        self.copy_engine = CopyEngine(self.executor, self.tables)
        self.upsert_engine = UpsertEngine(self.executor, self.tables)

    def __enter__(self) -> 'TableOperationsClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # CONNECTIVITY
    # =========================================================================

    def ping(self) -> bool:
        """Raise ConnectivityError unless the warehouse answers."""
        return self.executor.ping()

    def wait_until_available(
        self,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None
    ) -> bool:
        """
        Ping until the warehouse answers, with a fixed delay between attempts.

        Args:
            max_retries: Total attempts (defaults to config.engine.connect_retries)
            retry_delay: Seconds between attempts (defaults to config.engine.retry_delay)

        Raises:
            ConnectivityError: If every attempt failed
        """
        attempts = max_retries if max_retries is not None else config.engine.connect_retries
        return retry_with_backoff(
            self.ping,
            retries=max(attempts - 1, 0),
            base_delay=retry_delay,
            multiplier=1.0
        )

    def close(self) -> None:
        """Release pooled connections."""
        self.executor.dispose()

    # =========================================================================
    # NAMESPACES
    # =========================================================================

    def namespace_exists(self, namespace: Namespace) -> bool:
        return self.namespaces.namespace_exists(namespace)

    def create_namespace(self, namespace: Namespace) -> None:
        self.namespaces.create_namespace(namespace)

    def drop_namespace(self, namespace: Namespace) -> None:
        self.namespaces.drop_namespace(namespace)

    # =========================================================================
    # TABLES
    # =========================================================================

    def table_exists(self, table: TableName) -> bool:
        return self.tables.table_exists(table)

    def create_table(
        self,
        table: TableName,
        column_mapping: ColumnNameMapping,
        stream: StreamDescriptor,
        replace: Union[bool, TableCreateMode] = False
    ) -> None:
        self.tables.create_table(table, column_mapping, stream, replace)

    def drop_table(self, table: TableName) -> None:
        self.tables.drop_table(table)

    def count_table(self, table: TableName) -> Optional[int]:
        return self.tables.count_table(table)

    def get_generation_id(self, table: TableName) -> Optional[int]:
        return self.tables.get_generation_id(table)

    def read_table(
        self,
        table: TableName,
        include_meta: bool = False,
        order_by: Optional[List[str]] = None
    ) -> List[Dict[str, Any]]:
        return self.tables.read_table(table, include_meta=include_meta, order_by=order_by)

    # =========================================================================
    # LOADING AND PROMOTION
    # =========================================================================

    def insert_records(
        self,
        table: TableName,
        records: Iterable[Mapping[str, Any]],
        column_mapping: ColumnNameMapping
    ) -> int:
        return self.writer.insert_records(table, records, column_mapping)

    def overwrite_table(self, source: TableName, target: TableName) -> None:
        self.overwrite_engine.overwrite_table(source, target)

    def copy_table(
        self,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        return self.copy_engine.copy_table(column_mapping, source, target)

    def upsert_table(
        self,
        stream: StreamDescriptor,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        return self.upsert_engine.upsert_table(stream, column_mapping, source, target)
