"""
==============================
Table lifecycle management.
==============================

Creation, removal and inspection of engine-managed tables.

Every table carries the reserved metadata columns followed by one nullable
column per user field of the column mapping, typed from the stream schema.
Deduplicated streams additionally get a non-unique index on their primary
key columns, which the merge engine uses to find touched keys. Each index gets a fresh
``_airbyte_pk_<uuid>`` name: indexes move with their table through RENAME
and SET SCHEMA, so a name derived from the table could already be taken in
the namespace an overwrite moves it into.

Key Features:
    - create_table with CREATE_FRESH or CREATE_OR_REPLACE_ATOMICALLY
    - Idempotent drop_table
    - count_table and get_generation_id return None for missing tables
    - read_table for verification and diagnostics

Example:
    >>> from models import ColumnNameMapping, TableName, append_stream
    >>> from operations.table_manager import TableManager
    >>>
    >>> tables = TableManager(executor, namespaces)
    >>> table = TableName('raw', 'users')
    >>> tables.create_table(
    ...     table,
    ...     ColumnNameMapping.identity(['id', 'name']),
    ...     append_stream('raw', 'users'),
    ... )
    >>> tables.count_table(table)
    0
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Union

from core.exceptions import (
    NamespaceNotFoundError,
    NotFoundError,
    SchemaMismatchError,
    TableAlreadyExistsError,
    TableNotFoundError,
    TableOperationsError,
)
from models.identifiers import ColumnNameMapping, TableName
from models.meta import is_meta_column
from models.stream import StreamDescriptor, TableCreateMode
from operations.executor import WarehouseExecutor
from operations.namespace_manager import NamespaceManager
from sql.ddl import create_index, create_table, drop_table, postgres_type
from sql.query_builder import (
    check_table_exists_sql,
    count_rows_sql,
    get_column_info_sql,
    max_generation_id_sql,
    select_builder,
)

logger = logging.getLogger(__name__)

DEDUP_INDEX_PREFIX = '_airbyte_pk_'


def _create_mode(replace: Union[bool, TableCreateMode]) -> TableCreateMode:
    if isinstance(replace, TableCreateMode):
        return replace
    return TableCreateMode.from_replace_flag(bool(replace))


class TableManager:
    """Create, drop and inspect tables in the warehouse."""

    def __init__(self, executor: WarehouseExecutor, namespaces: NamespaceManager):
        self.executor = executor
        self.namespaces = namespaces

    def table_exists(self, table: TableName) -> bool:
        """
        Check if a table exists.

        Args:
            table: Table to check

        Returns:
            True if the table exists, False otherwise
        """
        row = self.executor.fetch_scalar(
            check_table_exists_sql(),
            {'namespace': table.namespace, 'table_name': table.name}
        )
        return row is not None

    def get_columns(self, table: TableName) -> List[str]:
        """Physical column names of a table in ordinal order (empty if missing)."""
        rows = self.executor.fetch_all(
            get_column_info_sql(),
            {'namespace': table.namespace, 'table_name': table.name}
        )
        return [row['column_name'] for row in rows]

    def require_columns(self, table: TableName, columns: Iterable[str]) -> None:
        """
        Check a table has every listed column.

        Raises:
            SchemaMismatchError: If any column is missing
        """
        present = set(self.get_columns(table))
        missing = [col for col in columns if col not in present]
        if missing:
            raise SchemaMismatchError(
                f"Table {table} is missing columns {missing}",
                details={'table': str(table), 'missing_columns': missing}
            )

    def create_table(
        self,
        table: TableName,
        column_mapping: ColumnNameMapping,
        stream: StreamDescriptor,
        replace: Union[bool, TableCreateMode] = False
    ) -> None:
        """
        Create a table for a stream.

        Args:
            table: Table to create
            column_mapping: Logical field -> physical column mapping
            stream: Stream descriptor (field types, import mode, primary key)
            replace: TableCreateMode, or the plain replace flag

        Raises:
            NamespaceNotFoundError: If the table's namespace does not exist
            TableAlreadyExistsError: If the table exists and mode is CREATE_FRESH
            SchemaMismatchError: If a primary key field is not mapped
        """
        try:
            self._create(table, column_mapping, stream, _create_mode(replace))
        except TableOperationsError as e:
            logger.error(f"❌ Creating table {table} failed: {e.message}")
            raise

    def _create(
        self,
        table: TableName,
        column_mapping: ColumnNameMapping,
        stream: StreamDescriptor,
        mode: TableCreateMode
    ) -> None:
        if not self.namespaces.namespace_exists(table.namespace):
            raise NamespaceNotFoundError(
                f"Namespace '{table.namespace}' does not exist",
                details={'namespace': table.namespace}
            )

        columns = [
            (physical, postgres_type(stream.field_type(logical)))
            for logical, physical in column_mapping.user_columns()
        ]

        key_columns = []
        if stream.is_deduped:
            key_columns = [column_mapping.physical(name) for name in stream.primary_key_fields()]

        if mode is TableCreateMode.CREATE_FRESH and self.table_exists(table):
            raise TableAlreadyExistsError(
                f"Table {table} already exists",
                details={'table': str(table)}
            )

        with self.executor.transaction():
            if mode is TableCreateMode.CREATE_OR_REPLACE_ATOMICALLY:
                self.executor.execute(drop_table(table, if_exists=True))
            self.executor.execute(create_table(table, columns))
            if key_columns:
                self.executor.execute(create_index(
                    table,
                    key_columns,
                    index_name=f"{DEDUP_INDEX_PREFIX}{uuid.uuid4().hex}",
                    if_not_exists=False
                ))

        logger.info(
            f"✅ Created table {table} ({len(columns)} user columns, "
            f"{stream.import_mode.name}, {mode.name})"
        )

    def drop_table(self, table: TableName) -> None:
        """Drop a table; dropping an absent table is not an error."""
        self.executor.execute(drop_table(table, if_exists=True))
        logger.info(f"🗑️ Dropped table {table}")

    def count_table(self, table: TableName) -> Optional[int]:
        """
        Count the rows of a table.

        Returns:
            Row count, or None if the table does not exist
        """
        if not self.table_exists(table):
            return None
        try:
            return int(self.executor.fetch_scalar(count_rows_sql(table)))
        except NotFoundError:
            # Dropped between the existence check and the count
            return None

    def get_generation_id(self, table: TableName) -> Optional[int]:
        """
        Current generation of a table: the highest generation id among its rows.

        Returns:
            Generation id, or None if the table is empty or does not exist
        """
        if not self.table_exists(table):
            return None
        try:
            generation_id = self.executor.fetch_scalar(max_generation_id_sql(table))
        except NotFoundError:
            return None
        return int(generation_id) if generation_id is not None else None

    def read_table(
        self,
        table: TableName,
        include_meta: bool = False,
        order_by: Optional[List[str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Read every row of a table.

        Args:
            table: Table to read
            include_meta: Keep the reserved metadata columns
            order_by: Physical columns to sort by

        Returns:
            One dict per row keyed by physical column name

        Raises:
            TableNotFoundError: If the table does not exist
        """
        columns = self.get_columns(table)
        if not columns:
            raise TableNotFoundError(f"Table {table} does not exist", details={'table': str(table)})

        if not include_meta:
            columns = [col for col in columns if not is_meta_column(col)]

        return self.executor.fetch_all(select_builder(table, columns, order_by=order_by))
