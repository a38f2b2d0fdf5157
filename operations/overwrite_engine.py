"""
===============================
Overwrite (table swap) engine.
===============================

Replaces a target table's contents with a source table's contents and
removes the source, as one PostgreSQL transaction:

    DROP TABLE target;  ALTER TABLE source RENAME TO target

PostgreSQL DDL is transactional, so a failure before COMMIT leaves the
target exactly as it was. Concurrent readers wait on the table lock and
then see the new contents; they never observe a missing target.

Moving across namespaces renames the source to a unique temporary name
first, then moves it with SET SCHEMA, then gives it the target name.

Example:
    >>> from operations.overwrite_engine import OverwriteEngine
    >>>
    >>> engine = OverwriteEngine(executor, tables)
    >>> engine.overwrite_table(TableName('raw', 'users_tmp'), TableName('raw', 'users'))
"""

import logging
import uuid

from core.exceptions import (
    InvalidIdentifierError,
    NamespaceNotFoundError,
    SchemaMismatchError,
    SourceNotFoundError,
    TableOperationsError,
)
from models.identifiers import TableName
from operations.executor import WarehouseExecutor
from operations.table_manager import TableManager
from sql.ddl import drop_table, rename_table, set_table_schema

logger = logging.getLogger(__name__)

TEMP_TABLE_PREFIX = '_airbyte_overwrite_'


class OverwriteEngine:
    """Atomically swap a source table into a target's place."""

    def __init__(self, executor: WarehouseExecutor, tables: TableManager):
        self.executor = executor
        self.tables = tables

    def _check_compatible(self, source: TableName, target: TableName) -> None:
        source_columns = set(self.tables.get_columns(source))
        target_columns = set(self.tables.get_columns(target))
        if source_columns != target_columns:
            raise SchemaMismatchError(
                f"Cannot overwrite {target} with {source}: column sets differ",
                details={
                    'only_in_source': sorted(source_columns - target_columns),
                    'only_in_target': sorted(target_columns - source_columns),
                }
            )

    def overwrite_table(self, source: TableName, target: TableName) -> None:
        """
        Replace target's rows with source's rows, then drop source.

        A missing target is not an error: the source is moved into place.

        Args:
            source: Table holding the new contents
            target: Table being replaced

        Raises:
            SourceNotFoundError: If source does not exist
            SchemaMismatchError: If both exist with different column sets
            NamespaceNotFoundError: If target's namespace does not exist
            InvalidIdentifierError: If source and target are the same table
        """
        try:
            self._swap(source, target)
        except TableOperationsError as e:
            logger.error(f"❌ Overwrite of {target} with {source} failed: {e.message}")
            raise

        logger.info(f"🔁 Overwrote {target} with {source}")

    def _swap(self, source: TableName, target: TableName) -> None:
        if source == target:
            raise InvalidIdentifierError(
                f"Overwrite source and target are the same table {source}"
            )

        if not self.tables.table_exists(source):
            raise SourceNotFoundError(
                f"Overwrite source {source} does not exist",
                details={'source': str(source), 'target': str(target)}
            )

        target_exists = self.tables.table_exists(target)
        if target_exists:
            self._check_compatible(source, target)
        elif (
            source.namespace != target.namespace
            and not self.tables.namespaces.namespace_exists(target.namespace)
        ):
            raise NamespaceNotFoundError(
                f"Namespace '{target.namespace}' does not exist",
                details={'namespace': target.namespace}
            )

        with self.executor.transaction():
            if target_exists:
                self.executor.execute(drop_table(target, if_exists=False))

            if source.namespace == target.namespace:
                self.executor.execute(rename_table(source, target.name))
            else:
                staged = TableName(source.namespace, f"{TEMP_TABLE_PREFIX}{uuid.uuid4().hex}")
                self.executor.execute(rename_table(source, staged.name))
                self.executor.execute(set_table_schema(staged, target.namespace))
                self.executor.execute(rename_table(TableName(target.namespace, staged.name), target.name))
