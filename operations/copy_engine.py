"""
====================
Copy (append) engine.
====================

Appends every row of a source table to a target table with one
INSERT ... SELECT. Existing target rows are kept, duplicates included, and
the source is left unchanged.

Copy is not idempotent: running it twice appends the source twice. Callers
compare get_generation_id before retrying.
"""

import logging

from core.exceptions import SourceNotFoundError, TableNotFoundError, TableOperationsError
from models.identifiers import ColumnNameMapping, TableName
from models.meta import META_COLUMNS
from operations.executor import WarehouseExecutor
from operations.table_manager import TableManager
from sql.dml import insert_select

logger = logging.getLogger(__name__)


class CopyEngine:
    """Append one table's rows to another."""

    def __init__(self, executor: WarehouseExecutor, tables: TableManager):
        self.executor = executor
        self.tables = tables

    def copy_table(
        self,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        """
        Append source rows to target.

        Args:
            column_mapping: Mapping whose physical columns are copied
            source: Table read from
            target: Table appended to

        Returns:
            Number of rows copied

        Raises:
            SourceNotFoundError: If source does not exist
            TableNotFoundError: If target does not exist
            SchemaMismatchError: If either table lacks a mapped column
        """
        try:
            copied = self._append(column_mapping, source, target)
        except TableOperationsError as e:
            logger.error(f"❌ Copy of {source} into {target} failed: {e.message}")
            raise

        logger.info(f"📋 Copied {copied} rows from {source} into {target}")
        return copied

    def _append(
        self,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        if not self.tables.table_exists(source):
            raise SourceNotFoundError(
                f"Copy source {source} does not exist",
                details={'source': str(source), 'target': str(target)}
            )
        if not self.tables.table_exists(target):
            raise TableNotFoundError(
                f"Copy target {target} does not exist",
                details={'source': str(source), 'target': str(target)}
            )

        columns = list(META_COLUMNS) + column_mapping.physical_columns()
        self.tables.require_columns(source, columns)
        self.tables.require_columns(target, columns)

        return self.executor.execute(insert_select(source, target, columns))
