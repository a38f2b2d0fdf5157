"""
============================
Upsert (dedup merge) engine.
============================

Merges a source table into a deduplicated target table keyed by the
stream's primary key, in a single SQL statement (see sql.dml.merge_statement).

Merge Rules:
    - Candidate rows per key: every source row plus every target row with
      that key. Keys the source does not touch are left alone.
    - Winner per key, in order: highest cursor (NULL cursors last), latest
      extraction time, source row over target row, highest raw id.
    - A winner with a non-NULL ``_ab_cdc_deleted_at`` removes the key.
    - Otherwise the winner becomes the only row for its key.

The winner depends only on the candidate values, so re-running the same
upsert leaves the target unchanged.

Example:
    >>> from models import ColumnNameMapping, FieldType, dedupe_stream
    >>> from operations.upsert_engine import UpsertEngine
    >>>
    >>> stream = dedupe_stream(
    ...     'raw', 'users',
    ...     schema={'id': FieldType.INTEGER, 'test': FieldType.STRING},
    ...     primary_key=[['id']],
    ...     cursor=['test'],
    ... )
    >>> UpsertEngine(executor, tables).upsert_table(
    ...     stream, ColumnNameMapping.identity(['id', 'test']), staging, target
    ... )
"""

import logging

from core.exceptions import SourceNotFoundError, TableNotFoundError, TableOperationsError
from models.identifiers import ColumnNameMapping, TableName
from models.meta import META_COLUMNS
from models.stream import StreamDescriptor
from operations.executor import WarehouseExecutor
from operations.table_manager import TableManager
from sql.dml import merge_statement

logger = logging.getLogger(__name__)


class UpsertEngine:
    """Deduplicating merge of staged rows into a target table."""

    def __init__(self, executor: WarehouseExecutor, tables: TableManager):
        self.executor = executor
        self.tables = tables

    def upsert_table(
        self,
        stream: StreamDescriptor,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        """
        Merge source into target.

        Args:
            stream: Target stream descriptor (must be DEDUPED with a primary key)
            column_mapping: Logical field -> physical column mapping
            source: Staged rows (left unchanged)
            target: Deduplicated table

        Returns:
            Number of rows written for the touched keys

        Raises:
            InvalidStreamDescriptorError: Wrong import mode, missing or nested key
            SchemaMismatchError: Key or cursor unmapped, or a table lacks a mapped column
            SourceNotFoundError: If source does not exist
            TableNotFoundError: If target does not exist
        """
        try:
            return self._merge(stream, column_mapping, source, target)
        except TableOperationsError as e:
            logger.error(f"❌ Upsert of {source} into {target} failed: {e.message}")
            raise

    def _merge(
        self,
        stream: StreamDescriptor,
        column_mapping: ColumnNameMapping,
        source: TableName,
        target: TableName
    ) -> int:
        stream.validate_for_upsert()

        key_columns = [column_mapping.physical(name) for name in stream.primary_key_fields()]
        cursor_field = stream.cursor_field()
        cursor_column = column_mapping.physical(cursor_field) if cursor_field else None

        if not self.tables.table_exists(source):
            raise SourceNotFoundError(
                f"Upsert source {source} does not exist",
                details={'source': str(source), 'target': str(target)}
            )
        if not self.tables.table_exists(target):
            raise TableNotFoundError(
                f"Upsert target {target} does not exist",
                details={'source': str(source), 'target': str(target)}
            )

        # Key and cursor columns resolved through the mapping, so they are listed here
        columns = list(META_COLUMNS) + column_mapping.physical_columns()
        self.tables.require_columns(source, columns)
        self.tables.require_columns(target, columns)

        written = self.executor.execute(
            merge_statement(source, target, columns, key_columns, cursor_column)
        )
        logger.info(
            f"🔀 Upserted {source} into {target} on {key_columns} "
            f"(cursor: {cursor_column or 'none'}, {written} rows written)"
        )
        return written
