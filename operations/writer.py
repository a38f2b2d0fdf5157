"""
==========================
Raw record writer.
==========================

Appends typed records to an existing table. Loading is always append-only,
even for deduplicated streams; deduplication happens in the merge engine.

Write Flow:
    1. Translate every field of every record through the column mapping.
       Any unmapped field fails the whole call before a row is sent.
    2. Fill metadata defaults the record leaves out: a fresh UUID4 raw id,
       one extraction/load timestamp per call, generation id 0.
    3. Encode values by switching on their ValueType tag.
    4. Send rows with executemany in chunks, all inside one transaction.

Example:
    >>> from models import AirbyteValue, ColumnNameMapping
    >>> from operations.writer import RecordWriter
    >>>
    >>> writer = RecordWriter(executor)
    >>> writer.insert_records(
    ...     table,
    ...     [{'id': AirbyteValue.integer(1), 'name': AirbyteValue.string('alice')}],
    ...     ColumnNameMapping.identity(['id', 'name']),
    ... )
    1
"""

import datetime
import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.config import config
from core.exceptions import SchemaMismatchError, TableOperationsError
from models.identifiers import ColumnNameMapping, TableName
from models.meta import (
    COLUMN_NAME_AB_CDC_DELETED_AT,
    COLUMN_NAME_AB_EXTRACTED_AT,
    COLUMN_NAME_AB_GENERATION_ID,
    COLUMN_NAME_AB_LOADED_AT,
    COLUMN_NAME_AB_RAW_ID,
    DEFAULT_GENERATION_ID,
    META_COLUMNS,
)
from models.values import AirbyteValue, ValueType
from operations.executor import WarehouseExecutor
from sql.dml import bind_name, bulk_insert

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_value(value: AirbyteValue) -> Any:
    """
    Convert an AirbyteValue into the bind value psycopg2 sends for it.

    OBJECT and ARRAY become JSON text for JSONB columns; scalars pass through.
    """
    if value.type is ValueType.NULL:
        return None
    if value.type in (ValueType.OBJECT, ValueType.ARRAY):
        return json.dumps(value.to_python(), default=_json_default)
    return value.value


class RecordWriter:
    """Bulk-insert typed records into engine-managed tables.

    Attributes:
        executor: WarehouseExecutor used for the inserts
        batch_size: Rows per executemany chunk
    """

    def __init__(self, executor: WarehouseExecutor, batch_size: Optional[int] = None):
        self.executor = executor
        self.batch_size = batch_size or config.engine.insert_batch_size

    def _translate(
        self,
        records: List[Mapping[str, Any]],
        column_mapping: ColumnNameMapping
    ) -> List[Dict[str, AirbyteValue]]:
        translated = []
        for index, record in enumerate(records):
            row = {}
            for field, value in record.items():
                try:
                    physical = column_mapping.physical(field)
                except SchemaMismatchError as e:
                    e.details['record_index'] = index
                    raise
                row[physical] = AirbyteValue.from_python(value)
            translated.append(row)
        return translated

    def insert_records(
        self,
        table: TableName,
        records: Iterable[Mapping[str, Any]],
        column_mapping: ColumnNameMapping
    ) -> int:
        """
        Append records to a table.

        Fields absent from a record are written as NULL. Plain Python values
        are accepted and converted with AirbyteValue.from_python.

        Args:
            table: Existing target table
            records: Records keyed by logical field name
            column_mapping: Logical field -> physical column mapping

        Returns:
            Number of rows inserted

        Raises:
            SchemaMismatchError: If a record references an unmapped field;
                nothing is written in that case
        """
        try:
            return self._write(table, records, column_mapping)
        except TableOperationsError as e:
            logger.error(f"❌ Insert into {table} failed: {e.message}")
            raise

    def _write(
        self,
        table: TableName,
        records: Iterable[Mapping[str, Any]],
        column_mapping: ColumnNameMapping
    ) -> int:
        records = list(records)
        if not records:
            logger.debug(f"No records to insert into {table}")
            return 0

        rows = self._translate(records, column_mapping)

        referenced = set()
        for row in rows:
            referenced.update(row)
        user_columns = [
            physical for physical in column_mapping.physical_columns()
            if physical in referenced
        ]
        columns = list(META_COLUMNS) + user_columns

        now = datetime.datetime.now(datetime.timezone.utc)
        defaults = {
            COLUMN_NAME_AB_EXTRACTED_AT: now,
            COLUMN_NAME_AB_LOADED_AT: now,
            COLUMN_NAME_AB_GENERATION_ID: DEFAULT_GENERATION_ID,
            COLUMN_NAME_AB_CDC_DELETED_AT: None,
        }

        params = []
        for row in rows:
            bound = {}
            for position, column in enumerate(columns):
                value = row.get(column)
                encoded = encode_value(value) if value is not None else None
                if encoded is None and column == COLUMN_NAME_AB_RAW_ID:
                    encoded = str(uuid.uuid4())
                elif encoded is None:
                    encoded = defaults.get(column)
                bound[bind_name(position)] = encoded
            params.append(bound)

        sql = bulk_insert(table, columns)
        with self.executor.transaction():
            for start in range(0, len(params), self.batch_size):
                self.executor.execute_many(sql, params[start:start + self.batch_size])

        logger.info(f"📥 Inserted {len(params)} records into {table}")
        return len(params)
