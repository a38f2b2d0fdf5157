"""
========================================
Domain models for warehouse table operations.
========================================

Plain, warehouse-independent types shared by the SQL generators and the
operation engines.

Modules:
    identifiers: TableName, Namespace and ColumnNameMapping
    values: AirbyteValue tagged variant for record fields
    meta: Reserved metadata column names and definitions
    stream: StreamDescriptor, ImportMode, FieldType, TableCreateMode

Example:
    >>> from models import AirbyteValue, ColumnNameMapping, TableName
    >>>
    >>> table = TableName('raw', 'users')
    >>> mapping = ColumnNameMapping.identity(['id', 'name'])
    >>> record = {'id': AirbyteValue.integer(1), 'name': AirbyteValue.string('a')}
"""

__version__ = "0.1.0"
__all__ = [
    'TableName',
    'Namespace',
    'ColumnNameMapping',
    'AirbyteValue',
    'ValueType',
    'Record',
    'FieldType',
    'ImportMode',
    'StreamDescriptor',
    'TableCreateMode',
    'append_stream',
    'dedupe_stream',
]

from .identifiers import ColumnNameMapping, Namespace, TableName
from .stream import (
    FieldType,
    ImportMode,
    StreamDescriptor,
    TableCreateMode,
    append_stream,
    dedupe_stream,
)
from .values import AirbyteValue, Record, ValueType
