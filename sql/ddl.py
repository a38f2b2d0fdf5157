"""
=======================================================================
Data Definition Language (DDL) utilities for namespaces and tables.
=======================================================================

Pure functions generating PostgreSQL DDL for the table-operations engine.
Nothing here touches a connection; callers execute the returned text via
SQLAlchemy ``text()``.

Identifiers are always double-quoted and taken verbatim (no case folding).

Functions:
    quote_identifier: Quote a single identifier
    quote_table: Quote a namespace-qualified table
    postgres_type: Map a declared FieldType to a PostgreSQL column type
    create_schema: Generate CREATE SCHEMA
    drop_schema: Generate DROP SCHEMA
    create_table: Generate CREATE TABLE with the reserved metadata columns
    create_index: Generate CREATE INDEX
    drop_table: Generate DROP TABLE
    rename_table: Generate ALTER TABLE ... RENAME TO
    set_table_schema: Generate ALTER TABLE ... SET SCHEMA

Example:
    >>> from models.identifiers import TableName
    >>> from models.stream import FieldType
    >>> from sql.ddl import create_table, postgres_type
    >>>
    >>> sql = create_table(
    ...     TableName('raw', 'users'),
    ...     columns=[('id', postgres_type(FieldType.INTEGER))],
    ... )
"""

import hashlib
from typing import List, Optional, Sequence, Tuple, Union

from models.identifiers import TableName
from models.meta import META_COLUMN_DEFINITIONS, META_COLUMNS
from models.stream import FieldType

# PostgreSQL truncates identifiers beyond this length
MAX_IDENTIFIER_LENGTH = 63

_POSTGRES_TYPES = {
    FieldType.BOOLEAN: 'BOOLEAN',
    FieldType.INTEGER: 'BIGINT',
    FieldType.NUMBER: 'NUMERIC',
    FieldType.STRING: 'TEXT',
    FieldType.DATE: 'DATE',
    FieldType.TIME_WITH_TIMEZONE: 'TIME WITH TIME ZONE',
    FieldType.TIME_WITHOUT_TIMEZONE: 'TIME WITHOUT TIME ZONE',
    FieldType.TIMESTAMP_WITH_TIMEZONE: 'TIMESTAMP WITH TIME ZONE',
    FieldType.TIMESTAMP_WITHOUT_TIMEZONE: 'TIMESTAMP WITHOUT TIME ZONE',
    FieldType.OBJECT: 'JSONB',
    FieldType.ARRAY: 'JSONB',
    FieldType.UNKNOWN: 'JSONB',
}


def quote_identifier(name: str) -> str:
    """Quote an identifier for PostgreSQL.

    Embedded double quotes are doubled. Colons are backslash-escaped so that
    SQLAlchemy ``text()`` does not read them as bind parameters.

    Example:
        >>> quote_identifier('a"b')
        '"a""b"'
        >>> quote_identifier('ts:utc')
        '"ts\\:utc"'
    """
    escaped = name.replace('"', '""').replace(':', '\\:')
    return f'"{escaped}"'


def quote_table(table: TableName) -> str:
    """Render ``"namespace"."name"``."""
    return f"{quote_identifier(table.namespace)}.{quote_identifier(table.name)}"


def postgres_type(field_type: FieldType) -> str:
    """Map a declared field type to its PostgreSQL column type."""
    return _POSTGRES_TYPES[field_type]


def create_schema(namespace: str, if_not_exists: bool = True) -> str:
    """Generate CREATE SCHEMA statement.

    Example:
        >>> create_schema('raw')
        'CREATE SCHEMA IF NOT EXISTS "raw";'
    """
    sql_parts = ["CREATE SCHEMA"]

    if if_not_exists:
        sql_parts.append("IF NOT EXISTS")

    sql_parts.append(quote_identifier(namespace))

    return " ".join(sql_parts) + ";"


def drop_schema(namespace: str, if_exists: bool = True, cascade: bool = True) -> str:
    """Generate DROP SCHEMA statement.

    Example:
        >>> drop_schema('raw')
        'DROP SCHEMA IF EXISTS "raw" CASCADE;'
    """
    sql = "DROP SCHEMA"

    if if_exists:
        sql += " IF EXISTS"

    sql += f" {quote_identifier(namespace)}"

    if cascade:
        sql += " CASCADE"

    return sql + ";"


def create_table(
    table: TableName,
    columns: Sequence[Tuple[str, str]],
    include_metadata: bool = True,
    if_not_exists: bool = False
) -> str:
    """Generate CREATE TABLE statement.

    Metadata columns come first, followed by the user columns in the order
    given. User columns are always nullable: records are not required to be
    homogeneous.

    Args:
        table: Table to create
        columns: (physical column name, PostgreSQL type) pairs
        include_metadata: Prepend the reserved metadata columns
        if_not_exists: Add IF NOT EXISTS clause

    Returns:
        SQL CREATE TABLE statement
    """
    sql_parts = ["CREATE TABLE"]

    if if_not_exists:
        sql_parts.append("IF NOT EXISTS")

    sql_parts.append(f"{quote_table(table)} (")

    column_defs = []

    if include_metadata:
        for name in META_COLUMNS:
            column_defs.append(f"    {quote_identifier(name)} {META_COLUMN_DEFINITIONS[name]}")

    for name, sql_type in columns:
        column_defs.append(f"    {quote_identifier(name)} {sql_type}")

    return " ".join(sql_parts) + "\n" + ",\n".join(column_defs) + "\n);"


def _index_name(table: TableName, columns: List[str]) -> str:
    name = f"idx_{table.name}_{'_'.join(columns)}"
    if len(name) <= MAX_IDENTIFIER_LENGTH:
        return name
    digest = hashlib.sha256(f"{table}:{','.join(columns)}".encode('utf-8')).hexdigest()[:12]
    return f"{name[:MAX_IDENTIFIER_LENGTH - 13]}_{digest}"


def create_index(
    table: TableName,
    columns: Union[str, List[str]],
    index_name: Optional[str] = None,
    unique: bool = False,
    if_not_exists: bool = True
) -> str:
    """Generate CREATE INDEX statement.

    Index names longer than PostgreSQL's identifier limit are shortened with
    a stable hash suffix. With ``if_not_exists=False`` and no ``index_name``
    the name is left to PostgreSQL.

    Args:
        table: Indexed table
        columns: Column name(s) for the index
        index_name: Optional index name
        unique: Create unique index
        if_not_exists: Add IF NOT EXISTS clause (requires a name)

    Returns:
        SQL CREATE INDEX statement
    """
    if isinstance(columns, str):
        columns = [columns]

    if not index_name and if_not_exists:
        index_name = _index_name(table, columns)

    sql_parts = ["CREATE"]

    if unique:
        sql_parts.append("UNIQUE")

    sql_parts.append("INDEX")

    if if_not_exists:
        sql_parts.append("IF NOT EXISTS")

    if index_name:
        sql_parts.append(quote_identifier(index_name))
    sql_parts.append("ON")
    sql_parts.append(quote_table(table))

    column_list = ", ".join(quote_identifier(col) for col in columns)
    sql_parts.append(f"({column_list})")

    return " ".join(sql_parts) + ";"


def drop_table(table: TableName, if_exists: bool = True, cascade: bool = False) -> str:
    """Generate DROP TABLE statement."""
    sql = "DROP TABLE"

    if if_exists:
        sql += " IF EXISTS"

    sql += f" {quote_table(table)}"

    if cascade:
        sql += " CASCADE"

    return sql + ";"


def rename_table(table: TableName, new_name: str) -> str:
    """Generate ALTER TABLE ... RENAME TO (namespace unchanged)."""
    return f"ALTER TABLE {quote_table(table)} RENAME TO {quote_identifier(new_name)};"


def set_table_schema(table: TableName, new_namespace: str) -> str:
    """Generate ALTER TABLE ... SET SCHEMA (name unchanged)."""
    return f"ALTER TABLE {quote_table(table)} SET SCHEMA {quote_identifier(new_namespace)};"
