"""
=======================================================
SQL generation package for warehouse table operations.
=======================================================

This package holds the PostgreSQL dialect of the engine. All functions are
pure: they return SQL text and never open connections. The operations/
package executes the text through SQLAlchemy ``text()``.

The package follows a clear organization:
    - ddl.py: CREATE/DROP/ALTER for namespaces, tables and indexes
    - dml.py: INSERT, INSERT ... SELECT and the deduplicating merge
    - query_builder.py: catalog lookups and table reads

Example:
    >>> from models.identifiers import TableName
    >>> from sql.ddl import create_schema, drop_table
    >>> from sql.query_builder import count_rows_sql
    >>>
    >>> create_schema('raw')
    'CREATE SCHEMA IF NOT EXISTS "raw";'
    >>> count_rows_sql(TableName('raw', 'users'))
    'SELECT COUNT(*) FROM "raw"."users";'
"""

__version__ = "0.1.0"
__all__ = [
    # DDL functions
    'quote_identifier', 'quote_table', 'postgres_type',
    'create_schema', 'drop_schema', 'create_table', 'create_index',
    'drop_table', 'rename_table', 'set_table_schema',
    # DML functions
    'bulk_insert', 'insert_select', 'merge_statement',
    # Query functions
    'check_schema_exists_sql', 'check_table_exists_sql', 'get_column_info_sql',
    'count_rows_sql', 'max_generation_id_sql', 'select_builder',
]

from .ddl import (
    create_index,
    create_schema,
    create_table,
    drop_schema,
    drop_table,
    postgres_type,
    quote_identifier,
    quote_table,
    rename_table,
    set_table_schema,
)
from .dml import bulk_insert, insert_select, merge_statement
from .query_builder import (
    check_schema_exists_sql,
    check_table_exists_sql,
    count_rows_sql,
    get_column_info_sql,
    max_generation_id_sql,
    select_builder,
)
