"""
============================
SQL Query Builder Utilities.
============================

Read-only queries used by the lifecycle manager and the engines. Catalog
lookups take their values as named binds (``:namespace``, ``:table_name``)
so callers pass them as parameters instead of formatting them in.

Metadata Query Functions:
- check_schema_exists_sql: Does a namespace exist (binds: namespace)
- check_table_exists_sql: Does a table exist (binds: namespace, table_name)
- get_column_info_sql: Columns of a table in ordinal order (binds: namespace, table_name)

Table Query Functions:
- count_rows_sql: Row count of a table
- max_generation_id_sql: Current generation id of a table
- select_builder: SELECT listed columns with optional ordering

Usage:
    from sql.query_builder import check_table_exists_sql, count_rows_sql

    executor.fetch_scalar(
        check_table_exists_sql(),
        {'namespace': 'raw', 'table_name': 'users'}
    )
    executor.fetch_scalar(count_rows_sql(TableName('raw', 'users')))
"""

from typing import List, Optional, Sequence, Union

from models.identifiers import TableName
from models.meta import COLUMN_NAME_AB_GENERATION_ID
from sql.ddl import quote_identifier, quote_table


def check_schema_exists_sql() -> str:
    """
    Generate SQL to check if a namespace exists.

    Returns:
        Query returning one row when the schema exists, none otherwise
    """
    return """SELECT 1
FROM information_schema.schemata
WHERE schema_name = :namespace;"""


def check_table_exists_sql() -> str:
    """
    Generate SQL to check if a table exists.

    Returns:
        Query returning one row when the table exists, none otherwise
    """
    return """SELECT 1
FROM information_schema.tables
WHERE table_schema = :namespace
  AND table_name = :table_name;"""


def get_column_info_sql() -> str:
    """
    Generate SQL listing a table's columns.

    Returns:
        Query returning column_name, data_type, is_nullable per column
    """
    return """SELECT
    column_name,
    data_type,
    is_nullable
FROM information_schema.columns
WHERE table_schema = :namespace
  AND table_name = :table_name
ORDER BY ordinal_position;"""


def count_rows_sql(table: TableName) -> str:
    """Generate SELECT COUNT(*) for a table."""
    return f"SELECT COUNT(*) FROM {quote_table(table)};"


def max_generation_id_sql(table: TableName) -> str:
    """Generate SQL returning the highest generation id, NULL for an empty table."""
    return (
        f"SELECT MAX({quote_identifier(COLUMN_NAME_AB_GENERATION_ID)}) "
        f"FROM {quote_table(table)};"
    )


def select_builder(
    table: TableName,
    columns: Union[Sequence[str], str] = "*",
    order_by: Optional[List[str]] = None,
    limit: Optional[int] = None
) -> str:
    """
    Build a SELECT statement over one table.

    Args:
        table: Table to read
        columns: Physical column names, or "*" for all columns
        order_by: Physical column names to order by (ascending)
        limit: LIMIT clause value

    Returns:
        SQL SELECT statement
    """
    if isinstance(columns, str):
        column_clause = columns
    else:
        column_clause = ", ".join(quote_identifier(col) for col in columns)

    sql = f"""SELECT {column_clause}
FROM {quote_table(table)}"""

    if order_by:
        sql += "\nORDER BY " + ", ".join(quote_identifier(col) for col in order_by)

    if limit:
        sql += f"\nLIMIT {int(limit)}"

    return sql + ";"
