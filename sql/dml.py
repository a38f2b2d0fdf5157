"""
===========================================
Data Manipulation Language (DML) Utilities.
===========================================

Pure functions generating the PostgreSQL DML the engines execute. Each
function returns exactly one statement so that a single ``execute`` is a
single atomic unit in the warehouse.

Functions:
- bind_name: Positional bind parameter name used by bulk_insert
- bulk_insert: INSERT ... VALUES with positional named binds
- insert_select: INSERT ... SELECT between two tables (copy)
- merge_statement: Deduplicating merge of a source table into a target table

Usage:
    from sql.dml import bulk_insert, merge_statement

    insert_sql = bulk_insert(
        table=TableName('raw', 'users'),
        columns=['_airbyte_raw_id', 'id', 'name'],
    )

    merge_sql = merge_statement(
        source=TableName('raw', 'users_staging'),
        target=TableName('raw', 'users'),
        columns=['_airbyte_raw_id', ..., 'id', 'name', 'updated'],
        key_columns=['id'],
        cursor_column='updated',
    )
"""

from typing import List, Optional, Sequence

from models.identifiers import TableName
from models.meta import (
    COLUMN_NAME_AB_CDC_DELETED_AT,
    COLUMN_NAME_AB_EXTRACTED_AT,
    COLUMN_NAME_AB_RAW_ID,
)
from sql.ddl import quote_identifier, quote_table

MERGE_PRIORITY_COLUMN = '_airbyte_merge_priority'
MERGE_ROW_NUMBER_COLUMN = '_airbyte_merge_row_number'


def _column_list(columns: Sequence[str], prefix: str = '') -> str:
    return ", ".join(f"{prefix}{quote_identifier(col)}" for col in columns)


def bind_name(position: int) -> str:
    """Bind parameter name for the column at ``position`` in bulk_insert.

    Physical column names are arbitrary strings, so binds are positional.
    """
    return f"p{position}"


def bulk_insert(table: TableName, columns: Sequence[str]) -> str:
    """
    Generate INSERT statement for executemany-style bulk loading.

    Args:
        table: Target table
        columns: Physical columns receiving values, in bind order

    Returns:
        SQL INSERT statement with binds ``:p0 .. :pN``
    """
    placeholder_list = ", ".join(f":{bind_name(i)}" for i in range(len(columns)))

    return f'''INSERT INTO {quote_table(table)} (
    {_column_list(columns)}
) VALUES (
    {placeholder_list}
);'''


def insert_select(source: TableName, target: TableName, columns: Sequence[str]) -> str:
    """
    Generate INSERT ... SELECT appending every source row to the target.

    Args:
        source: Table rows are read from (left unchanged)
        target: Table rows are appended to
        columns: Physical columns copied, same names on both sides

    Returns:
        SQL INSERT ... SELECT statement
    """
    column_list = _column_list(columns)

    return f'''INSERT INTO {quote_table(target)} (
    {column_list}
)
SELECT
    {column_list}
FROM {quote_table(source)};'''


def _key_match(key_columns: Sequence[str], left: str, right: str) -> str:
    # NULL keys compare equal so they group like PARTITION BY does
    return " AND ".join(
        f"{left}.{quote_identifier(col)} IS NOT DISTINCT FROM {right}.{quote_identifier(col)}"
        for col in key_columns
    )


def merge_order_by(cursor_column: Optional[str]) -> List[str]:
    """
    Winner ordering inside one primary-key group, best row first.

    1. cursor value, highest first, NULL cursors last
    2. extraction time, latest first
    3. incoming (source) rows before existing (target) rows
    4. raw id, as a total tie-break
    """
    order_by = []

    if cursor_column:
        order_by.append(f"{quote_identifier(cursor_column)} DESC NULLS LAST")

    order_by.extend([
        f"{quote_identifier(COLUMN_NAME_AB_EXTRACTED_AT)} DESC NULLS LAST",
        f"{quote_identifier(MERGE_PRIORITY_COLUMN)} DESC",
        f"{quote_identifier(COLUMN_NAME_AB_RAW_ID)} DESC",
    ])

    return order_by


def merge_statement(
    source: TableName,
    target: TableName,
    columns: Sequence[str],
    key_columns: Sequence[str],
    cursor_column: Optional[str] = None
) -> str:
    """
    Generate a single-statement deduplicating merge of source into target.

    For every primary key touched by the source, the candidate rows are the
    source rows plus the target rows with that key. The best candidate per
    key (see merge_order_by) replaces all target rows for the key, unless it
    carries a CDC delete marker, in which case the key disappears. Keys the
    source does not touch are left alone.

    The DELETE runs as a data-modifying CTE over the same snapshot the
    candidates are read from, so the whole merge is one atomic statement.
    Running it twice with the same source yields the same target.

    Args:
        source: Staged rows (left unchanged)
        target: Deduplicated table being merged into
        columns: Physical columns carried over, metadata included
        key_columns: Physical primary key columns
        cursor_column: Physical cursor column, or None

    Returns:
        SQL statement
    """
    if not key_columns:
        raise ValueError("merge_statement requires at least one key column")

    column_list = _column_list(columns)
    partition_list = _column_list(key_columns)
    order_list = ", ".join(merge_order_by(cursor_column))
    source_sql = quote_table(source)
    target_sql = quote_table(target)
    touched = f"EXISTS (SELECT 1 FROM {source_sql} AS s WHERE {_key_match(key_columns, 't', 's')})"

    return f'''WITH candidates AS (
    SELECT {column_list}, 1 AS {quote_identifier(MERGE_PRIORITY_COLUMN)}
    FROM {source_sql}
    UNION ALL
    SELECT {_column_list(columns, 't.')}, 0 AS {quote_identifier(MERGE_PRIORITY_COLUMN)}
    FROM {target_sql} AS t
    WHERE {touched}
),
ranked AS (
    SELECT
        candidates.*,
        ROW_NUMBER() OVER (
            PARTITION BY {partition_list}
            ORDER BY {order_list}
        ) AS {quote_identifier(MERGE_ROW_NUMBER_COLUMN)}
    FROM candidates
),
removed AS (
    DELETE FROM {target_sql} AS t
    WHERE {touched}
)
INSERT INTO {target_sql} (
    {column_list}
)
SELECT
    {column_list}
FROM ranked
WHERE {quote_identifier(MERGE_ROW_NUMBER_COLUMN)} = 1
  AND {quote_identifier(COLUMN_NAME_AB_CDC_DELETED_AT)} IS NULL;'''
