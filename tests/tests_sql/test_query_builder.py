"""
===================================================
Comprehensive pytest suite for sql/query_builder.py
===================================================

Sections:
---------
1. Unit tests - Catalog and table query generation

Available markers:
------------------
unit

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_query_builder.py -v
"""

import pytest

from models.identifiers import TableName
from sql.query_builder import (
    check_schema_exists_sql,
    check_table_exists_sql,
    count_rows_sql,
    get_column_info_sql,
    max_generation_id_sql,
    select_builder,
)

USERS = TableName('raw', 'users')

# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_catalog_queries_use_named_binds():
    """Catalog lookups never inline identifiers."""
    assert ':namespace' in check_schema_exists_sql()
    assert 'information_schema.schemata' in check_schema_exists_sql()

    assert ':namespace' in check_table_exists_sql()
    assert ':table_name' in check_table_exists_sql()

    assert 'ORDER BY ordinal_position' in get_column_info_sql()


@pytest.mark.unit
def test_count_rows_sql():
    assert count_rows_sql(USERS) == 'SELECT COUNT(*) FROM "raw"."users";'


@pytest.mark.unit
def test_max_generation_id_sql():
    assert max_generation_id_sql(USERS) == (
        'SELECT MAX("_airbyte_generation_id") FROM "raw"."users";'
    )


@pytest.mark.unit
def test_select_builder_variants():
    assert select_builder(USERS) == 'SELECT *\nFROM "raw"."users";'
    assert select_builder(USERS, ['id', 'name'], order_by=['id'], limit=5) == (
        'SELECT "id", "name"\nFROM "raw"."users"\nORDER BY "id"\nLIMIT 5;'
    )
