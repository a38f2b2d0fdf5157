"""
Shared fixtures and mocking helpers for operations tests.

Key fixtures:
- fake_executor: in-memory stand-in for WarehouseExecutor that records SQL,
  answers catalog lookups from a fake catalog and tracks transactions.
- namespaces / tables: managers wired to the fake executor.
"""

from contextlib import contextmanager

import pytest

from models.identifiers import TableName
from models.meta import META_COLUMNS
from operations.namespace_manager import NamespaceManager
from operations.table_manager import TableManager
from sql.query_builder import (
    check_schema_exists_sql,
    check_table_exists_sql,
    get_column_info_sql,
)


class FakeExecutor:
    """Mock WarehouseExecutor.

    Attributes:
        schemas: Namespaces the fake catalog reports as existing
        tables: TableName -> physical column list
        scalars: SQL text -> value returned by fetch_scalar
        rows: SQL text -> rows returned by fetch_all
        log: Executed SQL interleaved with BEGIN/COMMIT/ROLLBACK markers
        batches: (sql, rows) for every execute_many call
        fail_on: Substring; execute raises ``fail_error`` for matching SQL
    """

    BEGIN = 'BEGIN'
    COMMIT = 'COMMIT'
    ROLLBACK = 'ROLLBACK'

    def __init__(self):
        self.schemas = set()
        self.tables = {}
        self.scalars = {}
        self.rows = {}
        self.log = []
        self.params = []
        self.batches = []
        self.rowcount = 0
        self.fail_on = None
        self.fail_error = None
        self.disposed = False
        self._depth = 0

    def add_table(self, table, user_columns=(), meta=True):
        self.schemas.add(table.namespace)
        self.tables[table] = (list(META_COLUMNS) if meta else []) + list(user_columns)

    @property
    def statements(self):
        return [entry for entry in self.log if entry not in (self.BEGIN, self.COMMIT, self.ROLLBACK)]

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield None
            finally:
                self._depth -= 1
            return

        self._depth = 1
        self.log.append(self.BEGIN)
        try:
            yield None
        except Exception:
            self.log.append(self.ROLLBACK)
            raise
        else:
            self.log.append(self.COMMIT)
        finally:
            self._depth = 0

    def _check_failure(self, sql):
        if self.fail_on and self.fail_on in sql:
            raise self.fail_error

    def execute(self, sql, params=None):
        self._check_failure(sql)
        self.log.append(sql)
        self.params.append(params)
        return self.rowcount

    def execute_many(self, sql, rows):
        self._check_failure(sql)
        self.log.append(sql)
        self.batches.append((sql, list(rows)))
        return len(rows)

    def fetch_scalar(self, sql, params=None):
        if sql == check_schema_exists_sql():
            return 1 if params['namespace'] in self.schemas else None
        if sql == check_table_exists_sql():
            table = TableName(params['namespace'], params['table_name'])
            return 1 if table in self.tables else None
        return self.scalars.get(sql)

    def fetch_all(self, sql, params=None):
        if sql == get_column_info_sql():
            table = TableName(params['namespace'], params['table_name'])
            return [
                {'column_name': name, 'data_type': 'text', 'is_nullable': 'YES'}
                for name in self.tables.get(table, [])
            ]
        return self.rows.get(sql, [])

    def ping(self):
        return True

    def dispose(self):
        self.disposed = True


# ====================
# Fixtures
# ====================

@pytest.fixture
def fake_executor():
    """Fresh FakeExecutor with an empty catalog."""
    return FakeExecutor()


@pytest.fixture
def namespaces(fake_executor):
    return NamespaceManager(fake_executor)


@pytest.fixture
def tables(fake_executor, namespaces):
    return TableManager(fake_executor, namespaces)
