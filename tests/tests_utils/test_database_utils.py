"""
========================================================
Comprehensive pytest suite for utils/database_utils.py
========================================================

Sections:
---------
1. Unit tests - Individual function testing
2. Edge case tests - Boundary conditions

Available markers:
------------------
unit, edge_case

Test Coverage:
--------------
- create_sqlalchemy_engine: Engine creation from the configured URL and pool settings
- check_database_available: Database availability verification
- wait_for_database: Retry logic and ConnectivityError on exhaustion
- retry_with_backoff: Retries retriable faults only, with growing delay

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_database_utils.py -v
By category:        pytest tests/tests_utils/test_database_utils.py -m unit
Specific test:      pytest tests/tests_utils/test_database_utils.py::test_create_sqlalchemy_engine_uses_config_url
With coverage:      pytest tests/tests_utils/test_database_utils.py --cov=utils.database_utils

Note: Use 'python -m pytest' (not just 'pytest') to ensure correct Python path resolution.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, call, patch

import pytest
from psycopg2 import OperationalError
from sqlalchemy.engine import URL

from core.exceptions import (
    ConnectivityError,
    SchemaMismatchError,
    TransientWarehouseError,
)
from utils.database_utils import (
    check_database_available,
    create_sqlalchemy_engine,
    retry_with_backoff,
    wait_for_database,
)

# ====================
# Mock Helper Classes
# ====================

class FakeConfig:
    """Mock config object for testing."""
    def __init__(self):
        self.db_host = 'localhost'
        self.db_port = 5432
        self.db_user = 'postgres'
        self.db_password = 'secret123'
        self.warehouse_db_name = 'warehouse'
        self.engine = SimpleNamespace(
            pool_size=5,
            max_overflow=10,
            connect_retries=3,
            retry_delay=1.0,
        )

    def get_connection_params(self):
        return {
            'host': self.db_host,
            'port': self.db_port,
            'user': self.db_user,
            'password': self.db_password,
            'database': self.warehouse_db_name,
        }

    def get_connection_url(self):
        params = self.get_connection_params()
        return URL.create(
            drivername='postgresql+psycopg2',
            username=params['user'],
            password=params['password'],
            host=params['host'],
            port=params['port'],
            database=params['database']
        )


class FakeConnection:
    """Mock psycopg2 connection."""
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


# ====================
# Fixtures
# ====================

@pytest.fixture
def mock_config():
    """Provide mock configuration."""
    fake = FakeConfig()
    with patch('utils.database_utils.config', fake):
        yield fake


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_create_sqlalchemy_engine_uses_config_url(mock_config):
    """
    Test SQLAlchemy engine creation from config.get_connection_url().

    Verifies the psycopg2 driver, the warehouse database and the pool
    settings from config are used.
    """
    with patch('utils.database_utils.create_engine') as mock_create_engine:
        mock_create_engine.return_value = MagicMock()

        create_sqlalchemy_engine()

        url = mock_create_engine.call_args[0][0]
        assert url == mock_config.get_connection_url()
        assert url.drivername == 'postgresql+psycopg2'

        call_kwargs = mock_create_engine.call_args[1]
        assert call_kwargs['pool_pre_ping'] is True
        assert call_kwargs['pool_size'] == 5
        assert call_kwargs['max_overflow'] == 10


@pytest.mark.unit
def test_create_sqlalchemy_engine_overrides_single_url_fields(mock_config):
    """Explicit arguments replace their URL field and leave the rest from config."""
    with patch('utils.database_utils.create_engine') as mock_create_engine:
        create_sqlalchemy_engine(host='db.example.com', password='custom@pass')

        url = mock_create_engine.call_args[0][0]
        assert url.host == 'db.example.com'
        assert url.password == 'custom@pass'
        assert url.username == 'postgres'
        assert url.port == 5432
        assert url.database == 'warehouse'


@pytest.mark.unit
def test_create_sqlalchemy_engine_custom_pool_settings(mock_config):
    """Explicit pool settings win over config."""
    with patch('utils.database_utils.create_engine') as mock_create_engine:

        create_sqlalchemy_engine(pool_size=10, max_overflow=20, echo=True)

        call_kwargs = mock_create_engine.call_args[1]
        assert call_kwargs['pool_size'] == 10
        assert call_kwargs['max_overflow'] == 20
        assert call_kwargs['echo'] is True


@pytest.mark.unit
def test_check_database_available_success(mock_config):
    """
    Test database availability check when database is available.

    Verifies check_database_available returns True and closes the connection.
    """
    with patch('utils.database_utils.psycopg2.connect') as mock_connect:
        mock_conn = FakeConnection()
        mock_connect.return_value = mock_conn

        result = check_database_available()

        assert result is True
        assert mock_conn.closed is True
        mock_connect.assert_called_once_with(
            host='localhost',
            port=5432,
            user='postgres',
            password='secret123',
            database='warehouse',
            connect_timeout=5
        )


@pytest.mark.unit
def test_check_database_available_failure(mock_config):
    """Returns False when the connection fails."""
    with patch('utils.database_utils.psycopg2.connect', side_effect=OperationalError):
        assert check_database_available() is False


@pytest.mark.unit
def test_wait_for_database_immediate_success(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=True):
        assert wait_for_database() is True


@pytest.mark.unit
def test_wait_for_database_success_after_retries(mock_config):
    """
    Test wait_for_database succeeds after multiple retries.

    Verifies retry logic works and function succeeds eventually.
    """
    with patch('utils.database_utils.check_database_available', side_effect=[False, False, True]), \
         patch('utils.database_utils.time.sleep') as mock_sleep:

        result = wait_for_database(max_retries=5, retry_delay=1)

        assert result is True
        assert mock_sleep.call_count == 2


@pytest.mark.unit
def test_wait_for_database_max_retries_exhausted(mock_config):
    """
    Test wait_for_database raises ConnectivityError when retries are exhausted.

    The error is flagged retriable so callers can back off and try again.
    """
    with patch('utils.database_utils.check_database_available', return_value=False), \
         patch('utils.database_utils.time.sleep'):

        with pytest.raises(ConnectivityError) as exc_info:
            wait_for_database(max_retries=3, retry_delay=1)

        assert 'did not become available' in str(exc_info.value)
        assert exc_info.value.retriable is True
        assert exc_info.value.details['database'] == 'warehouse'


@pytest.mark.unit
def test_wait_for_database_uses_config_retry_policy(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=False) as mock_check, \
         patch('utils.database_utils.time.sleep') as mock_sleep:

        with pytest.raises(ConnectivityError):
            wait_for_database()

        assert mock_check.call_count == 3
        mock_sleep.assert_has_calls([call(1.0), call(1.0)])


@pytest.mark.unit
def test_retry_with_backoff_retries_retriable_errors(mock_config):
    """Retriable faults are retried with a growing delay until success."""
    func = MagicMock(side_effect=[
        TransientWarehouseError("deadlock detected"),
        ConnectivityError("connection reset"),
        'done',
    ])

    with patch('utils.database_utils.time.sleep') as mock_sleep:
        result = retry_with_backoff(func, retries=3, base_delay=0.5, multiplier=2.0)

    assert result == 'done'
    assert func.call_count == 3
    mock_sleep.assert_has_calls([call(0.5), call(1.0)])


# ====================
# 2. EDGE CASE TESTS
# ====================

@pytest.mark.edge_case
def test_retry_with_backoff_does_not_retry_caller_faults(mock_config):
    """Non-retriable faults propagate on the first attempt."""
    func = MagicMock(side_effect=SchemaMismatchError("unmapped field"))

    with patch('utils.database_utils.time.sleep') as mock_sleep:
        with pytest.raises(SchemaMismatchError):
            retry_with_backoff(func, retries=5)

    assert func.call_count == 1
    mock_sleep.assert_not_called()


@pytest.mark.edge_case
def test_retry_with_backoff_reraises_last_error(mock_config):
    func = MagicMock(side_effect=TransientWarehouseError("serialization failure"))

    with patch('utils.database_utils.time.sleep'):
        with pytest.raises(TransientWarehouseError):
            retry_with_backoff(func, retries=2, base_delay=0)

    assert func.call_count == 3


@pytest.mark.edge_case
def test_retry_with_backoff_ignores_foreign_exceptions(mock_config):
    func = MagicMock(side_effect=KeyError('x'))

    with pytest.raises(KeyError):
        retry_with_backoff(func, retries=3)

    assert func.call_count == 1
