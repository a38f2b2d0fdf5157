"""
===============================================
Pytest suite for core/ (config, exceptions, logger)
===============================================

Sections:
---------
1. Configuration - environment loading and defaults
2. Error taxonomy - hierarchy and retriable flags
3. Logging - handlers, levels and formatting

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_core.py -v
"""

import logging

import pytest

from core.config import Config
from core.exceptions import (
    AlreadyExistsError,
    ConnectivityError,
    InvalidStreamDescriptorError,
    NamespaceNotFoundError,
    NotFoundError,
    SchemaMismatchError,
    SourceNotFoundError,
    TableAlreadyExistsError,
    TableNotFoundError,
    TableOperationsError,
    TransientWarehouseError,
    WarehouseExecutionError,
)
from core.logger import SQLALCHEMY_LOGGER, ColoredFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ====================
# 1. CONFIGURATION
# ====================

@pytest.mark.unit
def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv('POSTGRES_HOST', 'warehouse.internal')
    monkeypatch.setenv('POSTGRES_PORT', '6543')
    monkeypatch.setenv('WAREHOUSE_DB', 'analytics')
    monkeypatch.setenv('WAREHOUSE_DEFAULT_NAMESPACE', 'raw')
    monkeypatch.setenv('WAREHOUSE_INSERT_BATCH_SIZE', '250')
    monkeypatch.setenv('WAREHOUSE_RETRY_DELAY', '0.5')

    config = Config()

    assert config.db_host == 'warehouse.internal'
    assert config.db_port == 6543
    assert config.warehouse_db_name == 'analytics'
    assert config.default_namespace == 'raw'
    assert config.engine.insert_batch_size == 250
    assert config.engine.retry_delay == 0.5


@pytest.mark.unit
def test_connection_url_uses_psycopg2_driver(monkeypatch):
    monkeypatch.setenv('POSTGRES_USER', 'loader')
    monkeypatch.setenv('POSTGRES_PASSWORD', 'p@ss:word')

    url = Config().get_connection_url()

    assert url.drivername == 'postgresql+psycopg2'
    assert url.username == 'loader'
    assert url.password == 'p@ss:word'


@pytest.mark.unit
def test_connection_params_for_driver(monkeypatch):
    monkeypatch.setenv('POSTGRES_HOST', 'db')
    monkeypatch.setenv('WAREHOUSE_DB', 'analytics')

    params = Config().get_connection_params()

    assert params['host'] == 'db'
    assert params['database'] == 'analytics'
    assert set(params) == {'host', 'port', 'user', 'password', 'database'}


@pytest.mark.edge_case
def test_non_numeric_port_raises(monkeypatch):
    monkeypatch.setenv('POSTGRES_PORT', 'not-a-port')

    with pytest.raises(ValueError):
        Config()


# ====================
# 2. ERROR TAXONOMY
# ====================

@pytest.mark.unit
@pytest.mark.parametrize('error_cls, retriable', [
    (ConnectivityError, True),
    (TransientWarehouseError, True),
    (NamespaceNotFoundError, False),
    (SourceNotFoundError, False),
    (TableAlreadyExistsError, False),
    (SchemaMismatchError, False),
    (InvalidStreamDescriptorError, False),
    (WarehouseExecutionError, False),
])
def test_retriable_flags(error_cls, retriable):
    error = error_cls('boom')

    assert isinstance(error, TableOperationsError)
    assert error.retriable is retriable


@pytest.mark.unit
def test_not_found_hierarchy():
    assert issubclass(SourceNotFoundError, TableNotFoundError)
    assert issubclass(TableNotFoundError, NotFoundError)
    assert issubclass(NamespaceNotFoundError, NotFoundError)
    assert issubclass(TableAlreadyExistsError, AlreadyExistsError)


@pytest.mark.unit
def test_error_carries_message_and_details():
    error = SchemaMismatchError("Field 'x' is not mapped", details={'field': 'x'})

    assert str(error) == "Field 'x' is not mapped"
    assert error.message == "Field 'x' is not mapped"
    assert error.details == {'field': 'x'}
    assert SchemaMismatchError('no details').details == {}


# ====================
# 3. LOGGING
# ====================

@pytest.mark.unit
def test_setup_logging_sets_root_level(restore_root_logger):
    setup_logging(log_level='DEBUG', use_colors=False)

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1


@pytest.mark.unit
def test_setup_logging_writes_utf8_file(restore_root_logger, tmp_path):
    setup_logging(log_level='INFO', log_file='ops.log', log_dir=str(tmp_path), console_output=False)

    get_logger('tests.core').info("🔀 Upserted raw.users_tmp into raw.users")
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = (tmp_path / 'ops.log').read_text(encoding='utf-8')
    assert '🔀 Upserted raw.users_tmp into raw.users' in content


@pytest.mark.unit
def test_get_logger_level_override():
    logger = get_logger('tests.core.override', level='warning')

    assert logger.level == logging.WARNING


@pytest.mark.unit
def test_sql_echo_controls_sqlalchemy_engine_logger(restore_root_logger):
    engine_logger = logging.getLogger(SQLALCHEMY_LOGGER)
    previous = engine_logger.level
    try:
        setup_logging(console_output=False)
        assert engine_logger.level == logging.WARNING

        setup_logging(console_output=False, sql_echo=True)
        assert engine_logger.level == logging.INFO
    finally:
        engine_logger.setLevel(previous)


@pytest.mark.edge_case
def test_colored_formatter_restores_levelname():
    """Colors apply to the formatted text only; other handlers see the plain name."""
    record = logging.LogRecord('x', logging.ERROR, __file__, 1, 'failed', None, None)

    formatted = ColoredFormatter('%(emoji)s %(levelname)s %(message)s').format(record)

    assert formatted.startswith('❌')
    assert '\033[31m' in formatted
    assert record.levelname == 'ERROR'
