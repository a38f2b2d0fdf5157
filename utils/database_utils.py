"""
==================================================
Database connectivity utilities for PostgreSQL.
==================================================

Connection helpers, availability checks and retry logic used by the
warehouse executor and the CLI.

This module keeps PostgreSQL connection logic out of the operation engines,
so every caller builds engines and waits for the warehouse the same way.

Key Features:
    - Pooled SQLAlchemy engine creation
    - Database availability checking
    - Bounded waiting for the warehouse to come up
    - Exponential backoff for retriable operation faults

Example:
    >>> from utils.database_utils import (
    ...     check_database_available,
    ...     retry_with_backoff,
    ...     wait_for_database,
    ... )
    >>>
    >>> # Check if database is available
    >>> if check_database_available('localhost', 5432, 'postgres', 'password'):
    ...     print("Database ready")
    >>>
    >>> # Wait for database with retries
    >>> wait_for_database('localhost', 5432, max_retries=5)
    >>>
    >>> # Retry an upsert that may hit a deadlock
    >>> retry_with_backoff(lambda: client.upsert_table(...), retries=3)
"""

import logging
import time
from typing import Callable, TypeVar

import psycopg2
from psycopg2 import OperationalError
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from core.config import config
from core.exceptions import ConnectivityError, TableOperationsError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def create_sqlalchemy_engine(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    echo: bool = False,
    pool_size: int = None,
    max_overflow: int = None
) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    Starts from config.get_connection_url(); explicit arguments replace
    single fields of that URL.

    Args:
        host: Database hostname
        port: Database port
        user: Database user
        password: Database password
        database: Database name (defaults to the warehouse database)
        echo: Enable SQL statement logging
        pool_size: Connection pool size (defaults to config.engine.pool_size)
        max_overflow: Maximum overflow connections (defaults to config.engine.max_overflow)

    Returns:
        Configured SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine()
        >>> with engine.connect() as conn:
        ...     result = conn.execute(text("SELECT 1"))
    """
    # URL.set leaves fields passed as None untouched
    connection_url = config.get_connection_url().set(
        username=user,
        password=password,
        host=host,
        port=port,
        database=database
    )

    return create_engine(
        connection_url,
        echo=echo,
        pool_size=pool_size if pool_size is not None else config.engine.pool_size,
        max_overflow=max_overflow if max_overflow is not None else config.engine.max_overflow,
        pool_pre_ping=True  # Verify connections before using
    )


def check_database_available(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    timeout: int = 5
) -> bool:
    """
    Check if PostgreSQL database is available.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config.warehouse_db_name)
        timeout: Connection timeout in seconds

    Returns:
        True if database is available, False otherwise
    """
    params = config.get_connection_params()
    overrides = {'host': host, 'port': port, 'user': user, 'password': password, 'database': database}
    params.update({key: value for key, value in overrides.items() if value})

    try:
        conn = psycopg2.connect(**params, connect_timeout=timeout)
        conn.close()
        return True
    except OperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False


def wait_for_database(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    max_retries: int = None,
    retry_delay: float = None,
    timeout: int = 5
) -> bool:
    """
    Wait for PostgreSQL database to become available with retries.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config.warehouse_db_name)
        max_retries: Maximum number of attempts (defaults to config.engine.connect_retries)
        retry_delay: Delay between attempts in seconds (defaults to config.engine.retry_delay)
        timeout: Connection timeout per attempt in seconds

    Returns:
        True once the database is available

    Raises:
        ConnectivityError: If database never becomes available

    Example:
        >>> wait_for_database(max_retries=5, retry_delay=3)
        >>> # Waits up to 15 seconds for database
    """
    host = host or config.db_host
    port = port or config.db_port
    database = database or config.warehouse_db_name
    max_retries = max_retries if max_retries is not None else config.engine.connect_retries
    retry_delay = retry_delay if retry_delay is not None else config.engine.retry_delay

    logger.info(f"Waiting for PostgreSQL at {host}:{port}/{database}...")

    for attempt in range(1, max_retries + 1):
        if check_database_available(host, port, user, password, database, timeout):
            logger.info(f"✅ PostgreSQL is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"⏳ PostgreSQL not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = (
        f"PostgreSQL at {host}:{port}/{database} did not become available "
        f"after {max_retries} attempts"
    )
    logger.error(f"❌ {error_msg}")
    raise ConnectivityError(error_msg, details={'host': host, 'port': port, 'database': database})


def retry_with_backoff(
    func: Callable[[], T],
    retries: int = None,
    base_delay: float = None,
    multiplier: float = 2.0
) -> T:
    """
    Call ``func`` again after retriable faults, with exponential backoff.

    Only TableOperationsError subclasses flagged ``retriable`` are retried.
    Anything else, and the last retriable fault, propagates unchanged.

    Args:
        func: Zero-argument callable to run
        retries: Extra attempts after the first (defaults to config.engine.connect_retries)
        base_delay: Delay before the first retry in seconds (defaults to config.engine.retry_delay)
        multiplier: Factor applied to the delay after every retry

    Returns:
        Whatever ``func`` returns

    Example:
        >>> retry_with_backoff(lambda: client.overwrite_table(staging, target))
    """
    retries = retries if retries is not None else config.engine.connect_retries
    delay = base_delay if base_delay is not None else config.engine.retry_delay

    attempt = 0
    while True:
        try:
            return func()
        except TableOperationsError as e:
            if not e.retriable or attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                f"🔄 Retriable {type(e).__name__}: {e.message} "
                f"(retry {attempt}/{retries} in {delay}s)"
            )
            time.sleep(delay)
            delay *= multiplier
