"""
====================================================
Core infrastructure package for the operations engine.
====================================================

This package provides centralized configuration, logging and the error
taxonomy shared by every other package.

Modules:
    config: Configuration management from environment variables
    logger: Centralized logging configuration and utilities
    exceptions: Typed faults with retriable/non-retriable classification

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "0.1.0"
__all__ = [
    'get_logger', 'setup_logging', 'config', 'Config',
    'TableOperationsError', 'ConnectivityError', 'TransientWarehouseError',
    'NotFoundError', 'NamespaceNotFoundError', 'TableNotFoundError',
    'SourceNotFoundError', 'AlreadyExistsError', 'TableAlreadyExistsError',
    'SchemaMismatchError', 'InvalidStreamDescriptorError',
    'InvalidIdentifierError', 'WarehouseExecutionError',
]

from core.config import Config, config
from core.exceptions import (
    AlreadyExistsError,
    ConnectivityError,
    InvalidIdentifierError,
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
from core.logger import get_logger, setup_logging
