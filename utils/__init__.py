"""
==========================
Utility Functions Package.
==========================

Reusable connectivity and retry helpers shared by the operations package
and the CLI.

Modules:
    database_utils: PostgreSQL connectivity, health checks and backoff
"""

__version__ = "0.1.0"
__all__ = [
    'wait_for_database',
    'check_database_available',
    'create_sqlalchemy_engine',
    'retry_with_backoff'
]

from .database_utils import (
    check_database_available,
    create_sqlalchemy_engine,
    retry_with_backoff,
    wait_for_database,
)
