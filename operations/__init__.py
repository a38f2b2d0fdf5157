"""
=============================================
Warehouse table operations package.
=============================================

Lifecycle management, raw loading and promotion engines over a PostgreSQL
warehouse.

Modules:
    executor: WarehouseExecutor, SQL execution and error classification
    namespace_manager: Create/drop/look up namespaces
    table_manager: Create/drop/count/read tables, generation ids
    writer: Bulk insert of typed records
    overwrite_engine: Atomic table swap
    copy_engine: Append one table to another
    upsert_engine: Primary-key deduplicating merge with CDC deletes
    client: TableOperationsClient facade

Example:
    >>> from operations import TableOperationsClient
    >>>
    >>> with TableOperationsClient() as client:
    ...     client.ping()
"""

__version__ = "0.1.0"
__all__ = [
    'WarehouseExecutor',
    'NamespaceManager',
    'TableManager',
    'RecordWriter',
    'OverwriteEngine',
    'CopyEngine',
    'UpsertEngine',
    'TableOperationsClient',
]

from .client import TableOperationsClient
from .copy_engine import CopyEngine
from .executor import WarehouseExecutor
from .namespace_manager import NamespaceManager
from .overwrite_engine import OverwriteEngine
from .table_manager import TableManager
from .upsert_engine import UpsertEngine
from .writer import RecordWriter
