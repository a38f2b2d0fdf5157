"""
==================================
Namespace lifecycle management.
==================================

A namespace is a PostgreSQL schema. Creation and removal are idempotent:
creating an existing namespace is a no-op and dropping an absent one
succeeds, so cleanup paths can always run.

Example:
    >>> from operations.namespace_manager import NamespaceManager
    >>>
    >>> namespaces = NamespaceManager(executor)
    >>> namespaces.create_namespace('raw')
    >>> namespaces.namespace_exists('raw')
    True
    >>> namespaces.drop_namespace('raw')
"""

import logging

from models.identifiers import Namespace, validate_identifier
from operations.executor import WarehouseExecutor
from sql.ddl import create_schema, drop_schema
from sql.query_builder import check_schema_exists_sql

logger = logging.getLogger(__name__)


class NamespaceManager:
    """Create, drop and look up namespaces."""

    def __init__(self, executor: WarehouseExecutor):
        self.executor = executor

    def namespace_exists(self, namespace: Namespace) -> bool:
        """
        Check if a namespace exists.

        Args:
            namespace: Namespace to check

        Returns:
            True if the schema exists, False otherwise
        """
        validate_identifier(namespace, 'namespace')
        row = self.executor.fetch_scalar(check_schema_exists_sql(), {'namespace': namespace})
        return row is not None

    def create_namespace(self, namespace: Namespace) -> None:
        """Create a namespace; existing namespaces are left untouched."""
        validate_identifier(namespace, 'namespace')
        self.executor.execute(create_schema(namespace, if_not_exists=True))
        logger.info(f"✅ Namespace '{namespace}' ready")

    def drop_namespace(self, namespace: Namespace) -> None:
        """
        Drop a namespace and every table in it.

        Dropping an absent namespace is not an error.
        """
        validate_identifier(namespace, 'namespace')
        self.executor.execute(drop_schema(namespace, if_exists=True, cascade=True))
        logger.info(f"🗑️ Dropped namespace '{namespace}'")
