"""
=====================================================
Configuration management for the table-operations engine.
=====================================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for warehouse connection settings
- Type conversion for numeric settings
- Engine tuning (pool size, retry policy, insert batch size)

Example:
    >>> from core.config import config
    >>>
    >>> # Database connection
    >>> url = config.get_connection_url()
    >>>
    >>> # Access individual settings
    >>> print(f"Host: {config.db_host}, Port: {config.db_port}")
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import URL

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """Warehouse connection settings.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        database: Warehouse database name
    """

    host: str
    port: int
    user: str
    password: str
    database: str

    def get_connection_url(self) -> URL:
        """Get SQLAlchemy URL for the warehouse database.

        Returns:
            SQLAlchemy URL using the psycopg2 driver
        """
        return URL.create(
            drivername='postgresql+psycopg2',
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database
        )

    def get_connection_params(self) -> dict:
        """Get connection parameters as dictionary.

        Returns:
            Dictionary with keys: host, port, user, password, database
        """
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database
        }


@dataclass
class EngineConfig:
    """Table-operations engine tuning.

    Attributes:
        default_namespace: Namespace used when a table reference omits one
        pool_size: SQLAlchemy connection pool size
        max_overflow: Extra connections allowed beyond pool_size
        connect_retries: Attempts made when waiting for the warehouse
        retry_delay: Seconds between connection attempts
        insert_batch_size: Rows sent per executemany chunk by the writer
    """

    default_namespace: str
    pool_size: int
    max_overflow: int
    connect_retries: int
    retry_delay: float
    insert_batch_size: int


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with warehouse connection settings
        engine: EngineConfig instance with engine tuning

    Example:
        >>> config = Config()
        >>> url = config.get_connection_url()
        >>> print(f"Connecting to {config.db_host}:{config.db_port}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('WAREHOUSE_DB', 'warehouse')
        )

        self.engine = EngineConfig(
            default_namespace=os.getenv('WAREHOUSE_DEFAULT_NAMESPACE', 'public'),
            pool_size=int(os.getenv('WAREHOUSE_POOL_SIZE', '5')),
            max_overflow=int(os.getenv('WAREHOUSE_MAX_OVERFLOW', '10')),
            connect_retries=int(os.getenv('WAREHOUSE_CONNECT_RETRIES', '3')),
            retry_delay=float(os.getenv('WAREHOUSE_RETRY_DELAY', '1.0')),
            insert_batch_size=int(os.getenv('WAREHOUSE_INSERT_BATCH_SIZE', '1000'))
        )

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def warehouse_db_name(self) -> str:
        """Get warehouse database name."""
        return self.db.database

    @property
    def default_namespace(self) -> str:
        """Get the namespace used for unqualified table references."""
        return self.engine.default_namespace

    def get_connection_url(self) -> URL:
        """Get the SQLAlchemy URL of the warehouse database.

        Example:
            >>> engine = create_engine(config.get_connection_url())
        """
        return self.db.get_connection_url()

    def get_connection_params(self) -> dict:
        """Get warehouse connection parameters for direct driver connections."""
        return self.db.get_connection_params()


# Global configuration instance
config = Config()
