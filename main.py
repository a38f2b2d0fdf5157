"""
=========================================================
Command-line entry point for warehouse table operations.
=========================================================

Thin CLI over TableOperationsClient for operators: connectivity checks,
namespace housekeeping and quick table inspection. Replication jobs use the
client directly; nothing here adds behaviour of its own.

Usage:
    # Check the warehouse answers
    python main.py --ping

    # Namespace housekeeping
    python main.py --create-namespace raw
    python main.py --drop-namespace raw_scratch

    # Inspect a table
    python main.py --count raw.users
    python main.py --generation-id raw.users

    # Remove a leftover staging table
    python main.py --drop-table raw.users_tmp

Exit Codes:
    0: Success
    1: Error
    130: User interrupt (Ctrl+C)
"""

import argparse
import sys

from core.config import config
from core.exceptions import TableOperationsError
from core.logger import get_logger, setup_logging
from models.identifiers import TableName
from operations.client import TableOperationsClient

logger = get_logger(__name__)


def _table(reference: str) -> TableName:
    return TableName.parse(reference, default_namespace=config.default_namespace)


def run(args: argparse.Namespace, client: TableOperationsClient) -> int:
    """
    Execute the operation selected on the command line.

    Args:
        args: Parsed arguments
        client: Client to run the operation with

    Returns:
        Process exit code
    """
    if args.ping:
        client.wait_until_available()
        logger.info(f"✅ Warehouse {config.db_host}:{config.db_port}/{config.warehouse_db_name} is reachable")
        return 0

    if args.create_namespace:
        client.create_namespace(args.create_namespace)
        return 0

    if args.drop_namespace:
        client.drop_namespace(args.drop_namespace)
        return 0

    if args.count:
        table = _table(args.count)
        count = client.count_table(table)
        if count is None:
            logger.error(f"❌ Table {table} does not exist")
            return 1
        print(count)
        return 0

    if args.generation_id:
        table = _table(args.generation_id)
        if not client.table_exists(table):
            logger.error(f"❌ Table {table} does not exist")
            return 1
        generation_id = client.get_generation_id(table)
        print(generation_id if generation_id is not None else '')
        return 0

    if args.drop_table:
        client.drop_table(_table(args.drop_table))
        return 0

    logger.error("❌ No operation selected (see --help)")
    return 1


def main(argv=None) -> int:
    """
    Command-line interface for warehouse table operations.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(
        description="Warehouse Table Operations - Operator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Wait for the warehouse and check it answers
  python main.py --ping

  # Row count of a table (namespace defaults to WAREHOUSE_DEFAULT_NAMESPACE)
  python main.py --count raw.users

  # Drop a namespace and everything in it (DANGEROUS!)
  python main.py --drop-namespace raw_scratch
        """
    )

    operations = parser.add_mutually_exclusive_group()
    operations.add_argument(
        '--ping',
        action='store_true',
        help='Check the warehouse is reachable (with retries)'
    )
    operations.add_argument(
        '--create-namespace',
        metavar='NS',
        help='Create a namespace if it does not exist'
    )
    operations.add_argument(
        '--drop-namespace',
        metavar='NS',
        help='Drop a namespace and all its tables (DANGEROUS!)'
    )
    operations.add_argument(
        '--count',
        metavar='NS.TABLE',
        help='Print the row count of a table'
    )
    operations.add_argument(
        '--generation-id',
        metavar='NS.TABLE',
        help='Print the current generation id of a table (empty if none)'
    )
    operations.add_argument(
        '--drop-table',
        metavar='NS.TABLE',
        help='Drop a table if it exists'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging (DEBUG level)'
    )

    args = parser.parse_args(argv)

    setup_logging(log_level='DEBUG' if args.verbose else 'INFO')

    try:
        with TableOperationsClient() as client:
            return run(args, client)
    except TableOperationsError as e:
        logger.error(f"❌ {type(e).__name__}: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.warning("\n⚠️ Operation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
