"""
Script to truncate or drop every ingested table

Usage:
    python scripts/cleanup.py [truncate|drop]
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.loaders import create_storage
from ingestion.loaders.base import StorageAdapter

logger = logging.getLogger(__name__)


async def cleanup_tables(storage: StorageAdapter, mode: str, prefix: str) -> list:
    """Truncate or drop every table starting with ``prefix``"""
    tables = await storage.list_tables(prefix)
    if not tables:
        logger.info(f"No {prefix}* tables found")
        return []

    logger.info(f"Found {len(tables)} tables: {', '.join(tables)}")
    for table_name in tables:
        if mode == "drop":
            await storage.drop_table(table_name)
        else:
            await storage.truncate_table(table_name)

    logger.info(f"Cleanup completed: {len(tables)} tables {'dropped' if mode == 'drop' else 'truncated'}")
    return tables


async def cleanup(mode: str) -> int:
    logger.info("Data Cleanup")
    logger.info(f"Mode: {mode}")
    logger.info(f"Database: {settings.DB_NAME} ({settings.DB_PROVIDER})")

    try:
        async with create_storage() as storage:
            await cleanup_tables(storage, mode, settings.TABLE_PREFIX)
    except (ETLException, SQLAlchemyError) as e:
        logger.error(f"Cleanup failed: {e}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Truncate or drop ingested tables")
    parser.add_argument("mode", nargs="?", default="truncate", choices=["truncate", "drop"])
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(cleanup(args.mode)))


if __name__ == "__main__":
    main()
