"""
Script to rebuild all tables for every office code

Usage:
    python scripts/fetch_all_offices.py [--no-cleanup]

Truncates every prefixed table first (unless --no-cleanup), then ingests
each endpoint for each office in OFFICE_CODES over a fixed span of months.
Item master data is shared between offices and is not fetched per office.
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
from ingestion.date_ranges import month_ranges
from ingestion.endpoints import ENDPOINTS, SHARED_TABLES
from ingestion.extractors.api_client import APIClient
from ingestion.loaders import create_storage
from ingestion.loaders.base import StorageAdapter
from ingestion.orchestrator import RunSummary, log_summary, run_endpoints
from ingestion.runner import ETLRunner

logger = logging.getLogger(__name__)

DATE_RANGE_START = (2024, 1)
DATE_RANGE_END = (2025, 12)


async def truncate_all_tables(storage: StorageAdapter, prefix: str):
    logger.info(f"Truncating all {prefix}* tables before fetch...")

    tables = await storage.list_tables(prefix)
    if not tables:
        logger.info(f"No {prefix}* tables found to truncate")
        return

    logger.info(f"Found {len(tables)} tables to truncate: {', '.join(tables)}")
    for table_name in tables:
        await storage.truncate_table(table_name)

    logger.info("All tables truncated successfully")


async def fetch_all_offices(skip_cleanup: bool = False) -> int:
    offices = settings.office_codes
    if not offices:
        logger.error("OFFICE_CODES is empty, nothing to fetch")
        return 1

    date_ranges = month_ranges(DATE_RANGE_START, DATE_RANGE_END)

    logger.info("=" * 70)
    logger.info("Starting API fetcher - ALL OFFICES")
    logger.info("=" * 70)
    logger.info(f"Database provider: {settings.DB_PROVIDER}")
    logger.info(f"Date range: {date_ranges[0].label} to {date_ranges[-1].label} ({len(date_ranges)} months)")
    logger.info(f"Office codes: {', '.join(offices)}")

    total = RunSummary()

    try:
        async with create_storage() as storage, APIClient() as api:
            if skip_cleanup:
                logger.info("Skipping cleanup (--no-cleanup flag)")
            else:
                await truncate_all_tables(storage, settings.TABLE_PREFIX)

            runner = ETLRunner(storage, api)
            for office in offices:
                logger.info("=" * 70)
                logger.info(f"Processing office: {office}")
                logger.info("=" * 70)

                summary = await run_endpoints(
                    runner,
                    ENDPOINTS,
                    date_ranges,
                    office_code=office,
                    skip_tables=SHARED_TABLES,
                )
                total.merge(summary)
    except (ETLException, SQLAlchemyError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    log_summary(total.finish(), "FETCH ALL OFFICES COMPLETED")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Ingest every endpoint for every office code")
    parser.add_argument("--no-cleanup", action="store_true", help="Keep existing rows")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(fetch_all_offices(skip_cleanup=args.no_cleanup)))


if __name__ == "__main__":
    main()
