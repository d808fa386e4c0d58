"""
Script to ingest all configured endpoints once

Usage:
    python scripts/run_etl.py [table_filter]

Only endpoints whose table name contains ``table_filter`` are processed
when it is given.
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.date_ranges import calculate_date_ranges
from ingestion.endpoints import ENDPOINTS, filter_endpoints
from ingestion.extractors.api_client import APIClient
from ingestion.loaders import create_storage
from ingestion.orchestrator import log_summary, run_endpoints
from ingestion.runner import ETLRunner

logger = logging.getLogger(__name__)


async def run_etl(table_filter=None) -> int:
    """Run ingestion for all configured endpoints"""

    date_ranges = calculate_date_ranges()
    endpoints = filter_endpoints(ENDPOINTS, table_filter)

    logger.info("Starting API fetcher")
    logger.info(f"API URL: {settings.API_URL}")
    logger.info(f"Database provider: {settings.DB_PROVIDER}")
    if settings.OFFICE_CODE:
        logger.info(f"Office Code: {settings.OFFICE_CODE}")
    logger.info(f"Date Range Mode: {settings.DATE_RANGE_MODE}")
    logger.info(f"Total date ranges to process: {len(date_ranges)}")
    logger.info(f"Fetching {len(endpoints)} endpoints")

    if not endpoints:
        logger.warning("No endpoints match the filter. Skipping.")
        return 0

    try:
        async with create_storage() as storage, APIClient() as api:
            runner = ETLRunner(storage, api)
            summary = await run_endpoints(
                runner,
                endpoints,
                date_ranges,
                office_code=settings.OFFICE_CODE,
            )
    except ETLException as e:
        logger.error(f"Fatal error: {e}")
        return 1

    log_summary(summary, "All endpoints processed")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Ingest upstream API endpoints into the database")
    parser.add_argument("table_filter", nargs="?", help="Only process tables containing this text")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run_etl(args.table_filter)))


if __name__ == "__main__":
    main()
