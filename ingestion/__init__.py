"""
Ingestion engine for paginated, schema-less JSON APIs.

This package contains every component between the upstream API and the
destination database:

Modules:
    runner: Streaming pipeline for one endpoint (ETLRunner)
    schema_sync: Additive schema synchronization
    orchestrator: Runs the endpoint catalogue, isolating failures
    endpoints: Static endpoint catalogue
    date_ranges: Date ranges for report endpoints
    scheduler: APScheduler cron integration

Subpackages:
    extractors: API client with retry, pagination engine
    transformers: Row flattening, nested extraction, type inference
    loaders: Storage adapters for PostgreSQL and MySQL

Architecture:
    For every endpoint invocation:

    1. Fetch - pages are requested in order until the response signals the end
    2. Normalize - records are flattened, nested arrays detached
    3. Synchronize - the destination table gains any missing columns
    4. Load - rows are inserted in batches; child tables after the parent

    Tables are synchronized and loaded independently; there is no
    cross-table transaction.

Usage:
    from ingestion.extractors.api_client import APIClient
    from ingestion.loaders import create_storage
    from ingestion.runner import ETLRunner
    from ingestion.endpoints import ENDPOINTS

Example:
    async with create_storage("postgres") as storage, APIClient() as api:
        runner = ETLRunner(storage, api)
        result = await runner.run(ENDPOINTS[0])

    print(f"Loaded {result['records_loaded']} rows")

Error Handling:
    Failures propagate as exceptions from core.exceptions carrying the
    destination table name; the orchestrator records them and moves on.
"""

__all__ = [
    "ETLRunner",
    "IngestionContext",
    "SchemaSynchronizer",
    "Paginator",
    "APIClient",
    "create_storage",
    "run_endpoints",
]
