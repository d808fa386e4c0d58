"""
Core utilities and configuration for the ingestion engine.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Async engine construction for the destination database
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_engine
    from core.exceptions import IngestionError, NetworkError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Build an engine for the configured provider
    engine = create_engine()
"""

__all__ = [
    "settings",
    "create_engine",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ExtractionError",
    "APIExtractionError",
    "NetworkError",
    "SchemaSyncError",
    "LoadError",
    "DatabaseError",
    "IngestionError",
    "ConfigurationError",
    "RetryableError",
    "NonRetryableError",
]
