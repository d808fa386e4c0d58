"""
Destination database adapters.

One storage adapter per database family, all conforming to
``ingestion.loaders.base.StorageAdapter``.
"""

from typing import Optional

from core.config import settings
from core.exceptions import ConfigurationError
from ingestion.loaders.base import StorageAdapter
from ingestion.loaders.mysql_loader import MySQLLoader
from ingestion.loaders.postgres_loader import PostgresLoader


def create_storage(provider: Optional[str] = None, database_url: Optional[str] = None) -> StorageAdapter:
    """
    Build the storage adapter for a provider name.

    Args:
        provider: ``mysql``, ``postgres`` or ``postgresql`` (default: settings.DB_PROVIDER)
        database_url: Explicit SQLAlchemy URL (default: derived from settings)

    Raises:
        ConfigurationError: Unknown provider
    """
    name = (provider or settings.DB_PROVIDER).lower()

    if name == "mysql":
        return MySQLLoader(database_url or settings.database_url_for(name))
    if name in ("postgres", "postgresql"):
        return PostgresLoader(database_url or settings.database_url_for(name))

    raise ConfigurationError(
        f"Unknown database provider: {name}",
        context={"provider": name}
    )


__all__ = ["StorageAdapter", "MySQLLoader", "PostgresLoader", "create_storage"]
