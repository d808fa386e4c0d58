"""
Database engine construction with SQLAlchemy async
"""

from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_engine(database_url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the destination database.

    Args:
        database_url: SQLAlchemy URL; defaults to the configured provider URL
        **kwargs: Extra engine options (pool sizing etc.)

    Returns:
        AsyncEngine with pre-ping enabled
    """
    url = database_url or settings.database_url
    options = {
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 0,
        "future": True,
    }
    options.update(kwargs)

    engine = create_async_engine(url, **options)
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine
