"""
FastAPI dependencies
"""

from typing import AsyncIterator
from fastapi import Request
from ingestion.loaders.base import StorageAdapter


async def get_storage(request: Request) -> AsyncIterator[StorageAdapter]:
    """Storage adapter opened at application startup"""
    yield request.app.state.storage
