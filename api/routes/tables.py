"""
Destination tables created by the ingestion engine
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from api.dependencies import get_storage
from core.config import settings
from ingestion.loaders.base import StorageAdapter
from schemas.api import ColumnInfo, TableInfo, TablesResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Tables"])


def _table_info(table_name: str, columns) -> TableInfo:
    return TableInfo(
        table_name=table_name,
        columns=[ColumnInfo(**c) for c in columns],
        column_count=len(columns),
    )


@router.get("/tables", response_model=TablesResponse)
async def list_tables(
    prefix: Optional[str] = Query(None, description="Table name prefix (default: TABLE_PREFIX)"),
    storage: StorageAdapter = Depends(get_storage)
):
    """List ingested tables together with their current columns"""
    prefix = settings.TABLE_PREFIX if prefix is None else prefix
    names = await storage.list_tables(prefix)

    tables = [_table_info(name, await storage.get_columns(name)) for name in names]
    return TablesResponse(prefix=prefix, total=len(tables), tables=tables)


@router.get("/tables/{table_name}", response_model=TableInfo)
async def get_table(table_name: str, storage: StorageAdapter = Depends(get_storage)):
    """Columns of a single destination table"""
    if not await storage.table_exists(table_name):
        raise HTTPException(status_code=404, detail=f"Table {table_name} not found")
    return _table_info(table_name, await storage.get_columns(table_name))
