"""
Pydantic schemas for the operations API responses
"""

from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow)
    database_connected: bool
    database_provider: str
    configured_endpoints: int = 0
    scheduler_running: bool = False

    @model_validator(mode="after")
    def determine_status(self):
        """The destination database is the only hard dependency"""
        self.status = "healthy" if self.database_connected else "unhealthy"
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "database_provider": "postgres",
                "configured_endpoints": 15,
                "scheduler_running": True,
            }
        }


# ============================================================================
# Destination Schema Schemas
# ============================================================================

class ColumnInfo(BaseModel):
    """A column as reported by the destination information_schema"""
    name: str
    type: str


class TableInfo(BaseModel):
    """A destination table created by the ingestion engine"""
    table_name: str
    columns: List[ColumnInfo] = Field(default_factory=list)
    column_count: int = 0


class TablesResponse(BaseModel):
    """List of ingested tables"""
    prefix: str
    total: int
    tables: List[TableInfo]


# ============================================================================
# Endpoint Catalogue Schemas
# ============================================================================

class NestedTableInfo(BaseModel):
    nested_key: str
    child_table: str
    parent_key: str


class EndpointInfo(BaseModel):
    """Configured upstream endpoint"""
    path: str
    table_name: str
    params: Dict[str, Any] = Field(default_factory=dict)
    nested_tables: List[NestedTableInfo] = Field(default_factory=list)
    requires_date: bool = False


class EndpointsResponse(BaseModel):
    total: int
    endpoints: List[EndpointInfo]
    date_range_mode: Optional[str] = None
