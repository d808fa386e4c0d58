"""
Load flattened rows into PostgreSQL (asyncpg driver)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging

from ingestion.loaders.base import (
    SQLStorageAdapter,
    coerce_date,
    coerce_datetime,
    to_json_text,
)
from ingestion.transformers.type_inferencer import ColumnType

logger = logging.getLogger(__name__)

TRUE_STRINGS = {"true", "t", "1", "yes", "y"}


class PostgresLoader(SQLStorageAdapter):
    """
    PostgreSQL storage adapter.

    asyncpg binds parameters with the server-side column type, so values
    are converted to the Python type the column expects before insert
    (ISO strings to dates, numbers bound to text columns to strings, ...).
    """

    provider = "PostgreSQL"
    quote_char = '"'
    type_map = {
        ColumnType.TEXT: "TEXT",
        ColumnType.BOOLEAN: "BOOLEAN",
        ColumnType.DECIMAL: "NUMERIC(20,6)",
        ColumnType.DATE: "DATE",
        ColumnType.TIMESTAMP: "TIMESTAMP",
        ColumnType.VARCHAR: "VARCHAR(255)",
        ColumnType.JSON: "JSONB",
    }
    id_column_type = "BIGSERIAL PRIMARY KEY"
    fetched_at_type = "TIMESTAMP DEFAULT CURRENT_TIMESTAMP"
    schema_expression = "current_schema()"
    truncate_suffix = " RESTART IDENTITY"
    drop_suffix = " CASCADE"

    def prepare_value(self, value: Any, data_type: Optional[str]) -> Any:
        if value is None:
            return None
        if data_type is None:
            return super().prepare_value(value, data_type)

        if data_type in ("character varying", "text", "character"):
            if isinstance(value, str):
                return value
            if isinstance(value, (bool, dict, list)):
                return to_json_text(value)
            return str(value)

        if data_type in ("json", "jsonb"):
            return to_json_text(value)

        if data_type == "numeric":
            if isinstance(value, bool):
                return Decimal(int(value))
            try:
                return Decimal(str(value))
            except InvalidOperation:
                return value

        if data_type == "boolean":
            if isinstance(value, str):
                return value.strip().lower() in TRUE_STRINGS
            return bool(value)

        if data_type == "date":
            return coerce_date(value)

        if data_type.startswith("timestamp"):
            return coerce_datetime(value)

        return super().prepare_value(value, data_type)
