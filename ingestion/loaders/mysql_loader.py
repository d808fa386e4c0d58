"""
Load flattened rows into MySQL (aiomysql driver)
"""

from typing import Any, Optional

from ingestion.loaders.base import SQLStorageAdapter, coerce_datetime
from ingestion.transformers.type_inferencer import ColumnType


class MySQLLoader(SQLStorageAdapter):
    """
    MySQL storage adapter.

    MySQL casts string literals on its own, so only timestamps need help:
    ISO strings with a ``T`` separator or an offset are parsed first.
    """

    provider = "MySQL"
    quote_char = "`"
    type_map = {
        ColumnType.TEXT: "TEXT",
        ColumnType.BOOLEAN: "TINYINT(1)",
        ColumnType.DECIMAL: "DECIMAL(20,6)",
        ColumnType.DATE: "DATE",
        ColumnType.TIMESTAMP: "DATETIME",
        ColumnType.VARCHAR: "VARCHAR(255)",
        ColumnType.JSON: "JSON",
    }
    id_column_type = "BIGINT AUTO_INCREMENT PRIMARY KEY"
    fetched_at_type = "DATETIME DEFAULT CURRENT_TIMESTAMP"
    schema_expression = "DATABASE()"

    def prepare_value(self, value: Any, data_type: Optional[str]) -> Any:
        if data_type in ("datetime", "timestamp"):
            return coerce_datetime(value)
        return super().prepare_value(value, data_type)
