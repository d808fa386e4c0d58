"""
Map observed JSON values to destination column types
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
import re

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")

VARCHAR_LENGTH = 255


class ColumnType(str, Enum):
    """Dialect-independent column type; storage adapters render the SQL type"""
    TEXT = "text"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    DATE = "date"
    TIMESTAMP = "timestamp"
    VARCHAR = "varchar"
    JSON = "json"


def infer_type(value: Any) -> ColumnType:
    """
    Infer the column type for a single observed value.

    Total and deterministic: the same value always yields the same type,
    which is what keeps additive schema evolution stable across runs.
    All numbers map to one fixed-precision decimal type so a column first
    seen holding ``1`` still accepts ``1.5`` later on.

    Args:
        value: Any scalar or container decoded from JSON

    Returns:
        ColumnType for the value
    """
    if value is None:
        return ColumnType.TEXT
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return ColumnType.DECIMAL
    if isinstance(value, datetime):
        return ColumnType.TIMESTAMP
    if isinstance(value, date):
        return ColumnType.DATE
    if isinstance(value, str):
        if DATE_PATTERN.match(value):
            return ColumnType.DATE
        if DATETIME_PATTERN.match(value):
            return ColumnType.TIMESTAMP
        if len(value) > VARCHAR_LENGTH:
            return ColumnType.TEXT
        return ColumnType.VARCHAR
    if isinstance(value, (dict, list)):
        return ColumnType.JSON
    return ColumnType.TEXT


def is_column_value(value: Any) -> bool:
    """Objects and arrays never become columns of their own"""
    return not isinstance(value, (dict, list))
