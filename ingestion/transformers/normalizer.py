"""
Transform raw JSON records into flat relational rows
"""

from typing import Any, Dict, Iterable, List
import logging

logger = logging.getLogger(__name__)

SEPARATOR = "_"
PARENT_COLUMN_PREFIX = "_parent_"


def flatten_row(record: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten a nested record into a single level of scalar columns.

    Nested objects are joined to their parent key with ``_``; arrays are
    dropped (they only reach the destination through nested tables).

    Key collisions are resolved by insertion order: ``{"a_b": 1, "a": {"b": 2}}``
    flattens to ``{"a_b": 2}``. The later field silently wins.

    Example:
        >>> flatten_row({"id": 1, "address": {"city": "X", "geo": {"lat": 0}}})
        {'id': 1, 'address_city': 'X', 'address_geo_lat': 0}
    """
    result: Dict[str, Any] = {}

    for key, value in record.items():
        new_key = f"{prefix}{SEPARATOR}{key}" if prefix else key

        if isinstance(value, dict):
            result.update(flatten_row(value, new_key))
        elif isinstance(value, list):
            continue
        else:
            result[new_key] = value

    return result


def flatten_rows(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten every record of a page, skipping entries that are not objects"""
    rows = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.debug(f"Skipping non-object record at index {index}: {type(record).__name__}")
            continue
        rows.append(flatten_row(record))
    return rows


def extract_nested(
    rows: Iterable[Dict[str, Any]],
    parent_key: str,
    nested_key: str
) -> List[Dict[str, Any]]:
    """
    Detach array elements of ``nested_key`` into child rows.

    Runs on raw records, before flattening. Every element becomes one row
    with its own fields plus ``_parent_<parent_key>`` set to the parent's
    value. Rows without the key, or where it is not a list, contribute
    nothing. Scalar elements are stored under a ``value`` column.

    Args:
        rows: Raw parent records
        parent_key: Field of the parent used as the linking value
        nested_key: Array field to extract

    Returns:
        Unflattened nested rows
    """
    parent_column = f"{PARENT_COLUMN_PREFIX}{parent_key}"
    nested_rows = []

    for row in rows:
        if not isinstance(row, dict):
            continue
        items = row.get(nested_key)
        if not isinstance(items, list):
            continue

        parent_value = row.get(parent_key)
        for item in items:
            nested = dict(item) if isinstance(item, dict) else {"value": item}
            nested[parent_column] = parent_value
            nested_rows.append(nested)

    return nested_rows


def merge_representative(rows: Iterable[Dict[str, Any]], exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Build a representative row holding the first non-null value of every key.

    Keys in ``exclude`` are left out, so the result only describes columns
    that still need to be synchronized. Key order follows first appearance.
    """
    excluded = {key.lower() for key in exclude}
    merged: Dict[str, Any] = {}

    for row in rows:
        for key, value in row.items():
            if key.lower() in excluded:
                continue
            if key not in merged or (merged[key] is None and value is not None):
                merged[key] = value

    return merged
