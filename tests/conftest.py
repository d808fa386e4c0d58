"""
Pytest configuration and fixtures
"""

import pytest
from typing import Any, Callable, Dict, List, Optional, Union
from ingestion.loaders.base import RESERVED_COLUMNS, StorageAdapter, column_keys
from ingestion.transformers.type_inferencer import infer_type, is_column_value


class FakeStorage(StorageAdapter):
    """In-memory storage port recording every call"""

    def __init__(self):
        self.tables: Dict[str, Dict[str, str]] = {}
        self.rows: Dict[str, List[Dict[str, Any]]] = {}
        self.batches: Dict[str, List[int]] = {}
        self.calls: List[tuple] = []
        self.connected = False
        self.ping_ok = True
        self.ensure_connected_calls = 0
        self.reconnects = 0
        self.fail_insert_for: Optional[str] = None

    async def connect(self):
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def ping(self) -> bool:
        return self.ping_ok

    async def ensure_connected(self):
        self.ensure_connected_calls += 1
        if not await self.ping():
            self.reconnects += 1
            await self.disconnect()
            await self.connect()

    async def table_exists(self, table_name: str) -> bool:
        return table_name in self.tables

    async def get_columns(self, table_name: str) -> List[Dict[str, str]]:
        return [{"name": n, "type": t} for n, t in self.tables.get(table_name, {}).items()]

    async def create_table(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        self.calls.append(("create_table", table_name, dict(sample_row)))
        created = column_keys(sample_row)
        columns = {"_id": "bigint"}
        columns.update({k: infer_type(sample_row[k]).value for k in created})
        columns["_fetched_at"] = "timestamp"
        self.tables[table_name] = columns
        self.rows.setdefault(table_name, [])
        return created

    async def add_missing_columns(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        self.calls.append(("add_missing_columns", table_name, dict(sample_row)))
        existing = {name.lower() for name in self.tables[table_name]}
        added = []
        for key, value in sample_row.items():
            if not is_column_value(value) or key.lower() in existing:
                continue
            self.tables[table_name][key] = infer_type(value).value
            existing.add(key.lower())
            added.append(key)
        return added

    async def insert_batch(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        if self.fail_insert_for == table_name:
            raise RuntimeError(f"insert into {table_name} refused")
        self.calls.append(("insert_batch", table_name, len(rows)))
        self.rows.setdefault(table_name, []).extend(dict(r) for r in rows)
        self.batches.setdefault(table_name, []).append(len(rows))
        return len(rows)

    async def list_tables(self, prefix: str = "") -> List[str]:
        return sorted(name for name in self.tables if name.startswith(prefix))

    async def truncate_table(self, table_name: str):
        self.rows[table_name] = []

    async def drop_table(self, table_name: str):
        self.tables.pop(table_name, None)
        self.rows.pop(table_name, None)

    def column_names(self, table_name: str) -> List[str]:
        return list(self.tables.get(table_name, {}))


class ScriptedAPI:
    """
    Transport double for the paginator.

    ``responses`` is either a list consumed one request at a time, or a
    callable receiving the 1-based page number.
    """

    def __init__(self, responses: Union[List[Any], Callable[[int], Any]]):
        self.responses = responses
        self.requests: List[tuple] = []

    async def get_with_retry(self, path: str, params: Optional[Dict[str, Any]] = None, max_attempts=None):
        params = dict(params or {})
        self.requests.append((path, params))
        page_number = int(params.get("page_number", 1))

        if callable(self.responses):
            response = self.responses(page_number)
        else:
            response = self.responses[len(self.requests) - 1] if len(self.requests) <= len(self.responses) else []

        if isinstance(response, Exception):
            raise response
        return response

    @property
    def page_numbers(self) -> List[str]:
        return [params["page_number"] for _, params in self.requests]


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def storage_factory():
    """Fresh FakeStorage instances for tests needing several"""
    return FakeStorage


@pytest.fixture
def scripted_api():
    return ScriptedAPI


@pytest.fixture
def warehouse_records():
    """Raw warehouse records with nested locations"""
    return [
        {
            "warehouse_code": "W1",
            "name": "Main",
            "address": {"city": "Pekanbaru", "geo": {"lat": 0.5, "lng": 101.4}},
            "active": True,
            "locations": [{"zone": "A"}, {"zone": "B"}],
        },
        {
            "warehouse_code": "W2",
            "name": "Overflow",
            "address": {"city": "Jambi", "geo": {"lat": -1.6, "lng": 103.6}},
            "active": False,
            "locations": [{"zone": "C", "bin": {"row": 1, "level": 2}}],
        },
        {
            "warehouse_code": "W3",
            "name": "Empty",
            "address": None,
            "active": True,
        },
    ]
