"""
Storage port for the destination database.

``StorageAdapter`` is the contract the ingestion pipeline talks to; it never
branches on the database family. ``SQLStorageAdapter`` implements the
contract once on top of SQLAlchemy's async engine, and each dialect subclass
only supplies what actually differs: identifier quoting, the column type
map, engine-owned column DDL and value coercion.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import json
import logging

from sqlalchemy import column, insert, table, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import settings
from core.database import create_engine
from core.exceptions import DatabaseError
from ingestion.transformers.type_inferencer import (
    ColumnType,
    DATETIME_PATTERN,
    infer_type,
    is_column_value,
)

logger = logging.getLogger(__name__)

ID_COLUMN = "_id"
FETCHED_AT_COLUMN = "_fetched_at"
RESERVED_COLUMNS = frozenset({ID_COLUMN, FETCHED_AT_COLUMN})


class StorageAdapter(ABC):
    """
    Capability interface of a destination database.

    Used as an async context manager, the connection pool is acquired on
    entry and released on every exit path.
    """

    async def __aenter__(self) -> "StorageAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.disconnect()

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def disconnect(self):
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    @abstractmethod
    async def ensure_connected(self):
        """Probe the pool and reconnect (close, then reopen) if the probe fails"""
        pass

    @abstractmethod
    async def table_exists(self, table_name: str) -> bool:
        pass

    @abstractmethod
    async def get_columns(self, table_name: str) -> List[Dict[str, str]]:
        """Existing columns as ``{"name", "type"}``; empty list if the query fails"""
        pass

    @abstractmethod
    async def create_table(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        pass

    @abstractmethod
    async def add_missing_columns(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        pass

    @abstractmethod
    async def insert_batch(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        pass

    @abstractmethod
    async def list_tables(self, prefix: str = "") -> List[str]:
        pass

    @abstractmethod
    async def truncate_table(self, table_name: str):
        pass

    @abstractmethod
    async def drop_table(self, table_name: str):
        pass


def column_keys(row: Dict[str, Any]) -> List[str]:
    """
    Keys of ``row`` that become columns, in row order.

    Object and array values and engine-owned names are skipped. Column names
    are case-insensitive in both databases, so only the first spelling of a
    name is kept.
    """
    keys: List[str] = []
    seen = set()
    for key, value in row.items():
        if not is_column_value(value) or key in RESERVED_COLUMNS:
            continue
        if key.lower() in seen:
            continue
        seen.add(key.lower())
        keys.append(key)
    return keys


def parse_datetime(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp string into a naive datetime (offset dropped)"""
    if not DATETIME_PATTERN.match(value):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def to_json_text(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


class SQLStorageAdapter(StorageAdapter):
    """
    Storage port on SQLAlchemy async.

    Subclasses define:
        provider: Name used in logs
        quote_char: Identifier quote character
        type_map: ColumnType -> SQL type
        id_column_type / fetched_at_type: Engine-owned column DDL
        schema_expression: SQL expression of the current schema
        truncate_suffix / drop_suffix: Dialect options for admin statements
    """

    provider = "sql"
    quote_char = '"'
    type_map: Dict[ColumnType, str] = {}
    id_column_type = "BIGINT PRIMARY KEY"
    fetched_at_type = "TIMESTAMP DEFAULT CURRENT_TIMESTAMP"
    schema_expression = "current_schema()"
    truncate_suffix = ""
    drop_suffix = ""

    def __init__(self, database_url: Optional[str] = None, **engine_options):
        self.database_url = database_url or settings.database_url
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        # Column types per table, refreshed whenever this adapter alters a table
        self._column_types: Dict[str, Dict[str, str]] = {}

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    async def connect(self):
        self.engine = create_engine(self.database_url, **self.engine_options)
        logger.info(f"{self.provider} connection pool created")

    async def disconnect(self):
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info(f"{self.provider} connection pool closed")

    async def ping(self) -> bool:
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"{self.provider} connection check failed: {e}")
            return False

    async def ensure_connected(self):
        if self.engine is None:
            await self.connect()
            return

        if await self.ping():
            return

        logger.info(f"Reconnecting to {self.provider}...")
        try:
            await self.engine.dispose()
        except (SQLAlchemyError, OSError) as e:
            logger.debug(f"Ignoring error while disposing stale pool: {e}")
        self.engine = None
        await self.connect()

    # ------------------------------------------------------------------
    # Dialect helpers
    # ------------------------------------------------------------------

    def quote(self, identifier: str) -> str:
        q = self.quote_char
        return f"{q}{identifier.replace(q, q * 2)}{q}"

    def column_type(self, value: Any) -> str:
        return self.type_map[infer_type(value)]

    def prepare_value(self, value: Any, data_type: Optional[str]) -> Any:
        """Convert a flattened value into something the driver accepts for the column"""
        if isinstance(value, (dict, list)):
            return to_json_text(value)
        return value

    def build_create_table_sql(self, table_name: str, sample_row: Dict[str, Any]) -> str:
        columns = [f"{self.quote(ID_COLUMN)} {self.id_column_type}"]
        columns.extend(
            f"{self.quote(key)} {self.column_type(sample_row[key])}"
            for key in column_keys(sample_row)
        )
        columns.append(f"{self.quote(FETCHED_AT_COLUMN)} {self.fetched_at_type}")

        return f"CREATE TABLE IF NOT EXISTS {self.quote(table_name)} ({', '.join(columns)})"

    def build_add_column_sql(self, table_name: str, key: str, value: Any) -> str:
        return (
            f"ALTER TABLE {self.quote(table_name)} "
            f"ADD COLUMN {self.quote(key)} {self.column_type(value)}"
        )

    # ------------------------------------------------------------------
    # Schema inspection and evolution
    # ------------------------------------------------------------------

    async def table_exists(self, table_name: str) -> bool:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT table_name FROM information_schema.tables "
                    f"WHERE table_schema = {self.schema_expression} AND table_name = :name"
                ),
                {"name": table_name}
            )
            return result.first() is not None

    async def get_columns(self, table_name: str) -> List[Dict[str, str]]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(
                    text(
                        "SELECT column_name AS name, data_type AS type "
                        "FROM information_schema.columns "
                        f"WHERE table_schema = {self.schema_expression} AND table_name = :name "
                        "ORDER BY ordinal_position"
                    ),
                    {"name": table_name}
                )
                columns = [{"name": row.name, "type": row.type} for row in result]
        except SQLAlchemyError as e:
            logger.warning(f"Could not read columns of {table_name}: {e}")
            return []

        self._column_types[table_name] = {c["name"].lower(): c["type"].lower() for c in columns}
        return columns

    async def create_table(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        sql = self.build_create_table_sql(table_name, sample_row)
        logger.debug(f"Creating table: {sql}")

        async with self.engine.begin() as conn:
            await conn.exec_driver_sql(sql)

        self._column_types.pop(table_name, None)
        logger.info(f"Table {table_name} created")
        return column_keys(sample_row)

    async def add_missing_columns(self, table_name: str, sample_row: Dict[str, Any]) -> List[str]:
        existing = {c["name"].lower() for c in await self.get_columns(table_name)}
        added = []

        for key, value in sample_row.items():
            if not is_column_value(value) or key in RESERVED_COLUMNS:
                continue
            if key.lower() in existing:
                continue

            sql = self.build_add_column_sql(table_name, key, value)
            logger.info(f"Adding column {key} to {table_name}")
            async with self.engine.begin() as conn:
                await conn.exec_driver_sql(sql)

            existing.add(key.lower())
            added.append(key)

        if added:
            self._column_types.pop(table_name, None)
        return added

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------

    async def _types_for(self, table_name: str) -> Dict[str, str]:
        if table_name not in self._column_types:
            await self.get_columns(table_name)
        return self._column_types.get(table_name, {})

    async def insert_batch(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        """
        Insert rows with a single executemany.

        The column list is the union of keys in the batch, compared without
        regard to case; rows missing a key insert NULL. Values that are
        objects or arrays are stored as JSON text.
        """
        if not rows:
            return 0

        by_name = [{key.lower(): row[key] for key in column_keys(row)} for row in rows]
        columns: List[str] = []
        seen = set()
        for row in rows:
            for key in column_keys(row):
                if key.lower() not in seen:
                    seen.add(key.lower())
                    columns.append(key)

        if not columns:
            logger.debug(f"No insertable columns in batch for {table_name}")
            return 0

        types = await self._types_for(table_name)
        params = [
            {c: self.prepare_value(values.get(c.lower()), types.get(c.lower())) for c in columns}
            for values in by_name
        ]
        stmt = insert(table(table_name, *[column(c) for c in columns]))

        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt, params)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Insert into {table_name} failed",
                context={
                    "operation": "INSERT",
                    "table_name": table_name,
                    "batch_size": len(rows),
                },
                original_exception=e
            )

        logger.info(f"Inserted {len(rows)} rows into {table_name}")
        return len(rows)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def list_tables(self, prefix: str = "") -> List[str]:
        pattern = prefix.replace("!", "!!").replace("%", "!%").replace("_", "!_") + "%"
        async with self.engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT table_name AS name FROM information_schema.tables "
                    f"WHERE table_schema = {self.schema_expression} "
                    "AND table_name LIKE :pattern ESCAPE '!' "
                    "ORDER BY table_name"
                ),
                {"pattern": pattern}
            )
            return [row.name for row in result]

    async def truncate_table(self, table_name: str):
        sql = f"TRUNCATE TABLE {self.quote(table_name)}{self.truncate_suffix}"
        await self._execute_admin(sql, "TRUNCATE", table_name)
        logger.info(f"Truncated table {table_name}")

    async def drop_table(self, table_name: str):
        sql = f"DROP TABLE IF EXISTS {self.quote(table_name)}{self.drop_suffix}"
        await self._execute_admin(sql, "DROP", table_name)
        self._column_types.pop(table_name, None)
        logger.info(f"Dropped table {table_name}")

    async def _execute_admin(self, sql: str, operation: str, table_name: str):
        try:
            async with self.engine.begin() as conn:
                await conn.exec_driver_sql(sql)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"{operation} {table_name} failed",
                context={"operation": operation, "table_name": table_name},
                original_exception=e
            )


def coerce_date(value: Any) -> Any:
    """Turn ISO date(-time) strings into ``date`` for DATE columns"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return value
    return value


def coerce_datetime(value: Any) -> Any:
    """Turn ISO timestamp strings into naive ``datetime`` for timestamp columns"""
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed
        try:
            return datetime.combine(date.fromisoformat(value), datetime.min.time())
        except ValueError:
            return value
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return value
