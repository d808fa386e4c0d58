# ============================================================================
# File: ingestion/runner.py
# Description: Streaming ingestion of one endpoint into its destination tables
# ============================================================================
"""
ETL Runner - Orchestrates fetch, normalize, synchronize, load for one endpoint.

For every invocation (endpoint plus query parameters):

1. Pages are streamed from the paginator, one at a time
2. Nested arrays are detached from the raw records and buffered
3. Records are flattened, the table schema is synchronized and rows are
   inserted in fixed-size batches
4. Once the parent table is complete, buffered nested rows are loaded into
   their child tables the same way

All run-scoped state lives in an ``IngestionContext`` created per call, so
one runner can serve several endpoints.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
import logging
import time

from core.config import settings
from core.exceptions import ETLException, IngestionError
from ingestion.extractors.api_client import APIClient
from ingestion.extractors.paginator import Page, Paginator
from ingestion.loaders.base import StorageAdapter
from ingestion.schema_sync import SchemaSynchronizer
from ingestion.transformers.normalizer import (
    extract_nested,
    flatten_rows,
    merge_representative,
)
from schemas.endpoint import EndpointDescriptor, NestedTableDescriptor

logger = logging.getLogger(__name__)


@dataclass
class IngestionContext:
    """State of a single ``ETLRunner.run`` invocation"""
    endpoint: EndpointDescriptor
    params: Dict[str, Any]
    schema_initialized: bool = False
    known_columns: Set[str] = field(default_factory=set)
    pending_nested: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    pages: int = 0
    batches: int = 0
    records_loaded: int = 0
    columns_added: List[str] = field(default_factory=list)

    @property
    def table_name(self) -> str:
        return self.endpoint.table_name


class ETLRunner:
    """
    Ingestion pipeline for schema-less API collections.

    Responsibilities:
    - Drive the paginator in streaming mode
    - Synchronize destination schema additively as new keys appear
    - Insert rows in batches through the storage port
    - Load nested tables strictly after their parent table
    - Verify pool liveness during long fetches
    """

    def __init__(
        self,
        storage: StorageAdapter,
        api_client: APIClient,
        batch_size: Optional[int] = None,
        health_check_interval: Optional[int] = None,
        max_pages: Optional[int] = None
    ):
        self.storage = storage
        self.paginator = Paginator(api_client, max_pages=max_pages)
        self.schema = SchemaSynchronizer(storage)
        self.batch_size = batch_size or settings.ETL_BATCH_SIZE
        self.health_check_interval = health_check_interval or settings.HEALTH_CHECK_INTERVAL

    async def run(
        self,
        endpoint: EndpointDescriptor,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Ingest one endpoint invocation.

        Args:
            endpoint: Endpoint descriptor
            params: Dynamic query parameters merged over the endpoint's fixed ones

        Returns:
            Dictionary with run statistics:
            - status: "success", "no_data", or "aborted" when a page was not JSON
            - table_name, pages, batches, records_loaded
            - nested_loaded: rows loaded per child table
            - columns_added: columns created on the parent table

        Raises:
            ETLException: Any failure, with ``table_name`` in its context
        """
        ctx = IngestionContext(
            endpoint=endpoint,
            params={**endpoint.params, **(params or {})},
            pending_nested={nested.child_table: [] for nested in endpoint.nested_tables},
        )
        started = time.perf_counter()

        try:
            async def on_page(page: Page):
                await self._process_page(ctx, page)

            fetch = await self.paginator.fetch(endpoint.path, ctx.params, on_page=on_page)
            await self.storage.ensure_connected()

            if fetch.aborted:
                # The parent table is incomplete, so buffered child rows are dropped
                dropped = {table: len(rows) for table, rows in ctx.pending_nested.items() if rows}
                ctx.pending_nested.clear()
                logger.warning(
                    f"Fetch of {ctx.table_name} aborted on a non-JSON page after "
                    f"{ctx.pages} pages ({ctx.records_loaded} rows stored)"
                    + (f", nested rows discarded: {dropped}" if dropped else "")
                )
                return self._result(ctx, "aborted", {}, started)

            if ctx.records_loaded == 0:
                logger.info(f"No data to store for {ctx.table_name}")
                return self._result(ctx, "no_data", {}, started)

            nested_loaded = {}
            for nested in endpoint.nested_tables:
                rows = ctx.pending_nested.pop(nested.child_table, [])
                nested_loaded[nested.child_table] = await self._load_nested(nested, rows)

            result = self._result(ctx, "success", nested_loaded, started)
            logger.info(
                f"Completed storing data for {ctx.table_name}: "
                f"{ctx.records_loaded} rows in {ctx.pages} pages"
                + (f", nested: {nested_loaded}" if nested_loaded else "")
            )
            return result

        except ETLException as e:
            e.context.setdefault("table_name", ctx.table_name)
            e.context.setdefault("path", endpoint.path)
            logger.error(
                f"Failed to fetch/store {ctx.table_name}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception as e:
            logger.exception(f"Unexpected error while ingesting {ctx.table_name}")
            raise IngestionError(
                f"Ingestion of {ctx.table_name} failed",
                context={
                    "table_name": ctx.table_name,
                    "path": endpoint.path,
                    "params": ctx.params,
                    "pages": ctx.pages,
                    "records_loaded": ctx.records_loaded,
                },
                original_exception=e
            )

    async def _process_page(self, ctx: IngestionContext, page: Page):
        ctx.pages += 1

        # Nested rows come from the raw records, before the parent is flattened
        for nested in ctx.endpoint.nested_tables:
            ctx.pending_nested[nested.child_table].extend(
                extract_nested(page.records, nested.parent_key, nested.nested_key)
            )

        rows = flatten_rows(page.records)
        if rows:
            added = await self._sync_schema(ctx.table_name, rows, ctx.known_columns)
            ctx.columns_added.extend(added)
            ctx.schema_initialized = True

            loaded, batches = await self._insert_batches(ctx.table_name, rows)
            ctx.records_loaded += loaded
            ctx.batches += batches

        if ctx.pages % self.health_check_interval == 0:
            logger.debug(f"Checking database connection after {ctx.pages} pages")
            await self.storage.ensure_connected()

    async def _sync_schema(self, table_name: str, rows: List[Dict[str, Any]], known: Set[str]) -> List[str]:
        """
        Synchronize ``table_name`` against a page of flattened rows.

        The first non-empty page creates or extends the table from its first
        row. Keys that show up later, on any row of any page, are added
        through a merged representative row.
        """
        added: List[str] = []

        if not known:
            added.extend(await self.schema.ensure_table(table_name, rows[0]))
            known.update(key.lower() for key in rows[0])

        new_columns = merge_representative(rows, exclude=known)
        if new_columns:
            added.extend(await self.schema.ensure_table(table_name, new_columns))
            known.update(key.lower() for key in new_columns)

        return added

    async def _insert_batches(self, table_name: str, rows: List[Dict[str, Any]]):
        loaded = 0
        batches = 0
        for i in range(0, len(rows), self.batch_size):
            batch = rows[i:i + self.batch_size]
            loaded += await self.storage.insert_batch(table_name, batch)
            batches += 1
        return loaded, batches

    async def _load_nested(self, nested: NestedTableDescriptor, raw_rows: List[Dict[str, Any]]) -> int:
        rows = flatten_rows(raw_rows)
        if not rows:
            logger.info(f"No nested rows for {nested.child_table}")
            return 0

        await self._sync_schema(nested.child_table, rows, set())
        loaded, _ = await self._insert_batches(nested.child_table, rows)
        logger.info(f"Stored {loaded} nested rows in {nested.child_table}")
        return loaded

    @staticmethod
    def _result(
        ctx: IngestionContext,
        status: str,
        nested_loaded: Dict[str, int],
        started: float
    ) -> Dict[str, Any]:
        return {
            "status": status,
            "table_name": ctx.table_name,
            "path": ctx.endpoint.path,
            "pages": ctx.pages,
            "batches": ctx.batches,
            "records_loaded": ctx.records_loaded,
            "nested_loaded": nested_loaded,
            "columns_added": list(ctx.columns_added),
            "duration_seconds": round(time.perf_counter() - started, 3),
        }
