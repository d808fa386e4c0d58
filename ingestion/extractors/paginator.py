"""
Pagination engine for the upstream API.

Walks an endpoint page by page until the response says it is done:

- a JSON array is a complete, unpaginated result (report endpoints)
- an object with ``data`` is a wrapped page carrying ``current_page`` and
  ``count`` (both may arrive as strings)
- any other object is a single record

Pages are requested strictly in ascending order. A non-JSON answer on any
page ends the whole fetch with no data, and a hard page ceiling protects
against endpoints that never signal completion.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from core.config import settings
from ingestion.extractors.api_client import APIClient
import logging

logger = logging.getLogger(__name__)

PageCallback = Callable[["Page"], Awaitable[None]]


class ResponseShape(str, Enum):
    DIRECT_ARRAY = "direct_array"
    WRAPPED = "wrapped"
    SINGLE_OBJECT = "single_object"


@dataclass
class Page:
    """One response worth of records plus its pagination metadata"""
    records: List[Dict[str, Any]]
    shape: ResponseShape
    page_number: int
    current_page: Optional[int] = None
    total_count: Optional[int] = None
    has_more: bool = False

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class FetchResult:
    """Outcome of walking one endpoint"""
    records: List[Dict[str, Any]]
    pages: int = 0
    aborted: bool = False


def classify_response(response: Any) -> Tuple[ResponseShape, Any]:
    """
    Decide the shape of a decoded response.

    Returns:
        (shape, payload) where payload is the part holding the records
    """
    if isinstance(response, list):
        return ResponseShape.DIRECT_ARRAY, response
    if isinstance(response, dict) and "data" in response:
        return ResponseShape.WRAPPED, response["data"]
    return ResponseShape.SINGLE_OBJECT, response


def to_int(value: Any, fallback: int) -> int:
    """Coerce pagination metadata that may be a string; non-positive or malformed values use the fallback"""
    if value is None or isinstance(value, bool):
        return fallback
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        try:
            parsed = int(float(value))
        except (TypeError, ValueError):
            return fallback
    return parsed if parsed > 0 else fallback


def _payload_records(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and payload:
        return [payload]
    return []


class Paginator:
    """
    Drive repeated requests against a paginated or single-shot endpoint.

    Streaming mode (``on_page`` given) hands every page to the callback as
    soon as it arrives and keeps nothing in memory. Batch mode accumulates
    all records and returns them.
    """

    def __init__(self, api_client: APIClient, max_pages: Optional[int] = None):
        self.api = api_client
        self.max_pages = max_pages or settings.MAX_PAGES

    def build_page(self, response: Any, page_number: int, page_size: int = 0) -> Page:
        """
        Classify a response and decide whether another request is needed.

        Args:
            response: Decoded JSON response
            page_number: 1-based counter used for the request
            page_size: Largest page observed so far in this fetch

        Returns:
            Page with ``has_more`` set
        """
        shape, payload = classify_response(response)
        records = _payload_records(payload)

        if shape is not ResponseShape.WRAPPED:
            return Page(records=records, shape=shape, page_number=page_number)

        current_page = to_int(response.get("current_page"), page_number)
        total_count = to_int(response.get("count"), 0)
        # The final page is usually short, so the first full page sets the size
        page_size = max(page_size, len(records))

        if total_count > 0 and page_size > 0:
            total_pages = math.ceil(total_count / page_size)
            has_more = current_page < total_pages
        else:
            # No usable count, keep going until an empty page
            has_more = len(records) > 0

        return Page(
            records=records,
            shape=shape,
            page_number=page_number,
            current_page=current_page,
            total_count=total_count,
            has_more=has_more,
        )

    async def fetch_all(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        on_page: Optional[PageCallback] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch every page of an endpoint.

        Args:
            path: Endpoint path
            params: Fixed and dynamic query parameters
            on_page: Async callback for streaming mode

        Returns:
            All records in batch mode; an empty list in streaming mode or when
            any page was not JSON

        Raises:
            NetworkError: Transport attempts exhausted (propagated as-is)
        """
        result = await self.fetch(path, params, on_page)
        return [] if result.aborted else result.records

    async def fetch(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        on_page: Optional[PageCallback] = None
    ) -> FetchResult:
        """
        Walk an endpoint and report how the walk ended.

        A non-JSON page stops the walk with ``aborted`` set and no records.
        Pages already handed to ``on_page`` before that point stay handed
        over; callers decide what an aborted fetch means for them.
        """
        params = dict(params or {})
        all_records: List[Dict[str, Any]] = []
        total_records = 0
        pages = 0
        page_number = 1
        page_size = 0

        logger.info(f"Starting paginated fetch for {path}")

        while True:
            if page_number > self.max_pages:
                logger.warning(f"Pagination limit of {self.max_pages} pages reached for {path}")
                break

            response = await self.api.get_with_retry(
                path, {**params, "page_number": str(page_number)}
            )

            if response is None:
                logger.warning(f"No JSON response for {path} on page {page_number}, skipping endpoint")
                return FetchResult(records=[], pages=pages, aborted=True)

            page = self.build_page(response, page_number, page_size)

            if not page.records:
                logger.debug(f"Empty page {page_number} for {path}, stopping")
                break

            pages += 1
            page_size = max(page_size, len(page.records))
            total_records += len(page.records)
            logger.info(f"Page {page_number}: fetched {len(page.records)} records from {path}")

            if on_page is not None:
                await on_page(page)
            else:
                all_records.extend(page.records)

            if not page.has_more:
                break

            page_number += 1

        logger.info(f"Fetched total {total_records} records from {path}")
        return FetchResult(records=all_records, pages=pages)
