"""
Run the endpoint catalogue through the ingestion runner.

Failures of one endpoint (or one date range of a report endpoint) are
recorded and the run continues with the next one.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging
import time

from ingestion.date_ranges import DateRange
from ingestion.runner import ETLRunner
from schemas.endpoint import EndpointDescriptor

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    success: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    records_loaded: int = 0
    started_at: float = field(default_factory=time.perf_counter)
    duration_seconds: float = 0.0

    def merge(self, other: "RunSummary"):
        self.success.extend(other.success)
        self.failed.extend(other.failed)
        self.skipped.extend(other.skipped)
        self.records_loaded += other.records_loaded

    def finish(self) -> "RunSummary":
        self.duration_seconds = round(time.perf_counter() - self.started_at, 2)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": len(self.success),
            "failed": self.failed,
            "skipped": self.skipped,
            "records_loaded": self.records_loaded,
            "duration_seconds": self.duration_seconds,
        }


def build_params(
    endpoint: EndpointDescriptor,
    office_code: Optional[str] = None,
    date_range: Optional[DateRange] = None
) -> Dict[str, Any]:
    """Query parameters for one invocation of ``endpoint``"""
    params = dict(endpoint.params)
    if office_code:
        params["office_code"] = office_code
    if date_range is not None:
        params["date_from"] = date_range.date_from
        params["date_to"] = date_range.date_to
    return params


async def run_endpoints(
    runner: ETLRunner,
    endpoints: Iterable[EndpointDescriptor],
    date_ranges: Sequence[DateRange],
    office_code: Optional[str] = None,
    skip_tables: Iterable[str] = ()
) -> RunSummary:
    """
    Ingest every endpoint, once per date range for report endpoints.

    Args:
        runner: Configured ETLRunner
        endpoints: Endpoints to process, in order
        date_ranges: Ranges applied to ``requires_date`` endpoints
        office_code: Optional office_code query parameter
        skip_tables: Table names to leave out

    Returns:
        RunSummary of successes, failures and skips
    """
    summary = RunSummary()
    skip = set(skip_tables)
    tag = f"[{office_code}] " if office_code else ""

    for endpoint in endpoints:
        if endpoint.table_name in skip:
            logger.info(f"{tag}Skipping {endpoint.table_name} (shared data)")
            continue

        if not endpoint.requires_date:
            label = endpoint.table_name
            logger.info(f"{tag}Processing: {endpoint.path} -> {endpoint.table_name}")
            await _run_one(runner, endpoint, build_params(endpoint, office_code), label, summary, office_code)
            continue

        for date_range in date_ranges:
            label = f"{endpoint.table_name}[{date_range.label}]"
            if not date_range.is_complete:
                logger.warning(f"{tag}Skipping {endpoint.table_name}: DATE_FROM and DATE_TO required")
                summary.skipped.append(label)
                continue

            logger.info(
                f"{tag}Processing: {endpoint.path} -> {endpoint.table_name} [{date_range.label}] "
                f"({date_range.date_from} to {date_range.date_to})"
            )
            params = build_params(endpoint, office_code, date_range)
            await _run_one(runner, endpoint, params, label, summary, office_code)

    return summary.finish()


async def _run_one(
    runner: ETLRunner,
    endpoint: EndpointDescriptor,
    params: Dict[str, Any],
    label: str,
    summary: RunSummary,
    office_code: Optional[str]
):
    name = f"{office_code}:{label}" if office_code else label
    try:
        result = await runner.run(endpoint, params)
        summary.records_loaded += result.get("records_loaded", 0)
        if result.get("status") == "aborted":
            summary.skipped.append(name)
        else:
            summary.success.append(name)
    except Exception as e:
        # The runner has already logged the failure with its context
        summary.failed.append({"table": endpoint.table_name, "label": name, "error": str(e)})


def log_summary(summary: RunSummary, title: str = "Run completed"):
    logger.info("=" * 60)
    logger.info(f"{title} in {summary.duration_seconds / 60:.2f} minutes")
    logger.info(f"Success: {len(summary.success)} operations")
    logger.info(f"Failed: {len(summary.failed)} operations")
    logger.info(f"Skipped: {len(summary.skipped)} operations")
    logger.info(f"Rows loaded: {summary.records_loaded}")
    for failure in summary.failed:
        logger.error(f"Failed: {failure['label']}: {failure['error']}")
