import logging
from typing import Callable, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from core.config import settings
from core.exceptions import ConfigurationError
from ingestion.date_ranges import calculate_date_ranges
from ingestion.endpoints import ENDPOINTS
from ingestion.extractors.api_client import APIClient
from ingestion.loaders import create_storage
from ingestion.orchestrator import RunSummary, log_summary, run_endpoints
from ingestion.runner import ETLRunner

logger = logging.getLogger(__name__)


class ETLScheduler:
    def __init__(
        self,
        cron_schedule: Optional[str] = None,
        storage_factory: Callable = create_storage,
        client_factory: Callable = APIClient
    ):
        self.cron_schedule = cron_schedule or settings.CRON_SCHEDULE
        try:
            self.trigger = CronTrigger.from_crontab(self.cron_schedule)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid cron schedule: {self.cron_schedule}",
                context={"cron_schedule": self.cron_schedule},
                original_exception=e
            )
        self.scheduler = AsyncIOScheduler()
        self.storage_factory = storage_factory
        self.client_factory = client_factory
        self.last_summary: Optional[RunSummary] = None

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def run_etl_job(self) -> Optional[RunSummary]:
        """Job to ingest every configured endpoint once"""
        logger.info("Scheduler: Starting fetch job")
        logger.info(
            f"Database provider: {settings.DB_PROVIDER}, "
            f"date range mode: {settings.DATE_RANGE_MODE}"
        )
        try:
            async with self.storage_factory() as storage, self.client_factory() as api:
                runner = ETLRunner(storage, api)
                summary = await run_endpoints(
                    runner,
                    ENDPOINTS,
                    calculate_date_ranges(),
                    office_code=settings.OFFICE_CODE,
                )
            log_summary(summary, "Scheduled job completed")
            self.last_summary = summary
            return summary

        except Exception as e:
            logger.error(f"Scheduler: fetch job failed - {e}")
            return None

    def start(self, run_now: bool = False):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_etl_job,
            trigger=self.trigger,
            id="etl_job",
            replace_existing=True
        )
        if run_now:
            self.scheduler.add_job(self.run_etl_job, id="etl_job_now", replace_existing=True)
        self.scheduler.start()
        logger.info(f"ETL Scheduler started with schedule {self.cron_schedule}")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("ETL Scheduler stopped")
