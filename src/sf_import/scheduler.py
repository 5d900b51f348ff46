"""
Periodic trigger for the scheduled import job.

Wraps an APScheduler ``BlockingScheduler`` that runs one job tick every
``scheduler.interval_minutes`` and stops cleanly on SIGINT or SIGTERM.
"""

import signal

from apscheduler.job import Job
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sf_import.config import SchedulerConfig
from sf_import.importer.job import ScheduledImportJob
from sf_import.importer.results import JobReport
from sf_import.utils.logging import get_logger, log_error

logger = get_logger(__name__)


class ImportScheduler:
    """Runs ``ScheduledImportJob.tick`` on an interval."""

    def __init__(
        self,
        job: ScheduledImportJob,
        config: SchedulerConfig,
        scheduler: BlockingScheduler | None = None,
    ):
        self.job = job
        self.config = config
        self.scheduler = scheduler or BlockingScheduler()
        self.scheduled_job: Job | None = None

    def register(self) -> Job:
        """Add the import tick to the scheduler."""
        self.scheduled_job = self.scheduler.add_job(
            self.run_tick,
            IntervalTrigger(minutes=self.config.interval_minutes),
            id="sf_import",
            name="sf_import",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.config.misfire_grace_time,
            replace_existing=True,
        )
        logger.info(
            "Import job scheduled",
            interval_minutes=self.config.interval_minutes,
            job_id=self.scheduled_job.id,
        )
        return self.scheduled_job

    def run_tick(self) -> JobReport | None:
        """
        One tick; errors are logged so the scheduler keeps running.

        Returns:
            The tick's report, or None if the tick itself crashed
        """
        try:
            return self.job.tick()
        except Exception as e:
            log_error(logger, e, context="scheduled_tick")
            return None

    def start(self) -> None:
        """Register the job and block until shutdown."""
        self.register()
        self._setup_signal_handlers()
        logger.info("Import scheduler starting")
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Import scheduler stopped")

    def _setup_signal_handlers(self) -> None:
        def handle_shutdown(signum, frame):
            logger.info("Received shutdown signal, stopping scheduler", signal=signum)
            self.stop()

        signal.signal(signal.SIGINT, handle_shutdown)
        signal.signal(signal.SIGTERM, handle_shutdown)
