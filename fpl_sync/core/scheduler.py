"""
Automated sync scheduler for fpl-sync-api.

This module provides scheduled background jobs for:
- Bootstrap sync (events, teams, players, phases, then player stats and
  price changes for the current gameweek)
- Fixtures sync (fixtures plus the per-team fixture view)
- Live gameweek stats
- Classic league standings for the configured league ids

Scheduler: APScheduler (lightweight, FastAPI-compatible)
"""
import logging
from typing import Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from fpl_sync.core.errors import SyncError
from fpl_sync.core.result import Result
from fpl_sync.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Result[Dict, SyncError]]]


class AutomationScheduler:
    """
    Main scheduler for automated sync jobs.

    All scheduled jobs are defined here with clear schedules; each one runs a
    single orchestrator job and logs its outcome.
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        timezone: str = "Europe/London",
        live_interval_minutes: int = 5,
    ):
        self.orchestrator = orchestrator
        self.timezone = timezone
        self.live_interval_minutes = live_interval_minutes
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False
        self._jobs: Dict[str, JobFunc] = {}

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting automation scheduler...")

        self.scheduler = AsyncIOScheduler(
            timezone=self.timezone,
            job_defaults={
                "coalesce": True,  # Combine missed runs into one
                "max_instances": 1,  # Only one instance of each job
                "misfire_grace_time": 300,
            },
        )

        self._schedule_bootstrap()
        self._schedule_fixtures()
        self._schedule_live()
        self._schedule_leagues()

        self.scheduler.start()
        self.running = True

        logger.info("Scheduler started with %d jobs", len(self.scheduler.get_jobs()))
        self._log_scheduled_jobs()

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Scheduler stopped")

    async def run_job(self, job_id: str) -> Optional[Result[Dict, SyncError]]:
        """Run one job now, outside its schedule. Returns None for an unknown id."""
        job = self._jobs.get(job_id)
        if job is None:
            return None
        return await self._execute(job_id, job)

    def status(self) -> Dict:
        jobs = self.scheduler.get_jobs() if self.scheduler else []
        return {
            "running": self.running,
            "timezone": self.timezone,
            "jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                }
                for job in jobs
            ],
        }

    # ========================================================================
    # Jobs
    # ========================================================================

    def _schedule_bootstrap(self):
        """
        Schedule: Sync bootstrap-static.

        Frequency: Daily at 06:00
        Purpose: Keep events, teams, players and phases up to date, plus the
        current gameweek's player stats snapshot and the day's price changes
        """
        self._add_job(
            "bootstrap",
            "Sync FPL bootstrap data",
            CronTrigger(hour=6, minute=0, timezone=self.timezone),
            self.orchestrator.sync_bootstrap,
        )
        logger.info("Scheduled: Bootstrap sync (daily at 06:00)")

    def _schedule_fixtures(self):
        """
        Schedule: Sync fixtures.

        Frequency: Every 6 hours at :10
        Purpose: Kickoff changes, scores and the per-team fixture view
        """
        self._add_job(
            "fixtures",
            "Sync FPL fixtures",
            CronTrigger(hour="*/6", minute=10, timezone=self.timezone),
            self.orchestrator.sync_fixtures_job,
        )
        logger.info("Scheduled: Fixtures sync (every 6 hours at :10)")

    def _schedule_live(self):
        """
        Schedule: Sync live stats of the current gameweek.

        Frequency: Every LIVE_SYNC_INTERVAL_MINUTES minutes
        """
        self._add_job(
            "live",
            "Sync FPL live gameweek stats",
            IntervalTrigger(minutes=self.live_interval_minutes, timezone=self.timezone),
            self.orchestrator.sync_live,
        )
        logger.info(f"Scheduled: Live sync (every {self.live_interval_minutes} minutes)")

    def _schedule_leagues(self):
        """
        Schedule: Sync classic league standings.

        Frequency: Daily at 07:00, only when league ids are configured
        """
        if not self.orchestrator.league_ids:
            logger.info("No classic leagues configured; league sync not scheduled")
            return

        self._add_job(
            "leagues",
            "Sync FPL classic leagues",
            CronTrigger(hour=7, minute=0, timezone=self.timezone),
            self.orchestrator.sync_leagues,
        )
        logger.info(f"Scheduled: League sync for {len(self.orchestrator.league_ids)} leagues (daily at 07:00)")

    def _add_job(self, job_id: str, name: str, trigger, job: JobFunc):
        self._jobs[job_id] = job
        if self.scheduler is None:
            return

        async def _run():
            await self._execute(job_id, job)

        self.scheduler.add_job(_run, trigger=trigger, id=job_id, name=name, replace_existing=True)

    async def _execute(self, job_id: str, job: JobFunc) -> Result[Dict, SyncError]:
        result = await job()
        if result.is_ok():
            logger.info(f"Job {job_id} succeeded: {result.value}")
        else:
            logger.error(f"Job {job_id} failed: {result.error.code.value} {result.error.message}")
        return result

    def _log_scheduled_jobs(self):
        """Log all scheduled jobs for visibility."""
        for job in self.scheduler.get_jobs():
            next_run = job.next_run_time.isoformat() if job.next_run_time else "Pending"
            logger.info(f"Job {job.id} ({job.name}) next run: {next_run}")
