#!/usr/bin/env python3
"""
Background runner for the fpl-sync-api automation scheduler.

This script runs the sync scheduler as a standalone background service,
without the HTTP API. It can be run via systemd, supervisor, or directly.

Usage:
    python run_scheduler.py                  # Run in foreground
    python run_scheduler.py --once           # Run one full sync cycle and exit
    python run_scheduler.py --trigger live   # Run one job and exit
    python run_scheduler.py --list-jobs      # List job ids and exit
"""
import argparse
import asyncio
import json
import logging
import signal
import sys

from fpl_sync.container import build_container
from fpl_sync.core.config import settings
from fpl_sync.core.database import init_db
from fpl_sync.core.logging import configure_logging
from fpl_sync.core.scheduler import AutomationScheduler

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = logging.getLogger(__name__)


class SchedulerRunner:
    """Runner for the automation scheduler."""

    def __init__(self):
        self.container = None
        self.scheduler: AutomationScheduler = None
        self.shutdown = asyncio.Event()

    async def setup(self):
        self.container = build_container(settings)
        if self.container.engine is not None:
            init_db(self.container.engine)
        self.scheduler = AutomationScheduler(
            self.container.orchestrator,
            timezone=settings.SCHEDULER_TIMEZONE,
            live_interval_minutes=settings.LIVE_SYNC_INTERVAL_MINUTES,
        )

    async def teardown(self):
        if self.scheduler is not None:
            await self.scheduler.stop()
        if self.container is not None:
            await self.container.aclose()

    async def start(self):
        """Start the scheduler and run until shutdown."""
        logger.info("Starting scheduler runner...")
        await self.setup()
        try:
            await self.scheduler.start()
            logger.info("Scheduler is now running")

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self._set_shutdown)

            await self.shutdown.wait()
        finally:
            await self.teardown()
            logger.info("Scheduler runner stopped")

    async def run_once(self) -> bool:
        await self.setup()
        try:
            summary = await self.container.orchestrator.run_full_cycle()
            print(json.dumps(summary, indent=2, default=str))
            return summary["success"]
        finally:
            await self.teardown()

    async def trigger(self, job_id: str) -> bool:
        await self.setup()
        try:
            await self.scheduler.start()
            result = await self.scheduler.run_job(job_id)
            if result is None:
                print(f"Job '{job_id}' not found")
                return False
            if result.is_err():
                print(f"Job '{job_id}' failed: {result.error.code.value} {result.error.message}")
                return False
            print(json.dumps(result.value, indent=2, default=str))
            return True
        finally:
            await self.teardown()

    async def list_jobs(self):
        await self.setup()
        try:
            await self.scheduler.start()
            for job in self.scheduler.status()["jobs"]:
                print(f"{job['id']:<12} {job['name']:<36} next run: {job['next_run_time']}")
        finally:
            await self.teardown()

    def _set_shutdown(self):
        logger.info("Shutdown signal received")
        self.shutdown.set()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the fpl-sync-api automation scheduler")
    parser.add_argument("--once", action="store_true", help="Run one full sync cycle and exit")
    parser.add_argument("--trigger", type=str, metavar="JOB_ID", help="Run a specific job by id and exit")
    parser.add_argument("--list-jobs", action="store_true", help="List all scheduled jobs and exit")
    args = parser.parse_args()

    runner = SchedulerRunner()

    if args.list_jobs:
        asyncio.run(runner.list_jobs())
        return 0
    if args.once:
        return 0 if asyncio.run(runner.run_once()) else 1
    if args.trigger:
        return 0 if asyncio.run(runner.trigger(args.trigger)) else 1

    try:
        asyncio.run(runner.start())
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
