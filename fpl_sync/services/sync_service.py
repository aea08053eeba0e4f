"""
Sync service: the API's way into the sync orchestrator and the scheduler.

Jobs return a per-job summary dict; failures come back as ``ServiceError``
like every other service.
"""
import logging
from typing import Dict, Optional

from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Err, Result
from fpl_sync.core.scheduler import AutomationScheduler
from fpl_sync.services.base import not_found, service_error_from_sync
from fpl_sync.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


class SyncService:

    def __init__(self, orchestrator: SyncOrchestrator):
        self.orchestrator = orchestrator

    def get_sync_status(self) -> Result[Dict, ServiceError]:
        return self.orchestrator.get_sync_status().map_error(service_error_from_sync)

    async def run_full_cycle(self) -> Dict:
        """Every job once; a failed job is reported in the summary, not raised."""
        return await self.orchestrator.run_full_cycle()

    async def sync_bootstrap(self) -> Result[Dict, ServiceError]:
        return (await self.orchestrator.sync_bootstrap()).map_error(service_error_from_sync)

    async def sync_fixtures(self) -> Result[Dict, ServiceError]:
        return (await self.orchestrator.sync_fixtures_job()).map_error(service_error_from_sync)

    async def sync_live(self) -> Result[Dict, ServiceError]:
        return (await self.orchestrator.sync_live()).map_error(service_error_from_sync)

    async def sync_leagues(self) -> Result[Dict, ServiceError]:
        return (await self.orchestrator.sync_leagues()).map_error(service_error_from_sync)

    async def run_scheduled_job(
        self, scheduler: Optional[AutomationScheduler], job_id: str
    ) -> Result[Dict, ServiceError]:
        """Run one scheduled job now, outside its schedule."""
        outcome = await scheduler.run_job(job_id) if scheduler is not None else None
        if outcome is None:
            logger.info(f"Scheduled job '{job_id}' requested but not registered")
            return Err(not_found(f"Scheduled job '{job_id}'", job_id=job_id))
        return outcome.map_error(service_error_from_sync)
