"""Sync API routes for data synchronization health and management.

Provides endpoints for:
- Sync health monitoring
- Manual sync triggers (full cycle or one job)
- Scheduler status
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request

from fpl_sync.api.dependencies import get_sync_service
from fpl_sync.api.errors import respond
from fpl_sync.services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status")
async def get_sync_status(service: SyncService = Depends(get_sync_service)) -> Dict:
    """
    Get overall sync health status dashboard.

    Returns the health status (healthy, degraded, unhealthy) and the last
    run of every entity kind: timestamps, record counts and error messages.
    """
    return respond(service.get_sync_status())


@router.post("/run")
async def trigger_full_cycle(service: SyncService = Depends(get_sync_service)) -> Dict:
    """
    Run every sync job once: bootstrap, fixtures, live stats, leagues.

    A failing job does not stop the others; the per-job outcome is reported.
    """
    return {"data": await service.run_full_cycle()}


@router.post("/bootstrap")
async def trigger_bootstrap(service: SyncService = Depends(get_sync_service)) -> Dict:
    return respond(await service.sync_bootstrap())


@router.post("/fixtures")
async def trigger_fixtures(service: SyncService = Depends(get_sync_service)) -> Dict:
    return respond(await service.sync_fixtures())


@router.post("/live")
async def trigger_live(service: SyncService = Depends(get_sync_service)) -> Dict:
    """Refresh live stats for the current gameweek (no-op when none is current)."""
    return respond(await service.sync_live())


@router.post("/leagues")
async def trigger_leagues(service: SyncService = Depends(get_sync_service)) -> Dict:
    return respond(await service.sync_leagues())


@router.get("/scheduler/status")
async def get_scheduler_status(request: Request) -> Dict:
    """Get the current status of the automation scheduler."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        return {"data": {"running": False, "jobs": []}}
    return {"data": scheduler.status()}


@router.post("/scheduler/jobs/{job_id}")
async def trigger_scheduler_job(
    job_id: str, request: Request, service: SyncService = Depends(get_sync_service)
) -> Dict:
    """Run one scheduled job now, outside its schedule."""
    scheduler = getattr(request.app.state, "scheduler", None)
    return respond(await service.run_scheduled_job(scheduler, job_id))
