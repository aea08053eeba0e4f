"""Live gameweek stats routes."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_event_live_service
from fpl_sync.api.errors import respond
from fpl_sync.services.event_live_service import EventLiveService

router = APIRouter(prefix="/live", tags=["live"])


@router.get("/{event_id}")
async def event_live(event_id: int, service: EventLiveService = Depends(get_event_live_service)) -> dict:
    return respond(await service.get_event_live(event_id))


@router.get("/{event_id}/{element_id}")
async def element_live(
    event_id: int, element_id: int, service: EventLiveService = Depends(get_event_live_service)
) -> dict:
    return respond(await service.get_element_live(event_id, element_id))


@router.post("/{event_id}/sync")
async def sync_event_live(event_id: int, service: EventLiveService = Depends(get_event_live_service)) -> dict:
    return respond(await service.sync_event_live(event_id))
