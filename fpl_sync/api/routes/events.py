"""Gameweek (event) routes."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_event_service
from fpl_sync.api.errors import respond
from fpl_sync.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(service: EventService = Depends(get_event_service)) -> dict:
    return respond(await service.get_events())


@router.get("/current")
async def current_event(service: EventService = Depends(get_event_service)) -> dict:
    return respond(await service.get_current_event())


@router.get("/next")
async def next_event(service: EventService = Depends(get_event_service)) -> dict:
    return respond(await service.get_next_event())


@router.get("/last")
async def last_event(service: EventService = Depends(get_event_service)) -> dict:
    return respond(await service.get_last_event())


@router.get("/{event_id}")
async def get_event(event_id: int, service: EventService = Depends(get_event_service)) -> dict:
    """Get one gameweek; ids outside 1..MAX_EVENT_ID are rejected with 400."""
    return respond(await service.get_event(event_id))


@router.post("/sync")
async def sync_events(service: EventService = Depends(get_event_service)) -> dict:
    return respond(await service.sync_events())
