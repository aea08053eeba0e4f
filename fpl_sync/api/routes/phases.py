"""Phase routes."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_phase_service
from fpl_sync.api.errors import respond
from fpl_sync.services.phase_service import PhaseService

router = APIRouter(prefix="/phases", tags=["phases"])


@router.get("")
async def list_phases(service: PhaseService = Depends(get_phase_service)) -> dict:
    return respond(await service.get_phases())


@router.get("/{phase_id}")
async def get_phase(phase_id: int, service: PhaseService = Depends(get_phase_service)) -> dict:
    return respond(await service.get_phase(phase_id))


@router.post("/sync")
async def sync_phases(service: PhaseService = Depends(get_phase_service)) -> dict:
    return respond(await service.sync_phases())
