"""Classic league routes."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_league_service
from fpl_sync.api.errors import respond
from fpl_sync.services.league_service import LeagueService

router = APIRouter(prefix="/leagues", tags=["leagues"])


@router.get("/classic/{league_id}")
async def classic_league(league_id: int, service: LeagueService = Depends(get_league_service)) -> dict:
    """League info with the standings of every page, ordered by rank."""
    return respond(await service.get_classic_league(league_id))


@router.post("/classic/{league_id}/sync")
async def sync_classic_league(league_id: int, service: LeagueService = Depends(get_league_service)) -> dict:
    return respond(await service.sync_classic_league(league_id))
