"""Player (element) routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fpl_sync.api.dependencies import get_player_service
from fpl_sync.api.errors import respond
from fpl_sync.services.player_service import PlayerService

router = APIRouter(prefix="/players", tags=["players"])


@router.get("")
async def list_players(
    team_id: Optional[int] = Query(None, description="Filter by team id"),
    element_type: Optional[int] = Query(None, ge=1, le=5, description="1=GKP, 2=DEF, 3=MID, 4=FWD, 5=manager"),
    service: PlayerService = Depends(get_player_service),
) -> dict:
    return respond(await service.get_players(team_id=team_id, element_type=element_type))


@router.get("/{player_id}")
async def get_player(player_id: int, service: PlayerService = Depends(get_player_service)) -> dict:
    return respond(await service.get_player(player_id))


@router.post("/sync")
async def sync_players(service: PlayerService = Depends(get_player_service)) -> dict:
    return respond(await service.sync_players())
