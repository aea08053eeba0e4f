"""Player stats snapshot routes, one snapshot per gameweek."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_player_stat_service
from fpl_sync.api.errors import respond
from fpl_sync.services.player_stat_service import PlayerStatService

router = APIRouter(prefix="/player-stats", tags=["player-stats"])


@router.get("/{event_id}")
async def list_player_stats(event_id: int, service: PlayerStatService = Depends(get_player_stat_service)) -> dict:
    return respond(await service.get_player_stats(event_id))


@router.get("/{event_id}/{element_id}")
async def get_player_stat(
    event_id: int, element_id: int, service: PlayerStatService = Depends(get_player_stat_service)
) -> dict:
    return respond(await service.get_player_stat(event_id, element_id))


@router.post("/{event_id}/sync")
async def sync_player_stats(event_id: int, service: PlayerStatService = Depends(get_player_stat_service)) -> dict:
    return respond(await service.sync_player_stats(event_id))
