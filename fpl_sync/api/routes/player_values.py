"""Player price change routes, one listing per change date (YYYYMMDD)."""
from typing import Optional

from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_player_value_service
from fpl_sync.api.errors import respond
from fpl_sync.services.player_value_service import PlayerValueService

router = APIRouter(prefix="/player-values", tags=["player-values"])


@router.get("/element/{element_id}")
async def player_value_history(
    element_id: int, service: PlayerValueService = Depends(get_player_value_service)
) -> dict:
    return respond(await service.get_player_values_by_element(element_id))


@router.get("/{change_date}")
async def list_player_values(
    change_date: str, service: PlayerValueService = Depends(get_player_value_service)
) -> dict:
    return respond(await service.get_player_values(change_date))


@router.post("/sync")
async def sync_player_values(
    change_date: Optional[str] = None, service: PlayerValueService = Depends(get_player_value_service)
) -> dict:
    """Record price changes for ``change_date`` (today, UTC, when omitted)."""
    return respond(await service.sync_player_values(change_date))
