"""Team routes."""
from fastapi import APIRouter, Depends

from fpl_sync.api.dependencies import get_fixture_service, get_team_service
from fpl_sync.api.errors import respond
from fpl_sync.services.fixture_service import FixtureService
from fpl_sync.services.team_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("")
async def list_teams(service: TeamService = Depends(get_team_service)) -> dict:
    return respond(await service.get_teams())


@router.get("/{team_id}")
async def get_team(team_id: int, service: TeamService = Depends(get_team_service)) -> dict:
    return respond(await service.get_team(team_id))


@router.get("/{team_id}/fixtures")
async def team_fixtures(team_id: int, service: FixtureService = Depends(get_fixture_service)) -> dict:
    """Fixtures seen from one team: opponent names, score string and W/D/L result."""
    return respond(await service.get_fixtures_by_team(team_id))


@router.post("/sync")
async def sync_teams(service: TeamService = Depends(get_team_service)) -> dict:
    return respond(await service.sync_teams())
