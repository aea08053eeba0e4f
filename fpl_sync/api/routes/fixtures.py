"""Fixture routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fpl_sync.api.dependencies import get_fixture_service
from fpl_sync.api.errors import respond
from fpl_sync.services.fixture_service import FixtureService

router = APIRouter(prefix="/fixtures", tags=["fixtures"])


@router.get("")
async def list_fixtures(
    event: Optional[int] = Query(None, description="Only fixtures of this gameweek"),
    team: Optional[int] = Query(None, description="Only fixtures of this team, seen from its side"),
    service: FixtureService = Depends(get_fixture_service),
) -> dict:
    if team is not None:
        return respond(await service.get_fixtures_by_team(team))
    if event is not None:
        return respond(await service.get_fixtures_by_event(event))
    return respond(await service.get_fixtures())


@router.get("/{fixture_id}")
async def get_fixture(fixture_id: int, service: FixtureService = Depends(get_fixture_service)) -> dict:
    return respond(await service.get_fixture(fixture_id))


@router.post("/sync")
async def sync_fixtures(service: FixtureService = Depends(get_fixture_service)) -> dict:
    return respond(await service.sync_fixtures())
