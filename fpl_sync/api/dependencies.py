"""FastAPI dependencies handing out pieces of the service container."""
from fastapi import Request

from fpl_sync.container import Container
from fpl_sync.services.event_live_service import EventLiveService
from fpl_sync.services.event_service import EventService
from fpl_sync.services.fixture_service import FixtureService
from fpl_sync.services.league_service import LeagueService
from fpl_sync.services.phase_service import PhaseService
from fpl_sync.services.player_service import PlayerService
from fpl_sync.services.player_stat_service import PlayerStatService
from fpl_sync.services.player_value_service import PlayerValueService
from fpl_sync.services.sync_service import SyncService
from fpl_sync.services.team_service import TeamService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_event_service(request: Request) -> EventService:
    return get_container(request).events


def get_team_service(request: Request) -> TeamService:
    return get_container(request).teams


def get_player_service(request: Request) -> PlayerService:
    return get_container(request).players


def get_player_stat_service(request: Request) -> PlayerStatService:
    return get_container(request).player_stats


def get_phase_service(request: Request) -> PhaseService:
    return get_container(request).phases


def get_player_value_service(request: Request) -> PlayerValueService:
    return get_container(request).player_values


def get_fixture_service(request: Request) -> FixtureService:
    return get_container(request).fixtures


def get_event_live_service(request: Request) -> EventLiveService:
    return get_container(request).event_live


def get_league_service(request: Request) -> LeagueService:
    return get_container(request).leagues


def get_sync_service(request: Request) -> SyncService:
    """Dependency to get the sync service instance."""
    return get_container(request).sync
