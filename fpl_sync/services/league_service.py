"""
Classic league service.

Each league is cached in its own bucket (``league::{season}::{league_id}``)
holding the league with every standings page already aggregated.
"""
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import ClassicLeague
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class LeagueService(BaseService):

    def __init__(self, leagues: DomainOperations[ClassicLeague], orchestrator: SyncOrchestrator, season: str):
        super().__init__(season)
        self.leagues = leagues
        self.orchestrator = orchestrator

    async def get_classic_league(self, league_id: int) -> Result[ClassicLeague, ServiceError]:
        valid = validate_positive_id(league_id, "league_id")
        if valid.is_err():
            return valid
        result = await self.leagues.get_by_id(Scope(self.season, league_id), league_id)
        return require(result.map_error(service_error_from_domain), "League", league_id=league_id)

    async def sync_classic_league(self, league_id: int) -> Result[ClassicLeague, ServiceError]:
        valid = validate_positive_id(league_id, "league_id")
        if valid.is_err():
            return valid

        result = (await self.orchestrator.sync_classic_league(league_id)).map_error(service_error_from_sync)
        if result.is_err():
            return result
        return require(result.map(lambda leagues: leagues[0] if leagues else None), "League", league_id=league_id)
