"""Team service."""
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import Team
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class TeamService(BaseService):

    def __init__(self, teams: DomainOperations[Team], orchestrator: SyncOrchestrator, season: str):
        super().__init__(season)
        self.teams = teams
        self.orchestrator = orchestrator

    async def get_team(self, team_id: int) -> Result[Team, ServiceError]:
        valid = validate_positive_id(team_id, "team_id")
        if valid.is_err():
            return valid
        result = await self.teams.get_by_id(Scope(self.season), team_id)
        return require(result.map_error(service_error_from_domain), "Team", team_id=team_id)

    async def get_teams(self) -> Result[list[Team], ServiceError]:
        return (await self.teams.get_all(Scope(self.season))).map_error(service_error_from_domain)

    async def sync_teams(self) -> Result[list[Team], ServiceError]:
        return (await self.orchestrator.sync_teams()).map_error(service_error_from_sync)
