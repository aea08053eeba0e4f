"""
Fixture service.

All fixtures of the season live in one bucket; per-gameweek listings filter
it. Per-team listings come from the team-fixture view, which carries team
names, the score string and the W/D/L result from that team's side.
"""
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import Fixture, TeamFixture
from fpl_sync.domain.views import TeamFixtureView
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_event_id,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class FixtureService(BaseService):

    def __init__(
        self,
        fixtures: DomainOperations[Fixture],
        team_fixtures: TeamFixtureView,
        orchestrator: SyncOrchestrator,
        season: str,
        max_event_id: int = 38,
    ):
        super().__init__(season)
        self.fixtures = fixtures
        self.team_fixtures = team_fixtures
        self.orchestrator = orchestrator
        self.max_event_id = max_event_id

    async def get_fixture(self, fixture_id: int) -> Result[Fixture, ServiceError]:
        valid = validate_positive_id(fixture_id, "fixture_id")
        if valid.is_err():
            return valid
        result = await self.fixtures.get_by_id(Scope(self.season), fixture_id)
        return require(result.map_error(service_error_from_domain), "Fixture", fixture_id=fixture_id)

    async def get_fixtures(self) -> Result[list[Fixture], ServiceError]:
        return (await self.fixtures.get_all(Scope(self.season))).map_error(service_error_from_domain)

    async def get_fixtures_by_event(self, event_id: int) -> Result[list[Fixture], ServiceError]:
        valid = validate_event_id(event_id, self.max_event_id)
        if valid.is_err():
            return valid

        fixtures = await self.get_fixtures()
        return fixtures.map(lambda rows: [f for f in rows if f.event_id == event_id])

    async def get_fixtures_by_team(self, team_id: int) -> Result[list[TeamFixture], ServiceError]:
        valid = validate_positive_id(team_id, "team_id")
        if valid.is_err():
            return valid
        result = await self.team_fixtures.get_for_team(self.season, team_id)
        return result.map_error(service_error_from_domain)

    async def sync_fixtures(self) -> Result[list[Fixture], ServiceError]:
        return (await self.orchestrator.sync_fixtures()).map_error(service_error_from_sync)
