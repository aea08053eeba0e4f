"""
Derived views: cached collections computed from other cached collections.

A view is rebuilt by the sync workflow right after the collection it depends
on has been replaced, and recomputes itself on a cache miss, so its buckets
are never authoritative and can always be dropped.

Views:
- CurrentEventView: the event flagged ``is_current``, under ``event::{season}::current``
- TeamFixtureView: each team's fixtures with names, scores and results,
  under ``team-fixture::{season}::{team_id}``; rebuilt after both fixtures
  and teams syncs
"""
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Generic, Optional, TypeVar, Union

from redis.asyncio import Redis

from fpl_sync.cache.entity_cache import EntityCache
from fpl_sync.cache.keys import CachePrefix, Scope
from fpl_sync.cache.provider import DataProvider
from fpl_sync.core.errors import DomainError, DomainErrorCode
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.operations import DomainOperations, domain_error_from_cache
from fpl_sync.domain.records import Event, Fixture, Team, TeamFixture

logger = logging.getLogger(__name__)

R = TypeVar("R")

CURRENT_SUBSCOPE = "current"


class DerivedView(ABC, Generic[R]):
    """Something the sync workflow recomputes after replacing a collection of ``R``."""

    name: str

    @abstractmethod
    async def rebuild(self, scope: Scope, rows: list[R]) -> Result[None, DomainError]:
        """Recompute and cache the view from freshly persisted rows."""


# ============================================================================
# Current event
# ============================================================================

def pick_current(events: list[Event]) -> Optional[Event]:
    flagged = sorted((e for e in events if e.is_current), key=lambda e: e.id)
    return flagged[0] if flagged else None


class CurrentEventView(DerivedView[Event], DataProvider[Event]):
    """Single-entry bucket holding the current gameweek."""

    name = "current-event"

    def __init__(self, redis: Redis, events: DomainOperations[Event]):
        self.events = events
        self.cache: EntityCache[Event] = EntityCache(redis, CachePrefix.EVENT, Event, provider=self)

    @staticmethod
    def scope_for(season: str) -> Scope:
        return Scope(season, CURRENT_SUBSCOPE)

    async def get(self, season: str) -> Result[Optional[Event], DomainError]:
        result = await self.cache.get_all(self.scope_for(season))
        return result.map(lambda events: events[0] if events else None).map_error(
            lambda e: domain_error_from_cache(e, {"view": self.name, "season": season})
        )

    async def rebuild(self, scope: Scope, rows: list[Event]) -> Result[None, DomainError]:
        current = pick_current(rows)
        written = await self.cache.set_many(self.scope_for(scope.season), [current] if current else [])
        if written.is_err():
            return Err(domain_error_from_cache(written.error, {"view": self.name}))
        logger.info(f"Current event for {scope.season}: {current.id if current else None}")
        return Ok(None)

    # DataProvider: recompute from the season's events bucket

    async def get_all(self, scope: Scope) -> Result[list[Event], DomainError]:
        events = await self.events.get_all(Scope(scope.season))
        if events.is_err():
            return events
        current = pick_current(events.value)
        return Ok([current] if current else [])

    async def get_one(self, scope: Scope, id: Union[int, str]) -> Result[Optional[Event], DomainError]:
        current = await self.get_all(scope)
        if current.is_err():
            return current
        return Ok(next((e for e in current.value if str(e.id) == str(id)), None))


# ============================================================================
# Team fixtures
# ============================================================================

def score_string(home_score: Optional[int], away_score: Optional[int]) -> str:
    if home_score is None or away_score is None:
        return "-:-"
    return f"{home_score}:{away_score}"


def result_for(team_score: Optional[int], opponent_score: Optional[int]) -> Optional[str]:
    if team_score is None or opponent_score is None:
        return None
    if team_score > opponent_score:
        return "W"
    if team_score < opponent_score:
        return "L"
    return "D"


def build_team_fixtures(
    fixtures: list[Fixture], teams: list[Team]
) -> Result[dict[int, list[TeamFixture]], DomainError]:
    """
    Split every fixture into a home-side and an away-side entry.

    Fails with VALIDATION_ERROR when a fixture references a team that is not
    in ``teams``.
    """
    teams_by_id = {team.id: team for team in teams}
    by_team: dict[int, list[TeamFixture]] = defaultdict(list)

    for fixture in fixtures:
        home = teams_by_id.get(fixture.team_h)
        away = teams_by_id.get(fixture.team_a)
        if home is None or away is None:
            return Err(DomainError(
                DomainErrorCode.VALIDATION_ERROR,
                f"Fixture {fixture.id} references unknown team",
                details={"fixture_id": fixture.id, "team_h": fixture.team_h, "team_a": fixture.team_a},
            ))

        score = score_string(fixture.team_h_score, fixture.team_a_score)
        for team, opponent, was_home in ((home, away, True), (away, home, False)):
            team_score = fixture.team_h_score if was_home else fixture.team_a_score
            opponent_score = fixture.team_a_score if was_home else fixture.team_h_score
            by_team[team.id].append(TeamFixture(
                id=fixture.id,
                team_id=team.id,
                team_name=team.name,
                team_short_name=team.short_name,
                opponent_team_id=opponent.id,
                opponent_team_name=opponent.name,
                opponent_team_short_name=opponent.short_name,
                event_id=fixture.event_id,
                kickoff_time=fixture.kickoff_time,
                was_home=was_home,
                difficulty=fixture.team_h_difficulty if was_home else fixture.team_a_difficulty,
                opponent_difficulty=fixture.team_a_difficulty if was_home else fixture.team_h_difficulty,
                team_score=team_score,
                opponent_team_score=opponent_score,
                score=score,
                result=result_for(team_score, opponent_score),
                started=fixture.started,
                finished=fixture.finished,
                minutes=fixture.minutes,
            ))

    return Ok({team_id: sorted(rows, key=lambda r: r.id) for team_id, rows in by_team.items()})


class TeamFixtureView(DerivedView[Fixture], DataProvider[TeamFixture]):
    """Per-team fixture index joined with team names."""

    name = "team-fixtures"

    def __init__(self, redis: Redis, fixtures: DomainOperations[Fixture], teams: DomainOperations[Team]):
        self.fixtures = fixtures
        self.teams = teams
        self.cache: EntityCache[TeamFixture] = EntityCache(
            redis, CachePrefix.TEAM_FIXTURE, TeamFixture, provider=self
        )

    def on_teams(self) -> "TeamRenameRebuild":
        """The same view, registered on the teams workflow."""
        return TeamRenameRebuild(self)

    async def get_for_team(self, season: str, team_id: int) -> Result[list[TeamFixture], DomainError]:
        result = await self.cache.get_all(Scope(season, team_id))
        return result.map_error(
            lambda e: domain_error_from_cache(e, {"view": self.name, "team_id": team_id})
        )

    async def rebuild(self, scope: Scope, rows: list[Fixture]) -> Result[None, DomainError]:
        teams = await self.teams.get_all(Scope(scope.season))
        if teams.is_err():
            return teams
        return await self._write(scope.season, rows, teams.value)

    async def rebuild_from_teams(self, scope: Scope, teams: list[Team]) -> Result[None, DomainError]:
        fixtures = await self.fixtures.get_all(Scope(scope.season))
        if fixtures.is_err():
            return fixtures
        return await self._write(scope.season, fixtures.value, teams)

    async def _write(self, season: str, fixtures: list[Fixture], teams: list[Team]) -> Result[None, DomainError]:
        if not teams:
            logger.warning(f"No teams synced for {season}; team fixtures left to rebuild on read")
            return Ok(None)

        built = build_team_fixtures(fixtures, teams)
        if built.is_err():
            return built

        season_scope = Scope(season)
        for team in teams:
            written = await self.cache.set_many(season_scope.narrow(team.id), built.value.get(team.id, []))
            if written.is_err():
                return Err(domain_error_from_cache(written.error, {"view": self.name, "team_id": team.id}))

        logger.info(f"Rebuilt team fixtures for {len(teams)} teams in {season}")
        return Ok(None)

    # DataProvider: recompute one team's bucket from fixtures + teams

    async def get_all(self, scope: Scope) -> Result[list[TeamFixture], DomainError]:
        season_scope = Scope(scope.season)
        fixtures = await self.fixtures.get_all(season_scope)
        if fixtures.is_err():
            return fixtures
        teams = await self.teams.get_all(season_scope)
        if teams.is_err():
            return teams
        if not teams.value:
            return Ok([])

        built = build_team_fixtures(fixtures.value, teams.value)
        return built.map(lambda by_team: by_team.get(int(scope.subscope), []))

    async def get_one(self, scope: Scope, id: Union[int, str]) -> Result[Optional[TeamFixture], DomainError]:
        rows = await self.get_all(scope)
        if rows.is_err():
            return rows
        return Ok(next((r for r in rows.value if str(r.id) == str(id)), None))


class TeamRenameRebuild(DerivedView[Team]):
    """Rebuilds the team fixture buckets after a teams sync, so names never go stale."""

    def __init__(self, view: TeamFixtureView):
        self.view = view
        self.name = view.name

    async def rebuild(self, scope: Scope, rows: list[Team]) -> Result[None, DomainError]:
        return await self.view.rebuild_from_teams(scope, rows)
