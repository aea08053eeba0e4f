"""Tests for derived views: team fixtures and the current event."""
from conftest import SEASON, make_operations
from fpl_sync.cache.keys import CachePrefix, Scope
from fpl_sync.core.errors import DomainErrorCode
from fpl_sync.domain.records import Event, Fixture, Team
from fpl_sync.domain.views import (
    CurrentEventView,
    TeamFixtureView,
    build_team_fixtures,
    pick_current,
    result_for,
    score_string,
)
from fpl_sync.repositories import EventRepository, FixtureRepository, TeamRepository


def team(team_id: int) -> Team:
    return Team(
        id=team_id,
        code=100 + team_id,
        name=f"Team {team_id}",
        short_name=f"T{team_id:02d}",
        strength=3,
        strength_overall_home=1100,
        strength_overall_away=1100,
        strength_attack_home=1100,
        strength_attack_away=1100,
        strength_defence_home=1100,
        strength_defence_away=1100,
        position=team_id,
        pulse_id=team_id,
    )


def fixture(fixture_id: int, home: int, away: int, home_score=None, away_score=None, event_id=1) -> Fixture:
    return Fixture(
        id=fixture_id,
        code=fixture_id,
        event_id=event_id,
        team_h=home,
        team_a=away,
        team_h_score=home_score,
        team_a_score=away_score,
        team_h_difficulty=2,
        team_a_difficulty=4,
        finished=home_score is not None,
    )


def event(event_id: int, is_current: bool = False) -> Event:
    return Event(id=event_id, name=f"Gameweek {event_id}", is_current=is_current)


class TestBuildTeamFixtures:

    def test_home_and_away_sides(self):
        by_team = build_team_fixtures([fixture(1, 1, 2, 2, 1)], [team(1), team(2)]).value

        home, away = by_team[1][0], by_team[2][0]
        assert (home.was_home, home.result, home.score) == (True, "W", "2:1")
        assert (away.was_home, away.result, away.score) == (False, "L", "2:1")
        assert (home.difficulty, home.opponent_difficulty) == (2, 4)
        assert (away.difficulty, away.opponent_difficulty) == (4, 2)
        assert away.opponent_team_name == "Team 1"
        assert (away.team_score, away.opponent_team_score) == (1, 2)

    def test_unplayed_and_drawn(self):
        by_team = build_team_fixtures([fixture(1, 1, 2), fixture(2, 2, 1, 0, 0)], [team(1), team(2)]).value

        assert [(f.id, f.score, f.result) for f in by_team[1]] == [(1, "-:-", None), (2, "0:0", "D")]

    def test_unknown_team(self):
        result = build_team_fixtures([fixture(1, 1, 42)], [team(1)])

        assert result.error.code == DomainErrorCode.VALIDATION_ERROR
        assert result.error.details["fixture_id"] == 1

    def test_helpers(self):
        assert score_string(3, None) == "-:-"
        assert result_for(1, 3) == "L"
        assert result_for(None, 3) is None


class TestPickCurrent:

    def test_lowest_flagged_event_wins(self):
        assert pick_current([event(3), event(6, True), event(5, True)]).id == 5

    def test_none_flagged(self):
        assert pick_current([event(1), event(2)]) is None


class TestCurrentEventView:

    async def test_recomputes_on_miss(self, redis, session_factory):
        repo = EventRepository(session_factory)
        repo.save_batch([event(4), event(5, True), event(6)])
        view = CurrentEventView(redis, make_operations(redis, CachePrefix.EVENT, Event, repo))

        result = await view.get(SEASON)

        assert result.value.id == 5
        assert await redis.hkeys("event::2526::current") == ["5"]

    async def test_pre_season_has_no_current(self, redis, session_factory):
        repo = EventRepository(session_factory)
        repo.save_batch([event(1), event(2)])
        view = CurrentEventView(redis, make_operations(redis, CachePrefix.EVENT, Event, repo))

        assert (await view.get(SEASON)).value is None

    async def test_rebuild_replaces_previous_current(self, redis, session_factory):
        view = CurrentEventView(
            redis, make_operations(redis, CachePrefix.EVENT, Event, EventRepository(session_factory))
        )
        await view.rebuild(Scope(SEASON), [event(4, True)])

        await view.rebuild(Scope(SEASON), [event(4), event(5, True)])

        assert await redis.hkeys("event::2526::current") == ["5"]


class TestTeamFixtureView:

    async def test_recomputes_one_team_on_miss(self, redis, session_factory):
        TeamRepository(session_factory).save_batch([team(1), team(2), team(3)])
        FixtureRepository(session_factory).save_batch([fixture(1, 1, 2, 1, 1), fixture(2, 3, 1)])
        view = TeamFixtureView(
            redis,
            make_operations(redis, CachePrefix.FIXTURE, Fixture, FixtureRepository(session_factory)),
            make_operations(redis, CachePrefix.TEAM, Team, TeamRepository(session_factory)),
        )

        result = await view.get_for_team(SEASON, 1)

        assert [(f.id, f.was_home, f.result) for f in result.value] == [(1, True, "D"), (2, False, None)]
        assert sorted(await redis.hkeys("team-fixture::2526::1")) == ["1", "2"]
        assert not await redis.exists("team-fixture::2526::3")

    async def test_rebuild_before_teams_synced_is_skipped(self, redis, session_factory):
        view = TeamFixtureView(
            redis,
            make_operations(redis, CachePrefix.FIXTURE, Fixture, FixtureRepository(session_factory)),
            make_operations(redis, CachePrefix.TEAM, Team, TeamRepository(session_factory)),
        )

        result = await view.rebuild(Scope(SEASON), [fixture(1, 1, 2)])

        assert result.is_ok()
        assert await redis.keys("team-fixture::*") == []

    async def test_teams_sync_refreshes_names(self, redis, session_factory):
        FixtureRepository(session_factory).save_batch([fixture(1, 1, 2, 2, 0)])
        view = TeamFixtureView(
            redis,
            make_operations(redis, CachePrefix.FIXTURE, Fixture, FixtureRepository(session_factory)),
            make_operations(redis, CachePrefix.TEAM, Team, TeamRepository(session_factory)),
        )
        await view.rebuild_from_teams(Scope(SEASON), [team(1), team(2)])
        renamed = team(1).model_copy(update={"name": "Renamed FC"})

        result = await view.on_teams().rebuild(Scope(SEASON), [renamed, team(2)])

        assert result.is_ok()
        assert view.on_teams().name == "team-fixtures"
        away_side = (await view.get_for_team(SEASON, 2)).value
        assert away_side[0].opponent_team_name == "Renamed FC"
        assert (await view.get_for_team(SEASON, 1)).value[0].team_name == "Renamed FC"


class TestInvalidate:
    """Dropping a bucket forces the next read through the repository."""

    async def test_next_read_goes_to_repository(self, redis, session_factory):
        repo = EventRepository(session_factory)
        operations = make_operations(redis, CachePrefix.EVENT, Event, repo)
        repo.save_batch([event(1)])
        await operations.get_all(Scope(SEASON))
        repo.save_batch([event(2)])

        assert [e.id for e in (await operations.get_all(Scope(SEASON))).value] == [1]
        assert (await operations.invalidate(Scope(SEASON))).is_ok()

        assert [e.id for e in (await operations.get_all(Scope(SEASON))).value] == [1, 2]
