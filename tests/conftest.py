"""Shared pytest fixtures and FPL payload builders for fpl-sync-api tests."""
from datetime import datetime, timedelta, timezone
from typing import Optional

import fakeredis
import httpx
import pytest

from fpl_sync.cache.entity_cache import EntityCache
from fpl_sync.cache.keys import CachePrefix
from fpl_sync.clients.fpl_client import FplClient, create_fpl_breaker
from fpl_sync.container import build_container
from fpl_sync.core.config import Settings
from fpl_sync.core.database import create_db_engine, create_session_factory, init_db
from fpl_sync.domain.operations import DomainOperations

SEASON = "2526"
FPL_BASE_URL = "https://fpl.test/api"
SEASON_START = datetime(2025, 8, 15, 17, 30, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────
# FPL payload builders
# ─────────────────────────────────────────────────────────────

def event_payload(event_id: int, current: Optional[int] = None) -> dict:
    deadline = SEASON_START + timedelta(days=7 * (event_id - 1))
    return {
        "id": event_id,
        "name": f"Gameweek {event_id}",
        "deadline_time": deadline.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "deadline_time_epoch": int(deadline.timestamp()),
        "deadline_time_game_offset": 0,
        "average_entry_score": 50 if current and event_id < current else 0,
        "highest_score": 120 if current and event_id < current else None,
        "finished": bool(current and event_id < current),
        "data_checked": bool(current and event_id < current),
        "is_previous": bool(current and event_id == current - 1),
        "is_current": event_id == current,
        "is_next": bool(current and event_id == current + 1),
        "cup_leagues_created": False,
        "h2h_ko_matches_created": False,
        "chip_plays": [{"chip_name": "bboost", "num_played": 1000 + event_id}],
        "most_selected": 1,
        "top_element": 2,
        "top_element_info": {"id": 2, "points": 15},
        "transfers_made": 100000,
        "release_time": None,
    }


def team_payload(team_id: int) -> dict:
    return {
        "id": team_id,
        "code": 100 + team_id,
        "name": f"Team {team_id}",
        "short_name": f"T{team_id:02d}",
        "strength": 3,
        "strength_overall_home": 1100,
        "strength_overall_away": 1150,
        "strength_attack_home": 1100,
        "strength_attack_away": 1120,
        "strength_defence_home": 1090,
        "strength_defence_away": 1130,
        "played": 0,
        "win": 0,
        "draw": 0,
        "loss": 0,
        "points": 0,
        "position": team_id,
        "form": None,
        "team_division": None,
        "unavailable": False,
        "pulse_id": 200 + team_id,
    }


def element_payload(element_id: int, team_id: int = 1, form: str = "2.5") -> dict:
    return {
        "id": element_id,
        "code": 400000 + element_id,
        "element_type": 1 + element_id % 4,
        "team": team_id,
        "status": "a",
        "now_cost": 50 + element_id % 50,
        "cost_change_start": 1,
        "first_name": f"First{element_id}",
        "second_name": f"Second{element_id}",
        "web_name": f"Player{element_id}",
        "form": form,
        "points_per_game": "3.1",
        "selected_by_percent": "12.4",
        "total_points": 10 + element_id,
        "minutes": 90,
        "goals_scored": element_id % 3,
        "assists": 1,
        "bps": 20,
        "influence": "10.2",
        "creativity": "5.0",
        "threat": "8.0",
        "ict_index": "2.3",
        "expected_goals": "0.45",
        "expected_assists": "0.10",
        "expected_goal_involvements": "0.55",
        "expected_goals_conceded": "",
    }


def phase_payload(phase_id: int, name: str, start: int, stop: int, highest_score: Optional[int] = None) -> dict:
    return {
        "id": phase_id,
        "name": name,
        "start_event": start,
        "stop_event": stop,
        "highest_score": highest_score,
    }


def fixture_payload(
    fixture_id: int,
    event_id: Optional[int],
    team_h: int,
    team_a: int,
    team_h_score: Optional[int] = None,
    team_a_score: Optional[int] = None,
) -> dict:
    finished = team_h_score is not None
    return {
        "id": fixture_id,
        "code": 2500000 + fixture_id,
        "event": event_id,
        "kickoff_time": (SEASON_START + timedelta(days=7 * ((event_id or 1) - 1), hours=2)).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        ) if event_id else None,
        "team_h": team_h,
        "team_a": team_a,
        "team_h_score": team_h_score,
        "team_a_score": team_a_score,
        "team_h_difficulty": 2,
        "team_a_difficulty": 4,
        "started": finished,
        "finished": finished,
        "finished_provisional": finished,
        "provisional_start_time": False,
        "minutes": 90 if finished else 0,
        "stats": [],
    }


def live_element_payload(element_id: int, points: int = 6) -> dict:
    return {
        "id": element_id,
        "stats": {
            "minutes": 90,
            "goals_scored": 1,
            "assists": 0,
            "bps": 30,
            "influence": "40.2",
            "creativity": "12.0",
            "threat": "33.0",
            "ict_index": "8.5",
            "total_points": points,
            "in_dreamteam": False,
        },
        "explain": [],
    }


def standings_page(league_id: int, page: int, count: int, has_next: bool, page_size: int = 50) -> dict:
    first_rank = (page - 1) * page_size + 1
    return {
        "league": {
            "id": league_id,
            "name": f"League {league_id}",
            "created": "2025-07-20T10:00:00Z",
            "closed": False,
            "league_type": "x",
            "scoring": "c",
            "admin_entry": 1,
            "start_event": 1,
            "has_cup": False,
        },
        "standings": {
            "has_next": has_next,
            "page": page,
            "results": [
                {
                    "id": 9000 + rank,
                    "entry": 10000 + rank,
                    "entry_name": f"Entry {rank}",
                    "player_name": f"Manager {rank}",
                    "rank": rank,
                    "last_rank": rank,
                    "rank_sort": rank,
                    "total": 2000 - rank,
                    "event_total": 50,
                }
                for rank in range(first_rank, first_rank + count)
            ],
        },
    }


def bootstrap_payload(n_events: int = 38, current: Optional[int] = 5, n_teams: int = 20, n_players: int = 21) -> dict:
    return {
        "events": [event_payload(i, current) for i in range(1, n_events + 1)],
        "teams": [team_payload(i) for i in range(1, n_teams + 1)],
        "elements": [element_payload(i, team_id=1 + i % n_teams) for i in range(1, n_players + 1)],
        "phases": [
            phase_payload(1, "Overall", 1, n_events, 120),
            phase_payload(2, "August", 1, 3, 98),
            phase_payload(3, "September", 4, 6),
        ],
        "element_types": [],
        "total_players": 11000000,
    }


class FakeFplApi:
    """Canned FPL API behind an ``httpx.MockTransport``."""

    def __init__(self):
        self.bootstrap = bootstrap_payload()
        self.fixtures = [
            fixture_payload(1, 1, 1, 2, 2, 1),
            fixture_payload(2, 1, 3, 4, 0, 0),
            fixture_payload(3, 2, 2, 3),
            fixture_payload(4, None, 4, 1),
        ]
        self.live = {5: {"elements": [live_element_payload(i) for i in range(1, 11)]}}
        self.league_pages = {
            314: [
                standings_page(314, 1, 50, True),
                standings_page(314, 2, 50, True),
                standings_page(314, 3, 17, False),
            ]
        }
        self.failures: dict[str, int] = {}
        self.calls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.calls.append(f"{path}?{request.url.query.decode()}" if request.url.query else path)

        if path in self.failures:
            return httpx.Response(self.failures[path], json={"detail": "error"})

        parts = path.strip("/").split("/")
        if path == "/bootstrap-static/":
            return httpx.Response(200, json=self.bootstrap)
        if path == "/fixtures/":
            return httpx.Response(200, json=self.fixtures)
        if parts[0] == "event" and parts[-1] == "live" and int(parts[1]) in self.live:
            return httpx.Response(200, json=self.live[int(parts[1])])
        if parts[0] == "leagues-classic" and int(parts[1]) in self.league_pages:
            page = int(request.url.params.get("page_standings", "1"))
            pages = self.league_pages[int(parts[1])]
            if 1 <= page <= len(pages):
                return httpx.Response(200, json=pages[page - 1])
        return httpx.Response(404, json={"detail": "Not found."})

    def count(self, prefix: str) -> int:
        return sum(1 for call in self.calls if call.startswith(prefix))


def make_fpl_client(fake: FakeFplApi, max_retries: int = 2) -> FplClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler), base_url=FPL_BASE_URL)
    return FplClient(
        base_url=FPL_BASE_URL,
        max_retries=max_retries,
        retry_wait_multiplier=0,
        http_client=http,
        breaker=create_fpl_breaker(),
    )


# ─────────────────────────────────────────────────────────────
# Infrastructure fixtures
# ─────────────────────────────────────────────────────────────

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test (StaticPool, shared by every session)."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def redis():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def fake_fpl() -> FakeFplApi:
    return FakeFplApi()


@pytest.fixture
async def fpl_client(fake_fpl):
    client = make_fpl_client(fake_fpl)
    yield client
    await client.http.aclose()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite://",
        LEAGUE_IDS_STR="314",
        SCHEDULER_ENABLED=False,
        LOG_JSON=False,
        MAX_EVENT_ID=38,
    )


@pytest.fixture
def container(test_settings, redis, session_factory, fpl_client):
    return build_container(
        test_settings,
        redis=redis,
        session_factory=session_factory,
        fpl_client=fpl_client,
        season=SEASON,
    )


def make_operations(redis, prefix: CachePrefix, record_type, repository) -> DomainOperations:
    return DomainOperations(EntityCache(redis, prefix, record_type, provider=repository), repository)


@pytest.fixture
async def api_client(container):
    """HTTP client against an app wired to the test container (no lifespan, no scheduler)."""
    from fpl_sync.main import create_app

    app = create_app(container=container)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
