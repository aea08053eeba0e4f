"""
HTTP endpoint tests for fpl-sync-api.

These tests verify that FastAPI endpoints:
- Wrap results in the {"data": ...} envelope
- Map service failures to 400 / 404 / 502 / 503 with {"error": {code, message}}
- Report health per component

Uses httpx.AsyncClient over ASGITransport against an app wired to the test
container.
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from fpl_sync.core.errors import APIErrorCode, ServiceError, ServiceErrorCode
from fpl_sync.api.errors import api_error_from_service


@pytest.fixture
async def synced_client(api_client):
    response = await api_client.post("/api/v1/sync/run")
    assert response.status_code == 200
    assert response.json()["data"]["success"] is True
    return api_client


# =============================================================================
# HEALTH
# =============================================================================

class TestHealthEndpoints:

    async def test_liveness(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "1.0.0"}

    async def test_component_health(self, api_client):
        response = await api_client.get("/api/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["season"] == "2526"
        assert body["components"]["database"] == {"status": "connected"}
        assert body["components"]["redis"] == {"status": "connected"}
        assert body["components"]["fpl_api"] == {"circuit_breaker": "closed"}

    async def test_database_down_is_degraded(self, api_client, container):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("refused"))
        container.session_factory = lambda: session

        response = await api_client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["components"]["database"]["status"] == "unhealthy"

    async def test_correlation_id_echoed(self, api_client):
        response = await api_client.get("/health", headers={"X-Correlation-ID": "req-123"})
        assert response.headers["X-Correlation-ID"] == "req-123"

    async def test_root_lists_endpoints(self, api_client):
        response = await api_client.get("/")
        assert response.json()["endpoints"]["events"] == "/api/v1/events"

    async def test_metrics_exposed(self, synced_client):
        response = await synced_client.get("/metrics/")

        assert response.status_code == 200
        assert "fpl_sync_runs_total" in response.text


# =============================================================================
# READ ENDPOINTS
# =============================================================================

class TestEventEndpoints:

    async def test_current_next_last(self, synced_client):
        for path, expected in (("current", 5), ("next", 6), ("last", 4)):
            response = await synced_client.get(f"/api/v1/events/{path}")
            assert response.status_code == 200
            assert response.json()["data"]["id"] == expected

    async def test_list_events(self, synced_client):
        response = await synced_client.get("/api/v1/events")
        assert len(response.json()["data"]) == 38

    async def test_event_out_of_range(self, synced_client):
        response = await synced_client.get("/api/v1/events/39")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_non_numeric_event_id(self, api_client):
        response = await api_client.get("/api/v1/events/abc")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_current_before_sync_is_404(self, api_client):
        response = await api_client.get("/api/v1/events/current")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "NOT_FOUND", "message": "Current event not found"},
        }


class TestEntityEndpoints:

    async def test_team_and_fixtures(self, synced_client):
        team = await synced_client.get("/api/v1/teams/1")
        fixtures = await synced_client.get("/api/v1/teams/1/fixtures")

        assert team.json()["data"]["name"] == "Team 1"
        assert [row["score"] for row in fixtures.json()["data"]] == ["2:1", "-:-"]

    async def test_unknown_team(self, synced_client):
        response = await synced_client.get("/api/v1/teams/99")
        assert response.status_code == 404

    async def test_players_filtered(self, synced_client):
        response = await synced_client.get("/api/v1/players", params={"team_id": 2})
        assert [p["id"] for p in response.json()["data"]] == [1, 21]

    async def test_player_element_type_bounds(self, synced_client):
        response = await synced_client.get("/api/v1/players", params={"element_type": 9})
        assert response.status_code == 400

    async def test_player_stats(self, synced_client):
        stats = await synced_client.get("/api/v1/player-stats/5")
        one = await synced_client.get("/api/v1/player-stats/5/4")

        assert len(stats.json()["data"]) == 21
        assert one.json()["data"]["element_id"] == 4

    async def test_fixtures_by_event(self, synced_client):
        response = await synced_client.get("/api/v1/fixtures", params={"event": 1})
        assert [f["id"] for f in response.json()["data"]] == [1, 2]

    async def test_live(self, synced_client):
        response = await synced_client.get("/api/v1/live/5/3")
        assert response.json()["data"]["total_points"] == 6

    async def test_classic_league(self, synced_client):
        response = await synced_client.get("/api/v1/leagues/classic/314")

        standings = response.json()["data"]["standings"]
        assert len(standings) == 117
        assert standings[0]["rank"] == 1


class TestPhaseAndPriceEndpoints:

    async def test_phases(self, synced_client):
        listing = await synced_client.get("/api/v1/phases")
        one = await synced_client.get("/api/v1/phases/3")
        missing = await synced_client.get("/api/v1/phases/12")

        assert [p["name"] for p in listing.json()["data"]] == ["Overall", "August", "September"]
        assert one.json()["data"] == {
            "id": 3, "name": "September", "start_event": 4, "stop_event": 6, "highest_score": None,
        }
        assert missing.status_code == 404

    async def test_player_values_by_date(self, api_client):
        synced = await api_client.post("/api/v1/player-values/sync", params={"change_date": "20250815"})
        listing = await api_client.get("/api/v1/player-values/20250815")
        history = await api_client.get("/api/v1/player-values/element/7")

        assert len(synced.json()["data"]) == 21
        assert {v["change_type"] for v in listing.json()["data"]} == {"start"}
        assert [v["change_date"] for v in history.json()["data"]] == ["20250815"]

    async def test_bad_change_date_is_400(self, api_client):
        read = await api_client.get("/api/v1/player-values/2025-08-15")
        sync = await api_client.post("/api/v1/player-values/sync", params={"change_date": "tomorrow"})

        assert read.status_code == 400
        assert sync.status_code == 400
        assert read.json()["error"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# SYNC ENDPOINTS
# =============================================================================

class TestSyncEndpoints:

    async def test_sync_status(self, synced_client):
        response = await synced_client.get("/api/v1/sync/status")

        data = response.json()["data"]
        assert data["health_status"] == "healthy"
        assert data["total_jobs"] == 9

    async def test_entity_sync(self, api_client):
        response = await api_client.post("/api/v1/fixtures/sync")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 4

    async def test_upstream_failure_is_502(self, api_client, fake_fpl):
        fake_fpl.failures["/fixtures/"] = 503

        response = await api_client.post("/api/v1/sync/fixtures")

        assert response.status_code == 502
        assert response.json() == {
            "error": {"code": "SERVICE_ERROR", "message": "Upstream data source failed"},
        }

    async def test_league_sync(self, api_client):
        response = await api_client.post("/api/v1/leagues/classic/314/sync")
        assert len(response.json()["data"]["standings"]) == 117

    async def test_scheduler_not_running(self, api_client):
        status = await api_client.get("/api/v1/sync/scheduler/status")
        trigger = await api_client.post("/api/v1/sync/scheduler/jobs/live")

        assert status.json() == {"data": {"running": False, "jobs": []}}
        assert trigger.status_code == 404


class TestErrorMapping:

    @pytest.mark.parametrize("code, status", [
        (ServiceErrorCode.VALIDATION_ERROR, 400),
        (ServiceErrorCode.NOT_FOUND, 404),
        (ServiceErrorCode.INTEGRATION_ERROR, 502),
        (ServiceErrorCode.OPERATION_ERROR, 503),
    ])
    def test_status_codes(self, code, status):
        error = api_error_from_service(ServiceError(code, "boom"))

        assert error.status_code == status
        assert error.cause.code == code

    def test_internal_message_not_leaked(self):
        error = api_error_from_service(ServiceError(ServiceErrorCode.OPERATION_ERROR, "redis at 10.0.0.5 refused"))

        assert error.code == APIErrorCode.SERVICE_ERROR
        assert "10.0.0.5" not in error.message
