"""Sync orchestrator for keeping FPL data in step with the FPL API.

This orchestrator coordinates:
- Per-entity sync workflows (events, teams, players, phases, player stats,
  player values, fixtures, live stats, classic leagues)
- Scope resolution (the current gameweek comes from the freshly synced events)
- Sync metadata tracking
- Health monitoring

Sync Schedule (see fpl_sync.core.scheduler):
- bootstrap: daily (events, teams, players, phases, then player stats and
  player values for the current event)
- fixtures: every few hours
- live: every few minutes while a gameweek is running
- leagues: daily, one run per configured league id
"""
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import SyncError, SyncErrorCode
from fpl_sync.core.logging import clear_correlation_id, get_correlation_id, set_correlation_id
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.records import (
    ClassicLeague,
    Event,
    EventLive,
    Fixture,
    Phase,
    Player,
    PlayerStat,
    PlayerValue,
    Team,
)
from fpl_sync.domain.views import CurrentEventView, pick_current
from fpl_sync.repositories.sync_metadata_repository import STATUS_SUCCESS, SyncMetadataRepository
from fpl_sync.services.sync.adapters import FplApiAdapter
from fpl_sync.services.sync.workflow import SyncWorkflow

logger = logging.getLogger(__name__)


def today() -> str:
    """Change date for price snapshots, UTC."""
    return datetime.now(timezone.utc).strftime("%Y%m%d")


@dataclass
class SyncWorkflows:
    events: SyncWorkflow[Any, Event]
    teams: SyncWorkflow[Any, Team]
    players: SyncWorkflow[Any, Player]
    player_stats: SyncWorkflow[Any, PlayerStat]
    fixtures: SyncWorkflow[Any, Fixture]
    event_live: SyncWorkflow[Any, EventLive]
    leagues: SyncWorkflow[Any, ClassicLeague]
    phases: SyncWorkflow[Any, Phase]
    player_values: SyncWorkflow[Any, PlayerValue]


class SyncOrchestrator:
    """
    Coordinates sync jobs between the FPL API, the database and the cache.

    This is the main entry point for the data sync layer.
    All sync operations should go through this orchestrator so that the
    sync_metadata table reflects every run.
    """

    def __init__(
        self,
        api: FplApiAdapter,
        workflows: SyncWorkflows,
        metadata: SyncMetadataRepository,
        current_event: CurrentEventView,
        season: str,
        league_ids: Sequence[int] = (),
    ):
        """
        Args:
            api: Validated FPL API access (bootstrap memoised per cycle)
            workflows: One sync workflow per entity kind
            metadata: Sync status store
            current_event: Cached current gameweek
            season: Season string, e.g. "2526"
            league_ids: Classic leagues refreshed by ``sync_leagues``
        """
        self.api = api
        self.workflows = workflows
        self.metadata = metadata
        self.current_event = current_event
        self.season = season
        self.league_ids = list(league_ids)

    # ========================================================================
    # Per-entity syncs
    # ========================================================================

    async def sync_events(self) -> Result[list[Event], SyncError]:
        return await self._run(self.workflows.events, Scope(self.season))

    async def sync_teams(self) -> Result[list[Team], SyncError]:
        return await self._run(self.workflows.teams, Scope(self.season))

    async def sync_players(self) -> Result[list[Player], SyncError]:
        return await self._run(self.workflows.players, Scope(self.season))

    async def sync_player_stats(self, event_id: int) -> Result[list[PlayerStat], SyncError]:
        return await self._run(self.workflows.player_stats, Scope(self.season, event_id))

    async def sync_phases(self) -> Result[list[Phase], SyncError]:
        return await self._run(self.workflows.phases, Scope(self.season))

    async def sync_player_values(self, change_date: Optional[str] = None) -> Result[list[PlayerValue], SyncError]:
        """Record today's price changes (or those of ``change_date``, YYYYMMDD)."""
        return await self._run(self.workflows.player_values, Scope(self.season, change_date or today()))

    async def sync_fixtures(self) -> Result[list[Fixture], SyncError]:
        return await self._run(self.workflows.fixtures, Scope(self.season))

    async def sync_event_live(self, event_id: int) -> Result[list[EventLive], SyncError]:
        return await self._run(self.workflows.event_live, Scope(self.season, event_id))

    async def sync_classic_league(self, league_id: int) -> Result[list[ClassicLeague], SyncError]:
        return await self._run(self.workflows.leagues, Scope(self.season, league_id))

    # ========================================================================
    # Jobs
    # ========================================================================

    async def sync_bootstrap(self) -> Result[Dict, SyncError]:
        """
        Refresh everything bootstrap-static carries, with one request.

        Order matters: events first (they decide the current gameweek), then
        teams, players, phases, and for the current gameweek the player stats
        snapshot and today's price changes.
        """
        self.api.reset()
        try:
            events = await self.sync_events()
            if events.is_err():
                return events
            teams = await self.sync_teams()
            if teams.is_err():
                return teams
            players = await self.sync_players()
            if players.is_err():
                return players
            phases = await self.sync_phases()
            if phases.is_err():
                return phases

            current = pick_current(events.value)
            summary = {
                "events": len(events.value),
                "teams": len(teams.value),
                "players": len(players.value),
                "phases": len(phases.value),
                "current_event": current.id if current else None,
                "player_stats": 0,
                "player_values": 0,
            }
            if current is None:
                logger.warning(f"No current event in season {self.season}; skipping player stats and values")
                return Ok(summary)

            stats = await self.sync_player_stats(current.id)
            if stats.is_err():
                return stats
            summary["player_stats"] = len(stats.value)

            values = await self.sync_player_values()
            if values.is_err():
                return values
            summary["player_values"] = len(values.value)
            return Ok(summary)
        finally:
            self.api.reset()

    async def sync_fixtures_job(self) -> Result[Dict, SyncError]:
        return (await self.sync_fixtures()).map(lambda rows: {"fixtures": len(rows)})

    async def sync_live(self) -> Result[Dict, SyncError]:
        """Refresh live stats for the current gameweek, if there is one."""
        current = await self.resolve_current_event_id()
        if current.is_err():
            return current
        if current.value is None:
            logger.info("No current event; live sync skipped")
            return Ok({"current_event": None, "event_live": 0})

        live = await self.sync_event_live(current.value)
        return live.map(lambda rows: {"current_event": current.value, "event_live": len(rows)})

    async def sync_leagues(self) -> Result[Dict, SyncError]:
        synced: Dict[int, int] = {}
        for league_id in self.league_ids:
            result = await self.sync_classic_league(league_id)
            if result.is_err():
                return result
            synced[league_id] = sum(len(league.standings) for league in result.value)
        return Ok({"leagues": synced})

    async def run_full_cycle(self) -> Dict:
        """
        Run every job once, in dependency order.

        A failed job does not stop the later ones: fixtures and leagues can
        still be refreshed against the teams already cached.
        """
        token = None
        if not get_correlation_id():
            token = set_correlation_id(f"cycle-{uuid.uuid4().hex[:12]}")

        start_time = time.perf_counter()
        logger.info(f"Starting full sync cycle for season {self.season}")
        try:
            jobs = (
                ("bootstrap", self.sync_bootstrap),
                ("fixtures", self.sync_fixtures_job),
                ("live", self.sync_live),
                ("leagues", self.sync_leagues),
            )
            results: Dict[str, Dict] = {}
            for name, job in jobs:
                outcome = await job()
                if outcome.is_ok():
                    results[name] = {"success": True, **outcome.value}
                else:
                    results[name] = {"success": False, "error": outcome.error.to_dict()}

            duration_ms = int((time.perf_counter() - start_time) * 1000)
            success = all(job["success"] for job in results.values())
            logger.info(
                f"Full sync cycle complete: "
                f"{sum(job['success'] for job in results.values())}/{len(results)} jobs succeeded "
                f"({duration_ms}ms)"
            )
            return {"success": success, "season": self.season, "duration_ms": duration_ms, "jobs": results}
        finally:
            if token is not None:
                clear_correlation_id(token)

    # ========================================================================
    # Status
    # ========================================================================

    async def resolve_current_event_id(self) -> Result[Optional[int], SyncError]:
        current = await self.current_event.get(self.season)
        if current.is_err():
            return Err(SyncError(
                SyncErrorCode.OPERATION_ERROR,
                f"Could not resolve current event: {current.error.message}",
                details={"season": self.season},
                cause=current.error,
            ))
        return Ok(current.value.id if current.value else None)

    def get_sync_status(self) -> Result[Dict, SyncError]:
        """
        Return overall sync health status.

        Aggregates status from all sync_metadata entries: healthy when every
        entity kind's last run succeeded, degraded when some did, unhealthy
        when none did (or nothing has run yet).
        """
        rows = self.metadata.find_all()
        if rows.is_err():
            return Err(SyncError(
                SyncErrorCode.QUERY_ERROR,
                f"Could not read sync metadata: {rows.error.message}",
                cause=rows.error,
            ))

        all_metadata = rows.value
        total_jobs = len(all_metadata)
        success_count = sum(1 for m in all_metadata if m["last_sync_status"] == STATUS_SUCCESS)
        if total_jobs and success_count == total_jobs:
            health_status = "healthy"
        elif success_count > 0:
            health_status = "degraded"
        else:
            health_status = "unhealthy"

        return Ok({
            "health_status": health_status,
            "season": self.season,
            "total_jobs": total_jobs,
            "success_count": success_count,
            "status_by_entity": {m["entity"]: m for m in all_metadata},
            "totals": {"processed": sum(m["records_processed"] or 0 for m in all_metadata)},
        })

    # ========================================================================
    # Internals
    # ========================================================================

    async def _run(self, workflow: SyncWorkflow, scope: Scope) -> Result[list, SyncError]:
        entity = workflow.entity
        start_time = time.perf_counter()
        self._record(entity, self.metadata.mark_started(entity))

        result = await workflow.run(scope)

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if result.is_ok():
            self._record(entity, self.metadata.mark_succeeded(entity, len(result.value), duration_ms))
        else:
            self._record(entity, self.metadata.mark_failed(
                entity, result.error.code.value, result.error.message, duration_ms
            ))
        return result

    @staticmethod
    def _record(entity: str, outcome: Result) -> None:
        if outcome.is_err():
            logger.warning(f"Sync metadata for {entity} not updated: {outcome.error.message}")
