"""
Explicit wiring of the service graph.

``build_container`` constructs every client, cache, repository, workflow and
service once and hands them out by attribute. The FastAPI lifespan and the
standalone scheduler both call it; tests pass their own Redis client, session
factory and FPL client.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from redis.asyncio import Redis
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from fpl_sync.cache.entity_cache import EntityCache
from fpl_sync.cache.keys import CachePrefix
from fpl_sync.clients.fpl_client import FplClient
from fpl_sync.core.config import Settings
from fpl_sync.core.database import create_db_engine, create_session_factory
from fpl_sync.core.redis import create_redis_client
from fpl_sync.core.season import current_season
from fpl_sync.domain.operations import DomainOperations
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
from fpl_sync.domain.views import CurrentEventView, TeamFixtureView
from fpl_sync.repositories import (
    EventLiveRepository,
    EventRepository,
    FixtureRepository,
    LeagueRepository,
    PhaseRepository,
    PlayerRepository,
    PlayerStatRepository,
    PlayerValueRepository,
    SyncMetadataRepository,
    TeamRepository,
)
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
from fpl_sync.services.sync.adapters import (
    EventLiveSource,
    EventSource,
    FixtureSource,
    FplApiAdapter,
    LeagueSource,
    PhaseSource,
    PlayerSource,
    PlayerStatSource,
    PlayerValueSource,
    TeamSource,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator, SyncWorkflows
from fpl_sync.services.sync.workflow import SyncWorkflow

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    season: str
    redis: Redis
    session_factory: sessionmaker[Session]
    engine: Optional[Engine]
    fpl_client: FplClient
    metadata: SyncMetadataRepository
    orchestrator: SyncOrchestrator
    events: EventService
    teams: TeamService
    players: PlayerService
    player_stats: PlayerStatService
    fixtures: FixtureService
    event_live: EventLiveService
    leagues: LeagueService
    phases: PhaseService
    player_values: PlayerValueService
    sync: SyncService
    owns_redis: bool = True
    owns_fpl_client: bool = True

    async def aclose(self) -> None:
        if self.owns_fpl_client:
            await self.fpl_client.aclose()
        if self.owns_redis:
            await self.redis.aclose()
        if self.engine is not None:
            self.engine.dispose()


def _operations(redis: Redis, prefix: CachePrefix, record_type: type, repository) -> DomainOperations:
    return DomainOperations(EntityCache(redis, prefix, record_type, provider=repository), repository)


def build_container(
    settings: Settings,
    redis: Optional[Redis] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
    fpl_client: Optional[FplClient] = None,
    season: Optional[str] = None,
) -> Container:
    """
    Build the service graph.

    Args:
        settings: Application settings
        redis: Redis client (built from REDIS_URL when omitted)
        session_factory: Session factory (engine built from DATABASE_URL when omitted)
        fpl_client: FPL transport (built from the FPL_* settings when omitted)
        season: Season string (CURRENT_SEASON or today's season when omitted)
    """
    season = season or current_season(settings.CURRENT_SEASON)

    owns_redis = redis is None
    if redis is None:
        redis = create_redis_client(settings.REDIS_URL, settings.REDIS_MAX_CONNECTIONS)

    engine = None
    if session_factory is None:
        engine = create_db_engine(settings.DATABASE_URL, settings.DATABASE_POOL_SIZE)
        session_factory = create_session_factory(engine)

    owns_fpl_client = fpl_client is None
    if fpl_client is None:
        fpl_client = FplClient(
            base_url=settings.FPL_API_BASE_URL,
            timeout=settings.FPL_API_TIMEOUT,
            user_agent=settings.FPL_USER_AGENT,
            max_retries=settings.FPL_MAX_RETRIES,
        )

    events_ops: DomainOperations[Event] = _operations(
        redis, CachePrefix.EVENT, Event, EventRepository(session_factory))
    teams_ops: DomainOperations[Team] = _operations(
        redis, CachePrefix.TEAM, Team, TeamRepository(session_factory))
    players_ops: DomainOperations[Player] = _operations(
        redis, CachePrefix.PLAYER, Player, PlayerRepository(session_factory))
    player_stats_ops: DomainOperations[PlayerStat] = _operations(
        redis, CachePrefix.PLAYER_STAT, PlayerStat, PlayerStatRepository(session_factory))
    fixtures_ops: DomainOperations[Fixture] = _operations(
        redis, CachePrefix.FIXTURE, Fixture, FixtureRepository(session_factory))
    live_ops: DomainOperations[EventLive] = _operations(
        redis, CachePrefix.LIVE, EventLive, EventLiveRepository(session_factory))
    leagues_ops: DomainOperations[ClassicLeague] = _operations(
        redis, CachePrefix.LEAGUE, ClassicLeague, LeagueRepository(session_factory))
    phases_ops: DomainOperations[Phase] = _operations(
        redis, CachePrefix.PHASE, Phase, PhaseRepository(session_factory))
    player_values_repo = PlayerValueRepository(session_factory)
    player_values_ops: DomainOperations[PlayerValue] = _operations(
        redis, CachePrefix.PLAYER_VALUE, PlayerValue, player_values_repo)

    current_event = CurrentEventView(redis, events_ops)
    team_fixtures = TeamFixtureView(redis, fixtures_ops, teams_ops)

    api = FplApiAdapter(fpl_client)
    workflows = SyncWorkflows(
        events=SyncWorkflow(EventSource(api), events_ops, views=[current_event]),
        teams=SyncWorkflow(TeamSource(api), teams_ops, views=[team_fixtures.on_teams()]),
        players=SyncWorkflow(PlayerSource(api), players_ops),
        player_stats=SyncWorkflow(PlayerStatSource(api), player_stats_ops),
        fixtures=SyncWorkflow(FixtureSource(api), fixtures_ops, views=[team_fixtures]),
        event_live=SyncWorkflow(EventLiveSource(api), live_ops),
        leagues=SyncWorkflow(LeagueSource(api), leagues_ops),
        phases=SyncWorkflow(PhaseSource(api), phases_ops),
        player_values=SyncWorkflow(PlayerValueSource(api, player_values_repo), player_values_ops),
    )
    metadata = SyncMetadataRepository(session_factory)
    orchestrator = SyncOrchestrator(
        api=api,
        workflows=workflows,
        metadata=metadata,
        current_event=current_event,
        season=season,
        league_ids=settings.LEAGUE_IDS,
    )

    max_event_id = settings.MAX_EVENT_ID
    logger.info(f"Service container built for season {season}")
    return Container(
        settings=settings,
        season=season,
        redis=redis,
        session_factory=session_factory,
        engine=engine,
        fpl_client=fpl_client,
        metadata=metadata,
        orchestrator=orchestrator,
        events=EventService(events_ops, current_event, orchestrator, season, max_event_id),
        teams=TeamService(teams_ops, orchestrator, season),
        players=PlayerService(players_ops, orchestrator, season),
        player_stats=PlayerStatService(player_stats_ops, orchestrator, season, max_event_id),
        fixtures=FixtureService(fixtures_ops, team_fixtures, orchestrator, season, max_event_id),
        event_live=EventLiveService(live_ops, orchestrator, season, max_event_id),
        leagues=LeagueService(leagues_ops, orchestrator, season),
        phases=PhaseService(phases_ops, orchestrator, season),
        player_values=PlayerValueService(player_values_ops, player_values_repo, orchestrator, season),
        sync=SyncService(orchestrator),
        owns_redis=owns_redis,
        owns_fpl_client=owns_fpl_client,
    )
