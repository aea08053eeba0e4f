"""
Repositories for the relational store.

Each repository wraps one table (leagues wrap two) and doubles as the
``DataProvider`` its entity cache falls back to on a miss.
"""

from fpl_sync.repositories.base import BaseRepository
from fpl_sync.repositories.event_repository import EventRepository
from fpl_sync.repositories.team_repository import TeamRepository
from fpl_sync.repositories.player_repository import PlayerRepository
from fpl_sync.repositories.player_stat_repository import PlayerStatRepository
from fpl_sync.repositories.fixture_repository import FixtureRepository
from fpl_sync.repositories.phase_repository import PhaseRepository
from fpl_sync.repositories.player_value_repository import PlayerValueRepository
from fpl_sync.repositories.event_live_repository import EventLiveRepository
from fpl_sync.repositories.league_repository import LeagueRepository
from fpl_sync.repositories.sync_metadata_repository import SyncMetadataRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "TeamRepository",
    "PlayerRepository",
    "PlayerStatRepository",
    "FixtureRepository",
    "PhaseRepository",
    "PlayerValueRepository",
    "EventLiveRepository",
    "LeagueRepository",
    "SyncMetadataRepository",
]
