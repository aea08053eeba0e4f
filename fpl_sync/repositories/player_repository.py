"""
Player repository.

Usage:
    repo = PlayerRepository(session_factory)
    players = repo.find_all(Scope("2526"))
"""
from fpl_sync.domain.records import Player
from fpl_sync.models.models import Player as PlayerRow
from fpl_sync.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[PlayerRow, Player]):
    """Repository for FPL elements; scoped by season only."""

    model_type = PlayerRow
    record_type = Player
