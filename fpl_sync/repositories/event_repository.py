"""
Event (gameweek) repository.

Usage:
    repo = EventRepository(session_factory)
    events = repo.find_all(Scope("2526"))
"""
from fpl_sync.domain.records import Event
from fpl_sync.models.models import Event as EventRow
from fpl_sync.repositories.base import BaseRepository


class EventRepository(BaseRepository[EventRow, Event]):
    """Repository for gameweeks; scoped by season only."""

    model_type = EventRow
    record_type = Event
