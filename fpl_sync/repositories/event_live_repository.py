"""Live gameweek stats repository; the scope's subscope is the event id."""
from fpl_sync.domain.records import EventLive
from fpl_sync.models.models import EventLive as EventLiveRow
from fpl_sync.repositories.base import BaseRepository


class EventLiveRepository(BaseRepository[EventLiveRow, EventLive]):
    model_type = EventLiveRow
    record_type = EventLive
    lookup_column = "element_id"
    scope_column = "event_id"
