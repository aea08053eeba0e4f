"""
Event (gameweek) service.

Reads go through the cache; the current gameweek comes from the derived
current-event view, and the next / last gameweeks are plain id arithmetic off
it. Event ids are validated against 1..MAX_EVENT_ID before the cache is touched.
"""
import logging

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Err, Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import Event
from fpl_sync.domain.views import CurrentEventView
from fpl_sync.services.base import (
    BaseService,
    not_found,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_event_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


class EventService(BaseService):

    def __init__(
        self,
        events: DomainOperations[Event],
        current_event: CurrentEventView,
        orchestrator: SyncOrchestrator,
        season: str,
        max_event_id: int = 38,
    ):
        super().__init__(season)
        self.events = events
        self.current_event = current_event
        self.orchestrator = orchestrator
        self.max_event_id = max_event_id

    async def get_event(self, event_id: int) -> Result[Event, ServiceError]:
        valid = validate_event_id(event_id, self.max_event_id)
        if valid.is_err():
            return valid

        result = await self.events.get_by_id(Scope(self.season), event_id)
        return require(result.map_error(service_error_from_domain), "Event", event_id=event_id)

    async def get_events(self) -> Result[list[Event], ServiceError]:
        result = await self.events.get_all(Scope(self.season))
        return result.map_error(service_error_from_domain)

    async def get_current_event(self) -> Result[Event, ServiceError]:
        result = await self.current_event.get(self.season)
        return require(result.map_error(service_error_from_domain), "Current event", season=self.season)

    async def get_next_event(self) -> Result[Event, ServiceError]:
        return await self._offset_from_current(1, "Next event")

    async def get_last_event(self) -> Result[Event, ServiceError]:
        return await self._offset_from_current(-1, "Last event")

    async def sync_events(self) -> Result[list[Event], ServiceError]:
        result = await self.orchestrator.sync_events()
        return result.map_error(service_error_from_sync)

    async def _offset_from_current(self, offset: int, what: str) -> Result[Event, ServiceError]:
        current = await self.get_current_event()
        if current.is_err():
            return current

        event_id = current.value.id + offset
        if not 1 <= event_id <= self.max_event_id:
            return Err(not_found(what, current_event=current.value.id))
        return await self.get_event(event_id)
