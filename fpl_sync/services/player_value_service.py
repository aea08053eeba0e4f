"""
Player value service: daily price changes.

One bucket per change date holds every player whose price was first seen or
moved that day. A player's full price history is read straight from the
repository since it spans buckets.
"""
from typing import Optional

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations, domain_error_from_query
from fpl_sync.domain.records import PlayerValue
from fpl_sync.repositories.player_value_repository import PlayerValueRepository
from fpl_sync.services.base import (
    BaseService,
    service_error_from_domain,
    service_error_from_sync,
    validate_change_date,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class PlayerValueService(BaseService):

    def __init__(
        self,
        player_values: DomainOperations[PlayerValue],
        repository: PlayerValueRepository,
        orchestrator: SyncOrchestrator,
        season: str,
    ):
        super().__init__(season)
        self.player_values = player_values
        self.repository = repository
        self.orchestrator = orchestrator

    async def get_player_values(self, change_date: str) -> Result[list[PlayerValue], ServiceError]:
        valid = validate_change_date(change_date)
        if valid.is_err():
            return valid
        result = await self.player_values.get_all(Scope(self.season, change_date))
        return result.map_error(service_error_from_domain)

    async def get_player_values_by_element(self, element_id: int) -> Result[list[PlayerValue], ServiceError]:
        valid = validate_positive_id(element_id, "element_id")
        if valid.is_err():
            return valid
        result = self.repository.find_by_element(element_id)
        return result.map_error(
            lambda e: service_error_from_domain(domain_error_from_query(e, {"element_id": element_id}))
        )

    async def sync_player_values(self, change_date: Optional[str] = None) -> Result[list[PlayerValue], ServiceError]:
        if change_date is not None:
            valid = validate_change_date(change_date)
            if valid.is_err():
                return valid
        return (await self.orchestrator.sync_player_values(change_date)).map_error(service_error_from_sync)
