"""
Player stat service: season-to-date stats snapshots, one bucket per gameweek.
"""
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import PlayerStat
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_event_id,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class PlayerStatService(BaseService):

    def __init__(
        self,
        player_stats: DomainOperations[PlayerStat],
        orchestrator: SyncOrchestrator,
        season: str,
        max_event_id: int = 38,
    ):
        super().__init__(season)
        self.player_stats = player_stats
        self.orchestrator = orchestrator
        self.max_event_id = max_event_id

    async def get_player_stats(self, event_id: int) -> Result[list[PlayerStat], ServiceError]:
        valid = validate_event_id(event_id, self.max_event_id)
        if valid.is_err():
            return valid
        result = await self.player_stats.get_all(Scope(self.season, event_id))
        return result.map_error(service_error_from_domain)

    async def get_player_stat(self, event_id: int, element_id: int) -> Result[PlayerStat, ServiceError]:
        valid = validate_event_id(event_id, self.max_event_id).and_then(
            lambda _: validate_positive_id(element_id, "element_id")
        )
        if valid.is_err():
            return valid

        result = await self.player_stats.get_by_id(Scope(self.season, event_id), f"{element_id}_{event_id}")
        return require(
            result.map_error(service_error_from_domain),
            "Player stat",
            event_id=event_id,
            element_id=element_id,
        )

    async def sync_player_stats(self, event_id: int) -> Result[list[PlayerStat], ServiceError]:
        valid = validate_event_id(event_id, self.max_event_id)
        if valid.is_err():
            return valid
        return (await self.orchestrator.sync_player_stats(event_id)).map_error(service_error_from_sync)
