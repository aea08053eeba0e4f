"""
Player service.

Players are cached as one season bucket; per-team listings filter that bucket
rather than keeping a second index.
"""
from typing import Optional

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import Player
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class PlayerService(BaseService):

    def __init__(self, players: DomainOperations[Player], orchestrator: SyncOrchestrator, season: str):
        super().__init__(season)
        self.players = players
        self.orchestrator = orchestrator

    async def get_player(self, player_id: int) -> Result[Player, ServiceError]:
        valid = validate_positive_id(player_id, "player_id")
        if valid.is_err():
            return valid
        result = await self.players.get_by_id(Scope(self.season), player_id)
        return require(result.map_error(service_error_from_domain), "Player", player_id=player_id)

    async def get_players(
        self, team_id: Optional[int] = None, element_type: Optional[int] = None
    ) -> Result[list[Player], ServiceError]:
        result = await self.players.get_all(Scope(self.season))

        def _filter(players: list[Player]) -> list[Player]:
            return [
                p for p in players
                if (team_id is None or p.team_id == team_id)
                and (element_type is None or p.element_type == element_type)
            ]

        return result.map(_filter).map_error(service_error_from_domain)

    async def sync_players(self) -> Result[list[Player], ServiceError]:
        return (await self.orchestrator.sync_players()).map_error(service_error_from_sync)
