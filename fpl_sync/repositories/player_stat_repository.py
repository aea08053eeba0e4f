"""
Player stat repository.

Rows are keyed by (element_id, event_id); the scope's subscope is the event id
and the natural id is either the element id or the composite
``"{element_id}_{event_id}"`` used as the cache field.
"""
from typing import Union

from fpl_sync.domain.records import PlayerStat
from fpl_sync.models.models import PlayerStat as PlayerStatRow
from fpl_sync.repositories.base import BaseRepository


class PlayerStatRepository(BaseRepository[PlayerStatRow, PlayerStat]):
    model_type = PlayerStatRow
    record_type = PlayerStat
    lookup_column = "element_id"
    scope_column = "event_id"

    def parse_id(self, id: Union[int, str]) -> int:
        if isinstance(id, str) and "_" in id:
            id = id.split("_", 1)[0]
        return super().parse_id(id)
