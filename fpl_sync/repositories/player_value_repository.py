"""
Player value repository.

Rows are keyed by (element_id, change_date); the scope's subscope is the
change date as ``YYYYMMDD`` and the natural id is the element id.

Usage:
    repo = PlayerValueRepository(session_factory)
    changes = repo.find_all(Scope("2526", "20250815"))
    baseline = repo.latest_values_before("20250815")
"""
from typing import Any, Union

from sqlalchemy import func, select

from fpl_sync.core.errors import QueryError
from fpl_sync.core.result import Result
from fpl_sync.domain.records import PlayerValue
from fpl_sync.models.models import PlayerValue as PlayerValueRow
from fpl_sync.repositories.base import BaseRepository


class PlayerValueRepository(BaseRepository[PlayerValueRow, PlayerValue]):
    model_type = PlayerValueRow
    record_type = PlayerValue
    lookup_column = "element_id"
    scope_column = "change_date"

    def scope_value(self, subscope: Union[int, str]) -> Any:
        return str(subscope)

    def find_by_element(self, element_id: int) -> Result[list[PlayerValue], QueryError]:
        """Every recorded change of one player, oldest first."""
        def _query(session) -> list[PlayerValue]:
            rows = session.execute(
                select(PlayerValueRow)
                .where(PlayerValueRow.element_id == element_id)
                .order_by(PlayerValueRow.change_date)
            ).scalars()
            return [self.to_record(row) for row in rows]

        return self._run("find_by_element", _query)

    def latest_values_before(self, change_date: str) -> Result[dict[int, int], QueryError]:
        """Each player's most recent value recorded strictly before ``change_date``."""
        def _query(session) -> dict[int, int]:
            latest = (
                select(
                    PlayerValueRow.element_id,
                    func.max(PlayerValueRow.change_date).label("change_date"),
                )
                .where(PlayerValueRow.change_date < change_date)
                .group_by(PlayerValueRow.element_id)
                .subquery()
            )
            rows = session.execute(
                select(PlayerValueRow.element_id, PlayerValueRow.value).join(
                    latest,
                    (PlayerValueRow.element_id == latest.c.element_id)
                    & (PlayerValueRow.change_date == latest.c.change_date),
                )
            )
            return {element_id: value for element_id, value in rows}

        return self._run("latest_values_before", _query)
