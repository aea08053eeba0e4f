"""
Classic league repository.

A league is persisted as one ``classic_leagues`` row plus one
``league_standings`` row per entry, and reassembled into a single
``ClassicLeague`` record with standings in rank order.

Each league is its own scope (``Scope(season, league_id)``) so syncing one
league never touches another.
"""
import logging
from typing import Optional, Sequence, Union

from sqlalchemy import delete, select

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import QueryError
from fpl_sync.core.result import Ok, Result
from fpl_sync.domain.records import ClassicLeague, LeagueStanding
from fpl_sync.models.models import ClassicLeague as ClassicLeagueRow
from fpl_sync.models.models import LeagueStanding as LeagueStandingRow
from fpl_sync.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_STANDING_FIELDS = tuple(LeagueStanding.model_fields)


class LeagueRepository(BaseRepository[ClassicLeagueRow, ClassicLeague]):
    model_type = ClassicLeagueRow
    record_type = ClassicLeague
    scope_column = "id"

    # ========================================================================
    # Reads
    # ========================================================================

    def find_all(self, scope: Scope) -> Result[list[ClassicLeague], QueryError]:
        def _query(session) -> list[ClassicLeague]:
            leagues = session.execute(
                select(ClassicLeagueRow)
                .where(*self._scope_criteria(scope))
                .order_by(ClassicLeagueRow.id)
            ).scalars().all()
            return [self._assemble(session, row) for row in leagues]

        return self._run("find_all", _query)

    def find_by_id(self, scope: Scope, id: Union[int, str]) -> Result[Optional[ClassicLeague], QueryError]:
        try:
            league_id = self.parse_id(id)
        except ValueError:
            return Ok(None)

        def _query(session) -> Optional[ClassicLeague]:
            row = session.get(ClassicLeagueRow, league_id)
            return self._assemble(session, row) if row is not None else None

        return self._run("find_by_id", _query)

    def find_by_ids(self, scope: Scope, ids: Sequence[Union[int, str]]) -> Result[list[ClassicLeague], QueryError]:
        league_ids = self._parse_ids(ids)
        if not league_ids:
            return Ok([])

        def _query(session) -> list[ClassicLeague]:
            leagues = session.execute(
                select(ClassicLeagueRow)
                .where(ClassicLeagueRow.id.in_(league_ids))
                .order_by(ClassicLeagueRow.id)
            ).scalars().all()
            return [self._assemble(session, row) for row in leagues]

        return self._run("find_by_ids", _query)

    # ========================================================================
    # Writes
    # ========================================================================

    def save_batch(self, records: Sequence[ClassicLeague]) -> Result[list[ClassicLeague], QueryError]:
        """Insert league rows and their standings, skipping existing keys."""
        records = list(records)
        if not records:
            return Ok([])

        def _write(session) -> list[ClassicLeague]:
            session.execute(
                self._insert_ignoring_duplicates(session),
                [self.to_row(league) for league in records],
            )
            standings = [
                {"league_id": league.id, **standing.model_dump()}
                for league in records
                for standing in league.standings
            ]
            if standings:
                session.execute(
                    self._insert_ignoring_duplicates(session, LeagueStandingRow),
                    standings,
                )
            return records

        result = self._run("save_batch", _write, write=True)
        if result.is_ok():
            total = sum(len(league.standings) for league in records)
            logger.info(f"Saved {len(records)} leagues with {total} standings")
        return result

    def delete_all(self, scope: Scope) -> Result[None, QueryError]:
        def _write(session) -> None:
            league_ids = select(ClassicLeagueRow.id).where(*self._scope_criteria(scope))
            session.execute(delete(LeagueStandingRow).where(LeagueStandingRow.league_id.in_(league_ids)))
            session.execute(delete(ClassicLeagueRow).where(*self._scope_criteria(scope)))

        return self._run("delete_all", _write, write=True)

    def delete_by_ids(self, scope: Scope, ids: Sequence[Union[int, str]]) -> Result[None, QueryError]:
        league_ids = self._parse_ids(ids)
        if not league_ids:
            return Ok(None)

        def _write(session) -> None:
            session.execute(delete(LeagueStandingRow).where(LeagueStandingRow.league_id.in_(league_ids)))
            session.execute(delete(ClassicLeagueRow).where(ClassicLeagueRow.id.in_(league_ids)))

        return self._run("delete_by_ids", _write, write=True)

    # ========================================================================
    # Mapping
    # ========================================================================

    def _assemble(self, session, row: ClassicLeagueRow) -> ClassicLeague:
        standing_rows = session.execute(
            select(LeagueStandingRow)
            .where(LeagueStandingRow.league_id == row.id)
            .order_by(LeagueStandingRow.rank_sort, LeagueStandingRow.entry)
        ).scalars()
        standings = [
            LeagueStanding.model_validate({name: getattr(s, name) for name in _STANDING_FIELDS})
            for s in standing_rows
        ]
        league = self.to_record(row)
        return league.model_copy(update={"standings": standings})

