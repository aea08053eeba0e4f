"""
Base repository class for the relational store.

Repositories own their sessions: each operation opens a session from the
injected ``sessionmaker``, commits or rolls back, and closes it. Every
``SQLAlchemyError`` is returned as ``Err(QueryError)``; nothing raises.

Rows map to records field-for-field, so a concrete repository usually only
declares its model, record type and how a ``Scope`` narrows the table.

Example:
    class TeamRepository(BaseRepository[TeamRow, Team]):
        model_type = TeamRow
        record_type = Team
"""
import logging
from typing import Any, Callable, Generic, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, DisconnectionError, IntegrityError, InterfaceError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fpl_sync.cache.keys import Scope
from fpl_sync.cache.provider import DataProvider
from fpl_sync.core.errors import QueryError, QueryErrorCode
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.records import Record

logger = logging.getLogger(__name__)

M = TypeVar("M")
T = TypeVar("T", bound=Record)
R = TypeVar("R")


def to_query_error(error: SQLAlchemyError, operation: str, table: str) -> QueryError:
    if isinstance(error, IntegrityError):
        code = QueryErrorCode.CONSTRAINT_ERROR
    elif isinstance(error, (DisconnectionError, InterfaceError)) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        code = QueryErrorCode.CONNECTION_ERROR
    else:
        code = QueryErrorCode.QUERY_ERROR
    return QueryError(
        code,
        f"{operation} on {table} failed: {type(error).__name__}",
        details={"operation": operation, "table": table},
        cause=error,
    )


class BaseRepository(DataProvider[T], Generic[M, T]):
    """
    Base repository providing scoped reads, idempotent batch inserts and deletes.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        record_type: The record class rows are mapped to
        lookup_column: Column identifying a row within its scope
        scope_column: Column the scope's subscope narrows on (None = season-wide)
    """

    model_type: Type[M]
    record_type: Type[T]
    lookup_column: str = "id"
    scope_column: Optional[str] = None

    def __init__(self, session_factory: sessionmaker[Session]):
        """
        Initialize the repository.

        Args:
            session_factory: Factory producing a fresh session per operation
        """
        self.session_factory = session_factory

    @property
    def table_name(self) -> str:
        return self.model_type.__tablename__

    # ========================================================================
    # Reads
    # ========================================================================

    def find_all(self, scope: Scope) -> Result[list[T], QueryError]:
        """All rows in the scope, ordered by primary key."""
        def _query(session: Session) -> list[T]:
            stmt = select(self.model_type).where(*self._scope_criteria(scope)).order_by(*self._order_by())
            return [self.to_record(row) for row in session.execute(stmt).scalars()]

        return self._run("find_all", _query)

    def find_by_id(self, scope: Scope, id: Union[int, str]) -> Result[Optional[T], QueryError]:
        """Single row by natural id, ``Ok(None)`` when absent."""
        try:
            lookup = self.parse_id(id)
        except ValueError:
            return Ok(None)

        def _query(session: Session) -> Optional[T]:
            stmt = select(self.model_type).where(
                *self._scope_criteria(scope),
                getattr(self.model_type, self.lookup_column) == lookup,
            )
            row = session.execute(stmt).scalars().first()
            return self.to_record(row) if row is not None else None

        return self._run("find_by_id", _query)

    def find_by_ids(self, scope: Scope, ids: Sequence[Union[int, str]]) -> Result[list[T], QueryError]:
        lookups = self._parse_ids(ids)
        if not lookups:
            return Ok([])

        def _query(session: Session) -> list[T]:
            stmt = (
                select(self.model_type)
                .where(
                    *self._scope_criteria(scope),
                    getattr(self.model_type, self.lookup_column).in_(lookups),
                )
                .order_by(*self._order_by())
            )
            return [self.to_record(row) for row in session.execute(stmt).scalars()]

        return self._run("find_by_ids", _query)

    # DataProvider interface used by EntityCache on a miss

    def get_one(self, scope: Scope, id: Union[int, str]) -> Result[Optional[T], QueryError]:
        return self.find_by_id(scope, id)

    def get_all(self, scope: Scope) -> Result[list[T], QueryError]:
        return self.find_all(scope)

    # ========================================================================
    # Writes
    # ========================================================================

    def save_batch(self, records: Sequence[T]) -> Result[list[T], QueryError]:
        """
        Insert records, skipping rows whose primary key already exists.

        Returns:
            The records that were offered for insert
        """
        records = list(records)
        if not records:
            return Ok([])

        def _write(session: Session) -> list[T]:
            rows = [self.to_row(record) for record in records]
            session.execute(self._insert_ignoring_duplicates(session), rows)
            return records

        result = self._run("save_batch", _write, write=True)
        if result.is_ok():
            logger.info(f"Saved batch of {len(records)} rows into {self.table_name}")
        return result

    def delete_all(self, scope: Scope) -> Result[None, QueryError]:
        def _write(session: Session) -> None:
            session.execute(delete(self.model_type).where(*self._scope_criteria(scope)))

        return self._run("delete_all", _write, write=True)

    def delete_by_ids(self, scope: Scope, ids: Sequence[Union[int, str]]) -> Result[None, QueryError]:
        lookups = self._parse_ids(ids)
        if not lookups:
            return Ok(None)

        def _write(session: Session) -> None:
            session.execute(
                delete(self.model_type).where(
                    *self._scope_criteria(scope),
                    getattr(self.model_type, self.lookup_column).in_(lookups),
                )
            )

        return self._run("delete_by_ids", _write, write=True)

    # ========================================================================
    # Mapping
    # ========================================================================

    def to_row(self, record: T) -> dict[str, Any]:
        columns = self._column_names()
        return {k: v for k, v in record.model_dump().items() if k in columns}

    def to_record(self, row: M) -> T:
        columns = self._column_names()
        data = {name: getattr(row, name) for name in self.record_type.model_fields if name in columns}
        return self.record_type.model_validate(data)

    def scope_value(self, subscope: Union[int, str]) -> Any:
        """Subscope to ``scope_column`` value."""
        return int(subscope)

    def parse_id(self, id: Union[int, str]) -> int:
        """Natural id to ``lookup_column`` value; raises ValueError on garbage."""
        if isinstance(id, bool):
            raise ValueError(f"Invalid id: {id!r}")
        return int(id)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _scope_criteria(self, scope: Scope) -> list[Any]:
        if self.scope_column is None or scope.subscope is None:
            return []
        return [getattr(self.model_type, self.scope_column) == self.scope_value(scope.subscope)]

    def _order_by(self) -> list[Any]:
        return list(self.model_type.__table__.primary_key.columns)

    def _column_names(self) -> set[str]:
        return {column.key for column in self.model_type.__table__.columns}

    def _parse_ids(self, ids: Sequence[Union[int, str]]) -> list[int]:
        lookups = []
        for id in ids:
            try:
                lookups.append(self.parse_id(id))
            except ValueError:
                logger.debug(f"Ignoring unparseable id {id!r} for {self.table_name}")
        return lookups

    def _insert_ignoring_duplicates(self, session: Session, model: Optional[Any] = None):
        model = model if model is not None else self.model_type
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model).on_conflict_do_nothing()
        if dialect == "sqlite":
            return sqlite.insert(model).on_conflict_do_nothing()
        return insert(model)

    def _run(
        self,
        operation: str,
        fn: Callable[[Session], R],
        write: bool = False,
    ) -> Result[R, QueryError]:
        session = self.session_factory()
        try:
            value = fn(session)
            if write:
                session.commit()
            return Ok(value)
        except SQLAlchemyError as e:
            session.rollback()
            error = to_query_error(e, operation, self.table_name)
            logger.error(f"{error.message}: {e}", extra={"table": self.table_name, "operation": operation})
            return Err(error)
        finally:
            session.close()
