"""
Sync metadata repository.

One row per entity kind, tracking the last sync attempt: when it started and
completed, its status, how many records it persisted and why it failed.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fpl_sync.core.errors import QueryError
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.models.models import SyncMetadata
from fpl_sync.repositories.base import to_query_error

logger = logging.getLogger(__name__)

STATUS_IN_PROGRESS = "in_progress"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class SyncMetadataRepository:
    """Tracks sync status per entity kind."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def mark_started(self, entity: str) -> Result[None, QueryError]:
        def _update(metadata: SyncMetadata) -> None:
            metadata.last_sync_started_at = datetime.now(timezone.utc)
            metadata.last_sync_status = STATUS_IN_PROGRESS

        return self._upsert(entity, _update)

    def mark_succeeded(self, entity: str, records: int, duration_ms: int) -> Result[None, QueryError]:
        def _update(metadata: SyncMetadata) -> None:
            metadata.last_sync_completed_at = datetime.now(timezone.utc)
            metadata.last_sync_status = STATUS_SUCCESS
            metadata.records_processed = records
            metadata.sync_duration_ms = duration_ms
            metadata.error_code = None
            metadata.error_message = None

        return self._upsert(entity, _update)

    def mark_failed(
        self, entity: str, error_code: str, error_message: str, duration_ms: int
    ) -> Result[None, QueryError]:
        def _update(metadata: SyncMetadata) -> None:
            metadata.last_sync_completed_at = datetime.now(timezone.utc)
            metadata.last_sync_status = STATUS_FAILED
            metadata.records_processed = 0
            metadata.sync_duration_ms = duration_ms
            metadata.error_code = error_code
            metadata.error_message = error_message[:1000]

        return self._upsert(entity, _update)

    def find_all(self) -> Result[list[dict], QueryError]:
        session = self.session_factory()
        try:
            rows = session.execute(select(SyncMetadata).order_by(SyncMetadata.entity)).scalars()
            return Ok([self._to_dict(row) for row in rows])
        except SQLAlchemyError as e:
            return Err(to_query_error(e, "find_all", SyncMetadata.__tablename__))
        finally:
            session.close()

    def find(self, entity: str) -> Result[Optional[dict], QueryError]:
        session = self.session_factory()
        try:
            row = session.execute(
                select(SyncMetadata).where(SyncMetadata.entity == entity)
            ).scalars().first()
            return Ok(self._to_dict(row) if row is not None else None)
        except SQLAlchemyError as e:
            return Err(to_query_error(e, "find", SyncMetadata.__tablename__))
        finally:
            session.close()

    def _upsert(self, entity: str, update) -> Result[None, QueryError]:
        session = self.session_factory()
        try:
            metadata = session.execute(
                select(SyncMetadata).where(SyncMetadata.entity == entity)
            ).scalars().first()
            if metadata is None:
                metadata = SyncMetadata(entity=entity, records_processed=0)
                session.add(metadata)
            update(metadata)
            session.commit()
            return Ok(None)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to update sync metadata for {entity}: {e}")
            return Err(to_query_error(e, "upsert", SyncMetadata.__tablename__))
        finally:
            session.close()

    @staticmethod
    def _to_dict(row: SyncMetadata) -> dict:
        return {
            "entity": row.entity,
            "last_sync_started_at": row.last_sync_started_at.isoformat() if row.last_sync_started_at else None,
            "last_sync_completed_at": row.last_sync_completed_at.isoformat() if row.last_sync_completed_at else None,
            "last_sync_status": row.last_sync_status,
            "records_processed": row.records_processed,
            "sync_duration_ms": row.sync_duration_ms,
            "error_code": row.error_code,
            "error_message": row.error_message,
        }
