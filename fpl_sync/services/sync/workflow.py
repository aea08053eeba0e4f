"""
Generic sync workflow: source -> records -> database -> cache -> derived views.

Steps, strictly in order, each one awaited before the next starts:

1. fetch the raw payload from the source adapter
2. map every item to a record (one failure aborts the run)
3. delete the persisted rows of the scope
4. save the mapped records
5. re-read the persisted rows (authoritative for everything after)
6. replace the cache bucket with the persisted rows
7. rebuild derived views from the persisted rows

A failure at any step stops the run and is returned as ``Err(SyncError)``.
Nothing here retries; the HTTP transport owns retries.
"""
import logging
import time
from typing import Generic, Optional, Sequence, TypeVar

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import AppError, DataLayerError, DataLayerErrorCode, SyncError, SyncErrorCode
from fpl_sync.core.logging import clear_sync_cycle, set_sync_cycle
from fpl_sync.core.metrics import sync_duration_seconds, sync_records_total, sync_runs_total
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.views import DerivedView
from fpl_sync.services.sync.adapters import SourceAdapter

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")

_FETCH_CODES = {
    DataLayerErrorCode.FETCH_ERROR: SyncErrorCode.FETCH_ERROR,
    DataLayerErrorCode.VALIDATION_ERROR: SyncErrorCode.VALIDATION_ERROR,
    DataLayerErrorCode.MAPPING_ERROR: SyncErrorCode.MAPPING_ERROR,
}


class SyncWorkflow(Generic[R, T]):
    """
    Keeps one entity kind's database rows, cache bucket and views in step
    with its source.

    Usage:
        workflow = SyncWorkflow(EventSource(api), events_ops, views=[current_event_view])
        result = await workflow.run(Scope("2526"))
    """

    def __init__(
        self,
        source: SourceAdapter[R, T],
        operations: DomainOperations[T],
        views: Sequence[DerivedView[T]] = (),
    ):
        self.source = source
        self.operations = operations
        self.views = list(views)

    @property
    def entity(self) -> str:
        return self.source.entity

    async def run(self, scope: Scope) -> Result[list[T], SyncError]:
        token = set_sync_cycle(f"{self.entity}::{scope.label}")
        started = time.perf_counter()
        try:
            result = await self._run_steps(scope)
        finally:
            clear_sync_cycle(token)

        elapsed = time.perf_counter() - started
        sync_duration_seconds.labels(entity=self.entity).observe(elapsed)
        if result.is_ok():
            sync_runs_total.labels(entity=self.entity, status="success").inc()
            sync_records_total.labels(entity=self.entity).inc(len(result.value))
            logger.info(
                f"Synced {len(result.value)} {self.entity} records for {scope.label} in {elapsed:.2f}s"
            )
        else:
            sync_runs_total.labels(entity=self.entity, status="failed").inc()
            logger.error(
                f"Sync of {self.entity} for {scope.label} failed: {result.error.message}",
                extra={"code": result.error.code.value, "entity": self.entity},
            )
        return result

    async def _run_steps(self, scope: Scope) -> Result[list[T], SyncError]:
        fetched = await self.source.fetch(scope)
        if fetched.is_err():
            error = fetched.error
            code = _FETCH_CODES[error.code] if isinstance(error, DataLayerError) else SyncErrorCode.QUERY_ERROR
            return Err(self._error(code, "fetch", error.message, error))
        logger.debug(f"Fetched {self.entity} payload for {scope.label}")

        mapped = self.source.map(fetched.value, scope)
        if mapped.is_err():
            return Err(self._error(
                SyncErrorCode.MAPPING_ERROR, "map", f"Failed to map {self.entity}: {mapped.error}"
            ))
        records = mapped.value
        logger.debug(f"Mapped {len(records)} {self.entity} records")

        deleted = await self.operations.delete_all(scope)
        if deleted.is_err():
            return Err(self._error(SyncErrorCode.QUERY_ERROR, "delete", deleted.error.message, deleted.error))

        saved = await self.operations.save_batch(records)
        if saved.is_err():
            return Err(self._error(SyncErrorCode.QUERY_ERROR, "save", saved.error.message, saved.error))

        persisted = await self.operations.find_persisted(scope)
        if persisted.is_err():
            return Err(self._error(SyncErrorCode.QUERY_ERROR, "reload", persisted.error.message, persisted.error))
        rows = persisted.value

        cached = await self.operations.replace_cached(scope, rows)
        if cached.is_err():
            return Err(self._error(SyncErrorCode.OPERATION_ERROR, "cache", cached.error.message, cached.error))

        for view in self.views:
            rebuilt = await view.rebuild(scope, rows)
            if rebuilt.is_err():
                return Err(self._error(
                    SyncErrorCode.OPERATION_ERROR,
                    "view",
                    f"Failed to rebuild {view.name}: {rebuilt.error.message}",
                    rebuilt.error,
                    view=view.name,
                ))

        return Ok(rows)

    def _error(
        self,
        code: SyncErrorCode,
        step: str,
        message: str,
        cause: Optional[AppError] = None,
        **details,
    ) -> SyncError:
        return SyncError(
            code,
            message,
            details={"entity": self.entity, "step": step, **details},
            cause=cause,
        )
