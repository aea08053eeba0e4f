"""
Domain operations: one consistent get/mutate contract per entity kind.

Reads go through the cache (whose provider is the repository); writes go
straight to the repository. ``delete_all`` deliberately leaves the cache alone:
callers doing destructive writes must call ``invalidate`` or replace the
bucket themselves.
"""
import logging
from typing import Any, Generic, Optional, TypeVar, Union

from fpl_sync.cache.entity_cache import EntityCache
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import (
    CacheError,
    CacheErrorCode,
    DomainError,
    DomainErrorCode,
    QueryError,
)
from fpl_sync.core.result import Result
from fpl_sync.domain.records import Record
from fpl_sync.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


def domain_error_from_cache(error: CacheError, context: Optional[dict] = None) -> DomainError:
    """A provider failure caused by the database is a database error, not a cache one."""
    if error.code == CacheErrorCode.PROVIDER_ERROR and isinstance(error.cause, QueryError):
        return domain_error_from_query(error.cause, context)
    if error.code == CacheErrorCode.PROVIDER_ERROR and isinstance(error.cause, DomainError):
        return error.cause
    return DomainError(
        DomainErrorCode.CACHE_ERROR,
        error.message,
        details={**error.details, **(context or {})},
        cause=error,
    )


def domain_error_from_query(error: QueryError, context: Optional[dict] = None) -> DomainError:
    return DomainError(
        DomainErrorCode.DATABASE_ERROR,
        error.message,
        details={**error.details, **(context or {})},
        cause=error,
    )


class DomainOperations(Generic[T]):
    """
    Attributes:
        cache: Read-through cache for this entity kind
        repository: Durable store, also the cache's provider
    """

    def __init__(self, cache: EntityCache[T], repository: BaseRepository[Any, T]):
        self.cache = cache
        self.repository = repository

    @property
    def kind(self) -> str:
        return self.cache.prefix.value

    def _context(self, scope: Scope, id: Optional[Union[int, str]] = None) -> dict:
        context: dict[str, Any] = {"entity": self.kind, "scope": scope.label}
        if id is not None:
            context["id"] = id
        return context

    # ========================================================================
    # Cache-backed reads
    # ========================================================================

    async def get_by_id(self, scope: Scope, id: Union[int, str]) -> Result[Optional[T], DomainError]:
        result = await self.cache.get(scope, id)
        return result.map_error(lambda e: domain_error_from_cache(e, self._context(scope, id)))

    async def get_all(self, scope: Scope) -> Result[list[T], DomainError]:
        result = await self.cache.get_all(scope)
        return result.map_error(lambda e: domain_error_from_cache(e, self._context(scope)))

    async def replace_cached(self, scope: Scope, records: list[T]) -> Result[list[T], DomainError]:
        result = await self.cache.set_many(scope, records)
        return result.map_error(lambda e: domain_error_from_cache(e, self._context(scope)))

    async def invalidate(self, scope: Scope) -> Result[None, DomainError]:
        result = await self.cache.delete(scope)
        if result.is_ok():
            logger.info(f"Invalidated {self.cache.key(scope)}")
        return result.map_error(lambda e: domain_error_from_cache(e, self._context(scope)))

    # ========================================================================
    # Repository-backed writes
    # ========================================================================

    async def save_batch(self, records: list[T]) -> Result[list[T], DomainError]:
        result = self.repository.save_batch(records)
        return result.map_error(lambda e: domain_error_from_query(e, {"entity": self.kind, "count": len(records)}))

    async def delete_all(self, scope: Scope) -> Result[None, DomainError]:
        """Delete persisted rows for the scope. The cache bucket is NOT touched."""
        result = self.repository.delete_all(scope)
        return result.map_error(lambda e: domain_error_from_query(e, self._context(scope)))

    async def find_persisted(self, scope: Scope) -> Result[list[T], DomainError]:
        """Authoritative rows straight from the repository, bypassing the cache."""
        result = self.repository.find_all(scope)
        return result.map_error(lambda e: domain_error_from_query(e, self._context(scope)))
