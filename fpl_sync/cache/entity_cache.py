"""
Generic read-through cache over Redis hashes.

One bucket (a Redis hash) per ``{prefix}::{season}[::{subscope}]``; one hash
field per record, keyed by the record's ``cache_field``.

Read policy is fail-open: an entry that no longer deserializes is dropped from
``get_all`` and treated as a miss by ``get``. A bucket only ever holds a whole
scope: a ``get`` miss adds its one field to an existing bucket, and refills an
absent bucket from the provider in full. Write policy is fail-closed: a
bucket replace serializes every record before touching Redis, so a single bad
record writes nothing.
"""
import inspect
import json
import logging
import math
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError
from redis.exceptions import WatchError

from fpl_sync.cache.keys import CachePrefix, Scope, cache_key
from fpl_sync.cache.provider import DataProvider
from fpl_sync.core.errors import CacheError, CacheErrorCode
from fpl_sync.core.metrics import cache_corrupt_entries_total, cache_hits_total, cache_misses_total
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.records import Record

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


def _find_non_finite(value: Any, path: str = "") -> Optional[str]:
    if isinstance(value, float) and not math.isfinite(value):
        return path or "<root>"
    if isinstance(value, dict):
        for k, v in value.items():
            found = _find_non_finite(v, f"{path}.{k}" if path else str(k))
            if found:
                return found
    if isinstance(value, (list, tuple)):
        for i, v in enumerate(value):
            found = _find_non_finite(v, f"{path}[{i}]")
            if found:
                return found
    return None


class EntityCache(Generic[T]):
    """
    Cache-aside access to one entity kind.

    Attributes:
        redis: Shared async Redis client
        prefix: Registry prefix of this entity kind's buckets
        record_type: Record class used to deserialize entries
        provider: Fallback consulted on a miss (the repository in production)
    """

    def __init__(
        self,
        redis: Redis,
        prefix: CachePrefix,
        record_type: type[T],
        provider: Optional[DataProvider[T]] = None,
    ):
        self.redis = redis
        self.prefix = prefix
        self.record_type = record_type
        self.provider = provider

    def key(self, scope: Scope) -> str:
        return cache_key(self.prefix, scope)

    # ========================================================================
    # Read path
    # ========================================================================

    async def get(self, scope: Scope, id: Union[int, str]) -> Result[Optional[T], CacheError]:
        """
        Get one record, falling back to the provider on a miss.

        Returns ``Ok(None)`` when neither the bucket nor the provider has it.
        """
        key = self.key(scope)
        field = str(id)
        try:
            raw = await self.redis.hget(key, field)
        except RedisError as e:
            return Err(self._redis_error(e, "HGET", key))

        if raw is not None:
            decoded = self.deserialize(raw)
            if decoded.is_ok():
                cache_hits_total.labels(prefix=self.prefix.value, operation="get").inc()
                return decoded
            self._log_corrupt(key, field, decoded.error)

        cache_misses_total.labels(prefix=self.prefix.value, operation="get").inc()
        if self.provider is None:
            return Ok(None)

        fetched = await self._call_provider(self.provider.get_one, scope, id)
        if fetched.is_err():
            return fetched

        record = fetched.value
        if record is None:
            return Ok(None)

        written = await self._write_back(scope, record)
        if written.is_err():
            logger.warning(
                f"Write-back failed for {key}/{field}: {written.error.message}",
                extra={"key": key, "field": field, "code": written.error.code.value},
            )
        return Ok(record)

    async def _write_back(self, scope: Scope, record: T) -> Result[None, CacheError]:
        """
        Store a record fetched on a ``get`` miss.

        The field is added under WATCH only while the bucket exists; a
        concurrent replace wins and the write is skipped. An absent bucket is
        refilled from ``provider.get_all`` so it never holds a partial scope.
        """
        key = self.key(scope)
        serialized = self.serialize(record)
        if serialized.is_err():
            return serialized

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                if await pipe.exists(key):
                    pipe.multi()
                    pipe.hset(key, record.cache_field, serialized.value)
                    await pipe.execute()
                    return Ok(None)
        except WatchError:
            logger.debug(f"Bucket {key} changed during write-back; skipped")
            return Ok(None)
        except RedisError as e:
            return Err(self._redis_error(e, "HSET", key))

        fetched = await self._call_provider(self.provider.get_all, scope)
        if fetched.is_err():
            return fetched
        return (await self.set_many(scope, list(fetched.value))).map(lambda _: None)

    async def get_all(self, scope: Scope) -> Result[list[T], CacheError]:
        """
        Get every record of the bucket, sorted by natural id.

        An empty or absent bucket is a miss: the provider's records are written
        as a full bucket and returned.
        """
        key = self.key(scope)
        try:
            raw_entries = await self.redis.hgetall(key)
        except RedisError as e:
            return Err(self._redis_error(e, "HGETALL", key))

        if raw_entries:
            records = []
            for field, raw in raw_entries.items():
                decoded = self.deserialize(raw)
                if decoded.is_err():
                    self._log_corrupt(key, field, decoded.error)
                    continue
                records.append(decoded.value)

            if records:
                cache_hits_total.labels(prefix=self.prefix.value, operation="get_all").inc()
                return Ok(self._sorted(records))

        cache_misses_total.labels(prefix=self.prefix.value, operation="get_all").inc()
        if self.provider is None:
            return Ok([])

        fetched = await self._call_provider(self.provider.get_all, scope)
        if fetched.is_err():
            return fetched

        records = list(fetched.value)
        if not records:
            return Ok([])

        written = await self.set_many(scope, records)
        if written.is_err():
            logger.warning(
                f"Bucket refill failed for {key}: {written.error.message}",
                extra={"key": key, "code": written.error.code.value},
            )
        return Ok(self._sorted(records))

    # ========================================================================
    # Write path
    # ========================================================================

    async def warm_up(self, scope: Scope) -> Result[list[T], CacheError]:
        """Load the whole scope from the provider and replace the bucket."""
        if self.provider is None:
            return Err(CacheError(
                CacheErrorCode.PROVIDER_ERROR,
                f"No provider configured for {self.prefix.value}",
                details={"key": self.key(scope)},
            ))

        fetched = await self._call_provider(self.provider.get_all, scope)
        if fetched.is_err():
            return fetched
        return await self.set_many(scope, list(fetched.value))

    async def set(self, scope: Scope, record: T) -> Result[T, CacheError]:
        """Write a single hash field, leaving the rest of the bucket alone."""
        key = self.key(scope)
        serialized = self.serialize(record)
        if serialized.is_err():
            return serialized

        try:
            await self.redis.hset(key, record.cache_field, serialized.value)
        except RedisError as e:
            return Err(self._redis_error(e, "HSET", key))
        return Ok(record)

    async def set_many(self, scope: Scope, records: list[T]) -> Result[list[T], CacheError]:
        """
        Replace the whole bucket in one MULTI/EXEC pipeline.

        Every record is serialized before the pipeline is built; readers see
        either the old bucket or the new one.
        """
        key = self.key(scope)
        mapping: dict[str, str] = {}
        for record in records:
            serialized = self.serialize(record)
            if serialized.is_err():
                return serialized
            mapping[record.cache_field] = serialized.value

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                if mapping:
                    pipe.hset(key, mapping=mapping)
                await pipe.execute()
        except RedisError as e:
            return Err(self._redis_error(e, "PIPELINE", key))

        logger.debug(f"Replaced bucket {key} with {len(mapping)} entries")
        return Ok(records)

    async def delete(self, scope: Scope) -> Result[None, CacheError]:
        """Drop the bucket."""
        key = self.key(scope)
        try:
            await self.redis.delete(key)
        except RedisError as e:
            return Err(self._redis_error(e, "DEL", key))
        return Ok(None)

    # ========================================================================
    # Serialization
    # ========================================================================

    def serialize(self, record: T) -> Result[str, CacheError]:
        # Checked on the python dump; json mode may coerce NaN to null.
        bad_path = _find_non_finite(record.model_dump())
        if bad_path is not None:
            return Err(self._serialization_error(record, f"Non-finite number at {bad_path}"))

        try:
            data = record.model_dump(mode="json")
        except (ValueError, TypeError) as e:
            return Err(self._serialization_error(record, str(e), e))

        try:
            return Ok(json.dumps(data, allow_nan=False))
        except (ValueError, TypeError) as e:
            return Err(self._serialization_error(record, str(e), e))

    def deserialize(self, raw: str) -> Result[T, CacheError]:
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            return Err(CacheError(
                CacheErrorCode.DESERIALIZATION_ERROR, f"Malformed JSON: {e}", cause=e
            ))

        if not isinstance(data, dict):
            return Err(CacheError(
                CacheErrorCode.DESERIALIZATION_ERROR, "Cached entry is not an object"
            ))

        for field in self.record_type.identity_fields:
            value = data.get(field)
            if not isinstance(value, int) or isinstance(value, bool):
                return Err(CacheError(
                    CacheErrorCode.DESERIALIZATION_ERROR,
                    f"Missing or invalid identity field '{field}'",
                    details={"field": field},
                ))

        try:
            return Ok(self.record_type.model_validate(data))
        except ValidationError as e:
            return Err(CacheError(
                CacheErrorCode.DESERIALIZATION_ERROR,
                f"Invalid {self.record_type.__name__}: {e.error_count()} validation errors",
                cause=e,
            ))

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _call_provider(self, fn: Callable[..., Any], *args: Any) -> Result[Any, CacheError]:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
        if result.is_err():
            return Err(CacheError(
                CacheErrorCode.PROVIDER_ERROR,
                f"Provider failed for {self.prefix.value}: {result.error}",
                details={"prefix": self.prefix.value},
                cause=result.error,
            ))
        return result

    def _sorted(self, records: list[T]) -> list[T]:
        fields = self.record_type.identity_fields
        return sorted(records, key=lambda r: tuple(getattr(r, f) for f in fields))

    def _redis_error(self, error: RedisError, operation: str, key: str) -> CacheError:
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            code = CacheErrorCode.CONNECTION_ERROR
        else:
            code = CacheErrorCode.OPERATION_ERROR
        logger.error(f"Redis {operation} failed on {key}: {error}", extra={"key": key, "operation": operation})
        return CacheError(code, f"Redis {operation} failed: {error}", details={"key": key}, cause=error)

    def _serialization_error(self, record: T, reason: str, cause: Optional[BaseException] = None) -> CacheError:
        return CacheError(
            CacheErrorCode.SERIALIZATION_ERROR,
            f"Cannot serialize {type(record).__name__} {record.cache_field}: {reason}",
            details={"field": record.cache_field},
            cause=cause,
        )

    def _log_corrupt(self, key: str, field: str, error: CacheError) -> None:
        cache_corrupt_entries_total.labels(prefix=self.prefix.value).inc()
        logger.warning(
            f"Dropping corrupt cache entry {key}/{field}: {error.message}",
            extra={"key": key, "field": field},
        )
