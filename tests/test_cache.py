"""Tests for the cache key registry and the generic EntityCache."""
import asyncio
import json
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from fpl_sync.cache.entity_cache import EntityCache
from fpl_sync.cache.keys import CachePrefix, Scope, cache_key
from fpl_sync.cache.provider import DataProvider
from fpl_sync.core.errors import CacheErrorCode, QueryError, QueryErrorCode
from fpl_sync.core.result import Err, Ok
from fpl_sync.domain.records import Player, PlayerStat

SEASON_SCOPE = Scope("2526")


def make_player(player_id: int, price: int = 55) -> Player:
    return Player(
        id=player_id,
        code=1000 + player_id,
        element_type=3,
        team_id=1 + player_id % 20,
        price=price,
        start_price=price,
        first_name=f"First{player_id}",
        second_name=f"Second{player_id}",
        web_name=f"Player{player_id}",
    )


def make_stat(element_id: int, event_id: int = 5, form: float = 2.5) -> PlayerStat:
    return PlayerStat(element_id=element_id, event_id=event_id, element_type=3, team_id=1, price=55, form=form)


class StaticProvider(DataProvider[Player]):
    """In-memory provider that counts how often it is consulted."""

    def __init__(self, records=None, error=None):
        self.records = {r.id: r for r in (records or [])}
        self.error = error
        self.get_one_calls = 0
        self.get_all_calls = 0

    def get_one(self, scope, id):
        self.get_one_calls += 1
        if self.error:
            return Err(self.error)
        return Ok(self.records.get(int(id)))

    async def get_all(self, scope):
        self.get_all_calls += 1
        await asyncio.sleep(0)
        if self.error:
            return Err(self.error)
        return Ok(list(self.records.values()))


class TestCacheKeys:
    """Key layout {prefix}::{season}[::{subscope}]."""

    def test_season_key(self):
        assert cache_key(CachePrefix.PLAYER, SEASON_SCOPE) == "player::2526"

    def test_subscoped_key(self):
        assert cache_key(CachePrefix.PLAYER_STAT, Scope("2526", 5)) == "player-stat::2526::5"


class TestEntityCacheReads:
    """Read-through behaviour."""

    # get()
    # ─────────────────────────────────────────────────────────────

    async def test_get_miss_falls_back_and_writes_back(self, redis):
        provider = StaticProvider([make_player(7)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        first = await cache.get(SEASON_SCOPE, 7)
        second = await cache.get(SEASON_SCOPE, 7)

        assert first == Ok(make_player(7))
        assert second == Ok(make_player(7))
        assert provider.get_one_calls == 1
        assert await redis.hexists("player::2526", "7")

    async def test_get_miss_on_absent_bucket_refills_whole_scope(self, redis):
        provider = StaticProvider([make_player(i) for i in range(1, 39)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        assert (await cache.get(SEASON_SCOPE, 7)).value == make_player(7)
        result = await cache.get_all(SEASON_SCOPE)

        assert [p.id for p in result.value] == list(range(1, 39))
        assert await redis.hlen("player::2526") == 38
        assert provider.get_all_calls == 1

    async def test_get_miss_on_existing_bucket_adds_one_field(self, redis):
        provider = StaticProvider([make_player(i) for i in (1, 2, 3)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)
        await cache.set_many(SEASON_SCOPE, [make_player(1), make_player(2)])

        assert (await cache.get(SEASON_SCOPE, 3)).value == make_player(3)

        assert sorted(await redis.hkeys("player::2526")) == ["1", "2", "3"]
        assert provider.get_all_calls == 0

    async def test_concurrent_get_misses_store_the_provider_record(self, redis):
        provider = StaticProvider([make_player(7)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        results = await asyncio.gather(*(cache.get(SEASON_SCOPE, 7) for _ in range(8)))

        assert all(r == Ok(make_player(7)) for r in results)
        assert 1 <= provider.get_one_calls <= 8
        assert await redis.hkeys("player::2526") == ["7"]
        assert cache.deserialize(await redis.hget("player::2526", "7")) == Ok(make_player(7))

    async def test_get_absent_everywhere_is_ok_none(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=StaticProvider())

        assert await cache.get(SEASON_SCOPE, 99) == Ok(None)
        assert not await redis.exists("player::2526")

    async def test_get_corrupt_entry_is_treated_as_miss(self, redis):
        provider = StaticProvider([make_player(7)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)
        await redis.hset("player::2526", "7", "{not json")

        result = await cache.get(SEASON_SCOPE, 7)

        assert result == Ok(make_player(7))
        assert provider.get_one_calls == 1
        assert json.loads(await redis.hget("player::2526", "7"))["id"] == 7

    async def test_get_provider_failure_is_provider_error(self, redis):
        failure = QueryError(QueryErrorCode.CONNECTION_ERROR, "db down")
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=StaticProvider(error=failure))

        result = await cache.get(SEASON_SCOPE, 7)

        assert result.is_err()
        assert result.error.code == CacheErrorCode.PROVIDER_ERROR
        assert result.error.cause is failure

    async def test_get_redis_connection_failure(self):
        broken = AsyncMock()
        broken.hget.side_effect = RedisConnectionError("refused")
        cache = EntityCache(broken, CachePrefix.PLAYER, Player, provider=StaticProvider())

        result = await cache.get(SEASON_SCOPE, 7)

        assert result.error.code == CacheErrorCode.CONNECTION_ERROR

    async def test_get_redis_command_failure(self):
        broken = AsyncMock()
        broken.hgetall.side_effect = ResponseError("WRONGTYPE")
        cache = EntityCache(broken, CachePrefix.PLAYER, Player)

        result = await cache.get_all(SEASON_SCOPE)

        assert result.error.code == CacheErrorCode.OPERATION_ERROR

    # get_all()
    # ─────────────────────────────────────────────────────────────

    async def test_get_all_miss_fills_bucket(self, redis):
        players = [make_player(i) for i in (3, 1, 2)]
        provider = StaticProvider(players)
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        result = await cache.get_all(SEASON_SCOPE)

        assert [p.id for p in result.value] == [1, 2, 3]
        assert await redis.hlen("player::2526") == 3

        again = await cache.get_all(SEASON_SCOPE)
        assert again == result
        assert provider.get_all_calls == 1

    async def test_get_all_drops_one_corrupt_entry_of_21(self, redis):
        provider = StaticProvider()
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)
        await cache.set_many(SEASON_SCOPE, [make_player(i) for i in range(1, 22)])
        await redis.hset("player::2526", "13", '{"id": 13, "price": "cheap"')

        result = await cache.get_all(SEASON_SCOPE)

        assert result.is_ok()
        assert len(result.value) == 20
        assert 13 not in {p.id for p in result.value}
        assert provider.get_all_calls == 0

    async def test_get_all_entry_without_identity_is_dropped(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        await cache.set_many(SEASON_SCOPE, [make_player(1), make_player(2)])
        await redis.hset("player::2526", "3", json.dumps({"web_name": "Ghost"}))
        await redis.hset("player::2526", "4", json.dumps({**make_player(4).model_dump(), "id": True}))

        result = await cache.get_all(SEASON_SCOPE)

        assert [p.id for p in result.value] == [1, 2]

    async def test_get_all_without_provider_returns_empty(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        assert await cache.get_all(SEASON_SCOPE) == Ok([])

    async def test_concurrent_fills_converge(self, redis):
        players = [make_player(i) for i in range(1, 11)]
        provider = StaticProvider(players)
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        results = await asyncio.gather(*(cache.get_all(SEASON_SCOPE) for _ in range(5)))

        assert all(r == Ok(players) for r in results)
        stored = await redis.hgetall("player::2526")
        assert sorted(int(field) for field in stored) == list(range(1, 11))
        assert (await cache.get_all(SEASON_SCOPE)).value == players


class TestEntityCacheWrites:
    """Bucket replacement and serialization."""

    async def test_set_many_replaces_whole_bucket(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        await cache.set_many(SEASON_SCOPE, [make_player(i) for i in range(1, 6)])

        await cache.set_many(SEASON_SCOPE, [make_player(2, price=70), make_player(9)])

        assert sorted(await redis.hkeys("player::2526")) == ["2", "9"]
        assert (await cache.get(SEASON_SCOPE, 2)).value.price == 70

    async def test_set_many_empty_clears_bucket(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        await cache.set_many(SEASON_SCOPE, [make_player(1)])

        assert await cache.set_many(SEASON_SCOPE, []) == Ok([])
        assert not await redis.exists("player::2526")

    async def test_set_many_non_finite_writes_nothing(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER_STAT, PlayerStat)
        scope = Scope("2526", 5)
        await cache.set_many(scope, [make_stat(1)])

        result = await cache.set_many(scope, [make_stat(2), make_stat(3, form=float("nan"))])

        assert result.error.code == CacheErrorCode.SERIALIZATION_ERROR
        assert await redis.hkeys("player-stat::2526::5") == ["1_5"]

    async def test_set_single_field_keeps_others(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        await cache.set_many(SEASON_SCOPE, [make_player(1), make_player(2)])

        await cache.set(SEASON_SCOPE, make_player(3))

        assert sorted(await redis.hkeys("player::2526")) == ["1", "2", "3"]

    async def test_composite_cache_field(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER_STAT, PlayerStat)
        await cache.set_many(Scope("2526", 5), [make_stat(10)])

        assert (await cache.get(Scope("2526", 5), "10_5")).value == make_stat(10)

    async def test_warm_up_loads_from_provider(self, redis):
        provider = StaticProvider([make_player(1), make_player(2)])
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        result = await cache.warm_up(SEASON_SCOPE)

        assert [p.id for p in result.value] == [1, 2]
        assert await redis.hlen("player::2526") == 2

    async def test_warm_up_failure_writes_nothing(self, redis):
        provider = StaticProvider(error=QueryError(QueryErrorCode.QUERY_ERROR, "bad sql"))
        cache = EntityCache(redis, CachePrefix.PLAYER, Player, provider=provider)

        result = await cache.warm_up(SEASON_SCOPE)

        assert result.error.code == CacheErrorCode.PROVIDER_ERROR
        assert not await redis.exists("player::2526")

    async def test_warm_up_without_provider(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        assert (await cache.warm_up(SEASON_SCOPE)).error.code == CacheErrorCode.PROVIDER_ERROR

    async def test_delete_drops_bucket(self, redis):
        cache = EntityCache(redis, CachePrefix.PLAYER, Player)
        await cache.set_many(SEASON_SCOPE, [make_player(1)])

        assert await cache.delete(SEASON_SCOPE) == Ok(None)
        assert not await redis.exists("player::2526")

    def test_serialize_round_trip(self):
        cache = EntityCache(None, CachePrefix.PLAYER_STAT, PlayerStat)
        stat = make_stat(4, form=3.75)

        assert cache.deserialize(cache.serialize(stat).value) == Ok(stat)
