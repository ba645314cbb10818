"""
Tests for cache keys, the cache manager and the cache stores.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from fetch_facade.cache import (
    CacheConfig,
    CacheManager,
    MemoryCacheStore,
    RedisCacheStore,
    generate_cache_key,
)
from fetch_facade.cache.keys import hash_body
from fetch_facade.cache.manager import DEFAULT_CACHE_CONFIG, merge_cache_config
from fetch_facade.cache.types import CacheEntry
from fetch_facade.types import HttpResponse, RequestConfig


class TestGenerateCacheKey:
    def test_method_and_resolved_url(self):
        config = RequestConfig(url="/users/1", method="GET", base_url="https://api.example.com")
        assert generate_cache_key(config) == "GET:https://api.example.com/users/1"

    def test_method_defaults_to_get(self):
        assert generate_cache_key(RequestConfig(url="https://x.example.com/a")) == "GET:https://x.example.com/a"

    def test_params_sorted_and_none_skipped(self):
        config = RequestConfig(
            url="/search",
            base_url="https://api.example.com",
            params={"q": "ann", "page": 2, "draft": None, "active": True},
        )
        assert generate_cache_key(config) == "GET:https://api.example.com/search?active=true&page=2&q=ann"

    def test_param_order_does_not_matter(self):
        first = RequestConfig(url="/s", params={"a": 1, "b": 2})
        second = RequestConfig(url="/s", params={"b": 2, "a": 1})
        assert generate_cache_key(first) == generate_cache_key(second)

    def test_param_values_are_escaped(self):
        packed = RequestConfig(url="/s", params={"a": "1&b=2"})
        split = RequestConfig(url="/s", params={"a": "1", "b": "2"})

        assert generate_cache_key(packed) == "GET:/s?a=1%26b%3D2"
        assert generate_cache_key(split) == "GET:/s?a=1&b=2"

    def test_body_hash_for_non_get(self):
        config = RequestConfig(url="/users", method="POST", data={"name": "Ann"})
        key = generate_cache_key(config)

        assert key == f"POST:/users:#{hash_body({'name': 'Ann'})}"
        assert len(hash_body({"name": "Ann"})) == 16

    def test_body_hash_is_key_order_independent(self):
        assert hash_body({"a": 1, "b": 2}) == hash_body({"b": 2, "a": 1})

    def test_get_body_is_ignored(self):
        config = RequestConfig(url="/users", method="GET", data={"x": 1})
        assert ":#" not in generate_cache_key(config)


class TestMergeCacheConfig:
    def test_defaults(self):
        assert merge_cache_config() == DEFAULT_CACHE_CONFIG
        assert DEFAULT_CACHE_CONFIG.enabled is False
        assert DEFAULT_CACHE_CONFIG.ttl_seconds == 300.0

    def test_override_keeps_unset_fields(self):
        merged = merge_cache_config(CacheConfig(enabled=True, ttl_seconds=60), CacheConfig(ttl_seconds=5))
        assert merged.enabled is True
        assert merged.ttl_seconds == 5
        assert merged.methods == ["GET"]

    def test_methods_list_is_copied(self):
        methods = ["GET", "HEAD"]
        merged = merge_cache_config(None, CacheConfig(methods=methods))
        merged.methods.append("POST")
        assert methods == ["GET", "HEAD"]


class TestCacheManager:
    @pytest.fixture
    def manager(self, clock):
        return CacheManager(
            CacheConfig(enabled=True, ttl_seconds=60), store=MemoryCacheStore(clock=clock)
        )

    @pytest.fixture
    def config(self):
        return RequestConfig(url="/users/1", method="GET", base_url="https://api.example.com")

    @pytest.mark.asyncio
    async def test_round_trip(self, manager, config):
        response = HttpResponse(data={"id": 1, "name": "Ann"}, status=200, config=config)

        await manager.set(config, response)

        assert await manager.get(RequestConfig(**vars(config))) == response

    @pytest.mark.asyncio
    async def test_cached_response_is_isolated_from_callers(self, manager, config):
        response = HttpResponse(data={"tags": ["a"]}, status=200, headers={"ETag": "1"})
        await manager.set(config, response)
        response.data["tags"].append("stored-after")

        first = await manager.get(config)
        first.data["tags"].append("mutated")
        first.headers["etag"] = "2"
        second = await manager.get(config)

        assert second.data == {"tags": ["a"]}
        assert second.headers == {"etag": "1"}

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, manager, config, clock):
        await manager.set(config, HttpResponse(data=1, status=200))

        clock.advance(59)
        assert await manager.get(config) is not None

        clock.advance(2)
        assert await manager.get(config) is None

    @pytest.mark.asyncio
    async def test_per_request_ttl(self, manager, clock):
        config = RequestConfig(url="/short", cache=CacheConfig(ttl_seconds=1))
        await manager.set(config, HttpResponse(data=1, status=200))

        clock.advance(2)

        assert await manager.get(config) is None

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, manager, config):
        other = RequestConfig(url="/users/2")
        await manager.set(config, HttpResponse(data=1, status=200))
        await manager.set(other, HttpResponse(data=2, status=200))

        await manager.delete(config)
        assert await manager.get(config) is None
        assert await manager.get(other) is not None

        await manager.clear()
        assert await manager.get(other) is None

    def test_applies_to(self, manager):
        assert manager.applies_to(RequestConfig(url="/a", method="GET")) is True
        assert manager.applies_to(RequestConfig(url="/a", method="POST")) is False
        assert manager.applies_to(RequestConfig(url="/a", cache=CacheConfig(enabled=False))) is False

    def test_cacheable_methods_override(self, manager):
        config = RequestConfig(url="/a", method="POST", cache=CacheConfig(methods=["GET", "POST"]))
        assert manager.applies_to(config) is True
        assert manager.is_cacheable_method("head") is False

    def test_should_store_default_policy(self, manager, config):
        assert manager.should_store(config, HttpResponse(data=None, status=200)) is True
        assert manager.should_store(config, HttpResponse(data=None, status=304)) is False

    def test_should_store_custom_policy(self, manager):
        config = RequestConfig(url="/a", cache=CacheConfig(is_cacheable=lambda r: r.status == 404))
        assert manager.should_store(config, HttpResponse(data=None, status=404)) is True

    def test_custom_key_generator(self, manager):
        config = RequestConfig(url="/a", cache=CacheConfig(key_generator=lambda c: f"custom:{c.url}"))
        assert manager.generate_key(config) == "custom:/a"

    def test_update_config(self):
        manager = CacheManager()
        assert manager.get_config().enabled is False

        manager.update_config(CacheConfig(enabled=True))

        assert manager.get_config().enabled is True
        assert manager.get_config().ttl_seconds == 300.0

    @pytest.mark.asyncio
    async def test_set_store(self, manager, config):
        store = AsyncMock(spec=MemoryCacheStore)
        store.get.return_value = None
        manager.set_store(store)

        await manager.get(config)

        assert manager.get_store() is store
        store.get.assert_awaited_once_with("GET:https://api.example.com/users/1")


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_set_and_get(self, clock):
        store = MemoryCacheStore(clock=clock)
        await store.set("k", "v", 10)
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_lazy_expiry(self, clock):
        """
        Path: entry past its TTL
        Decision: reported missing and purged on the next get
        """
        store = MemoryCacheStore(clock=clock)
        await store.set("k", "v", 10)

        clock.advance(10)
        assert await store.get("k") == "v"

        clock.advance(1)
        assert store.size() == 1
        assert await store.get("k") is None
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_lru_eviction(self, clock):
        store = MemoryCacheStore(max_entries=2, clock=clock)
        await store.set("a", 1)
        await store.set("b", 2)
        await store.get("a")

        await store.set("c", 3)

        assert store.keys() == ["a", "c"]
        assert await store.get("b") is None

    @pytest.mark.asyncio
    async def test_overwrite_does_not_evict(self, clock):
        store = MemoryCacheStore(max_entries=2, clock=clock)
        await store.set("a", 1)
        await store.set("b", 2)
        await store.set("a", 10)

        assert sorted(store.keys()) == ["a", "b"]
        assert await store.get("a") == 10

    @pytest.mark.asyncio
    async def test_cleanup(self, clock):
        store = MemoryCacheStore(clock=clock)
        await store.set("short", 1, 1)
        await store.set("long", 2, 100)

        clock.advance(5)

        assert store.cleanup() == 1
        assert store.keys() == ["long"]

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError):
            MemoryCacheStore(max_entries=0)

    def test_cache_entry_expiry_is_strict(self):
        entry = CacheEntry(value=1, expires_at=100.0)
        assert entry.is_expired(100.0) is False
        assert entry.is_expired(100.1) is True


class TestRedisCacheStore:
    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.set = AsyncMock()
        client.delete = AsyncMock(return_value=1)
        client.close = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_set_serializes_response(self, redis_client):
        store = RedisCacheStore(redis_client)
        config = RequestConfig(url="/users/1", method="GET", base_url="https://api.example.com")
        response = HttpResponse(data={"id": 1}, status=200, headers={"ETag": "abc"}, config=config)

        await store.set("GET:/users/1", response, 60)

        key, encoded = redis_client.set.await_args.args
        assert key == "http_cache:GET:/users/1"
        assert redis_client.set.await_args.kwargs == {"px": 60000}
        item = json.loads(encoded)
        assert item["kind"] == "response"
        assert item["payload"]["data"] == {"id": 1}
        assert item["payload"]["headers"] == {"etag": "abc"}

    @pytest.mark.asyncio
    async def test_get_rebuilds_response(self, redis_client):
        payload = HttpResponse(data={"id": 1}, status=200, status_text="OK").to_dict()
        redis_client.get.return_value = json.dumps({"kind": "response", "payload": payload}).encode()
        store = RedisCacheStore(redis_client, key_prefix="test:")

        value = await store.get("k")

        redis_client.get.assert_awaited_once_with("test:k")
        assert isinstance(value, HttpResponse)
        assert value.data == {"id": 1}
        assert value.status_text == "OK"

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_client):
        store = RedisCacheStore(redis_client)
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_get_unreadable_entry_is_dropped(self, redis_client):
        redis_client.get.return_value = b"not json"
        store = RedisCacheStore(redis_client)

        assert await store.get("k") is None
        redis_client.delete.assert_awaited_once_with("http_cache:k")

    @pytest.mark.asyncio
    async def test_plain_values(self, redis_client):
        store = RedisCacheStore(redis_client)
        await store.set("k", {"a": 1}, 1)

        _, encoded = redis_client.set.await_args.args
        redis_client.get.return_value = encoded

        assert await store.get("k") == {"a": 1}

    @pytest.mark.asyncio
    async def test_unserializable_value_skipped(self, redis_client):
        store = RedisCacheStore(redis_client)
        await store.set("k", object(), 1)
        redis_client.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_deletes_prefixed_keys(self, redis_client):
        async def scan_iter(match=None):
            for key in ("http_cache:a", "http_cache:b"):
                yield key

        redis_client.scan_iter = MagicMock(side_effect=scan_iter)
        store = RedisCacheStore(redis_client)

        await store.clear()

        redis_client.scan_iter.assert_called_once_with(match="http_cache:*")
        redis_client.delete.assert_awaited_once_with("http_cache:a", "http_cache:b")

    @pytest.mark.asyncio
    async def test_close(self, redis_client):
        await RedisCacheStore(redis_client).close()
        redis_client.close.assert_awaited_once()
