"""
Tests for the two-tier translation cache and its durable stores.
"""

import json

import pytest
from jsonlingo.core.models import CacheEntry
from jsonlingo.services.cache import TranslationCache, make_cache_key
from jsonlingo.storage import (
    InMemoryTranslationStore,
    JsonFileTranslationStore,
    create_local_store,
)

TTL = 1000


class FakeMsClock:
    def __init__(self, now=10_000):
        self.now = now

    def __call__(self):
        return self.now


class BrokenStore(InMemoryTranslationStore):
    """Durable tier whose every call fails."""

    async def get(self, key):
        raise OSError("disk on fire")

    async def put(self, key, entry):
        raise OSError("disk on fire")

    async def scan_older_than(self, cutoff_ms):
        raise OSError("disk on fire")

    async def count(self):
        raise OSError("disk on fire")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return FakeMsClock()


@pytest.fixture
def store():
    return InMemoryTranslationStore()


@pytest.fixture
def ttl_cache(store, clock):
    return TranslationCache(store=store, ttl_ms=TTL, max_memory_size=10, clock=clock)


# =============================================================================
# Key Tests
# =============================================================================


class TestCacheKey:
    def test_deterministic(self):
        assert make_cache_key("Hello", "en", "fr") == make_cache_key("Hello", "en", "fr")

    def test_distinguishes_fields(self):
        keys = {
            make_cache_key("Hello", "en", "fr"),
            make_cache_key("Hello", "en", "de"),
            make_cache_key("Hello", "auto", "fr"),
            make_cache_key("hello", "en", "fr"),
            make_cache_key("a-b", "c", "fr"),
            make_cache_key("a", "b-c", "fr"),
        }
        assert len(keys) == 6


# =============================================================================
# TranslationCache Tests
# =============================================================================


class TestTranslationCache:
    @pytest.mark.asyncio
    async def test_set_then_get(self, ttl_cache):
        await ttl_cache.set("Hello", "en", "fr", "Bonjour")

        assert await ttl_cache.get("Hello", "en", "fr") == "Bonjour"
        assert await ttl_cache.get("Hello", "en", "de") is None

    @pytest.mark.asyncio
    async def test_ttl_boundary(self, ttl_cache, clock):
        await ttl_cache.set("Hello", "en", "fr", "Bonjour")
        written_at = clock.now

        clock.now = written_at + TTL - 1
        assert await ttl_cache.get("Hello", "en", "fr") == "Bonjour"

        clock.now = written_at + TTL + 1
        assert await ttl_cache.get("Hello", "en", "fr") is None

    @pytest.mark.asyncio
    async def test_expired_durable_entry_not_promoted(self, store, clock):
        cache = TranslationCache(store=store, ttl_ms=TTL, clock=clock)
        old = CacheEntry(
            text="Hello", source_language="en", target_language="fr",
            translated_text="Bonjour", timestamp=clock.now - TTL - 5,
        )
        await store.put(make_cache_key("Hello", "en", "fr"), old)

        assert await cache.get("Hello", "en", "fr") is None
        assert (await cache.get_stats())["memory_size"] == 0

    @pytest.mark.asyncio
    async def test_durable_hit_promotes_to_memory(self, store, clock):
        writer = TranslationCache(store=store, ttl_ms=TTL, clock=clock)
        await writer.set("Hello", "en", "fr", "Bonjour")

        reader = TranslationCache(store=store, ttl_ms=TTL, clock=clock)
        assert (await reader.get_stats())["memory_size"] == 0

        assert await reader.get("Hello", "en", "fr") == "Bonjour"
        assert (await reader.get_stats())["memory_size"] == 1

    @pytest.mark.asyncio
    async def test_memory_tier_evicts_oldest_first(self, store, clock):
        cache = TranslationCache(store=store, ttl_ms=TTL, max_memory_size=2, clock=clock)

        await cache.set("One", "en", "fr", "Un")
        await cache.set("Two", "en", "fr", "Deux")
        # Reads do not refresh position
        await cache.get("One", "en", "fr")
        await cache.set("Three", "en", "fr", "Trois")

        memory_keys = list(cache._memory)
        assert memory_keys == [
            make_cache_key("Two", "en", "fr"),
            make_cache_key("Three", "en", "fr"),
        ]
        # Evicted entries are still served from the durable tier
        assert await cache.get("One", "en", "fr") == "Un"

    @pytest.mark.asyncio
    async def test_store_failure_is_a_miss(self, clock):
        cache = TranslationCache(store=BrokenStore(), ttl_ms=TTL, clock=clock)

        assert await cache.get("Hello", "en", "fr") is None

        # Write still lands in memory
        await cache.set("Hello", "en", "fr", "Bonjour")
        assert await cache.get("Hello", "en", "fr") == "Bonjour"

        assert await cache.cleanup_expired() == 0
        assert (await cache.get_stats())["durable_size"] == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, ttl_cache, store, clock):
        await ttl_cache.set("Old", "en", "fr", "Vieux")
        clock.now += TTL + 1
        await ttl_cache.set("New", "en", "fr", "Nouveau")

        removed = await ttl_cache.cleanup_expired()

        assert removed == 2  # memory + durable copies of "Old"
        assert await store.count() == 1
        assert await ttl_cache.get("New", "en", "fr") == "Nouveau"

    @pytest.mark.asyncio
    async def test_batch_helpers(self, ttl_cache):
        await ttl_cache.set_batch([
            ("Hello", "en", "fr", "Bonjour"),
            ("World", "en", "fr", "Monde"),
        ])

        found = await ttl_cache.get_batch([
            ("Hello", "en", "fr"),
            ("World", "en", "fr"),
            ("Missing", "en", "fr"),
        ])

        assert found == {
            make_cache_key("Hello", "en", "fr"): "Bonjour",
            make_cache_key("World", "en", "fr"): "Monde",
        }

    @pytest.mark.asyncio
    async def test_clear(self, ttl_cache, store):
        await ttl_cache.set("Hello", "en", "fr", "Bonjour")

        await ttl_cache.clear()

        assert await ttl_cache.get_stats() == {"memory_size": 0, "durable_size": 0}


# =============================================================================
# Store Tests
# =============================================================================


class TestJsonFileStore:
    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "cache" / "translations.json"
        entry = CacheEntry(
            text="Hello", source_language="en", target_language="fr",
            translated_text="Bonjour", timestamp=123,
        )

        first = JsonFileTranslationStore(path)
        await first.put("k1", entry)

        assert json.loads(path.read_text(encoding="utf-8"))["k1"]["translated_text"] == "Bonjour"

        second = JsonFileTranslationStore(path)
        assert await second.get("k1") == entry
        assert await second.count() == 1

    @pytest.mark.asyncio
    async def test_delete_and_scan(self, tmp_path):
        store = JsonFileTranslationStore(tmp_path / "c.json")
        for key, ts in (("a", 100), ("b", 200), ("c", 300)):
            await store.put(key, CacheEntry(
                text=key, source_language="en", target_language="fr",
                translated_text=key, timestamp=ts,
            ))

        assert sorted(await store.scan_older_than(200)) == ["a", "b"]
        assert await store.delete("a")
        assert not await store.delete("a")

        await store.clear()
        assert await store.count() == 0

    def test_factory(self, tmp_path):
        assert isinstance(create_local_store(), InMemoryTranslationStore)
        assert isinstance(create_local_store(tmp_path / "c.json"), JsonFileTranslationStore)
