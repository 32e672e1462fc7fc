"""
Two-tier translation cache with time-to-live.

A bounded in-process dict sits in front of a durable `TranslationStore`.
Entries are keyed by a hash of (text, source, target) and expire after a
configurable TTL, evaluated lazily on read and swept by `cleanup_expired()`.

The durable tier is best effort: any store failure is logged and treated
as a miss, so the cache can never fail a translation.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Callable

from jsonlingo.core.errors import CacheError
from jsonlingo.core.models import CacheEntry
from jsonlingo.core.utils import now_ms
from jsonlingo.storage.base import TranslationStore
from jsonlingo.storage.local import InMemoryTranslationStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 24 * 60 * 60 * 1000
DEFAULT_MEMORY_SIZE = 1000


def make_cache_key(text: str, source: str, target: str) -> str:
    """
    Deterministic key for a (text, source, target) triple.

    JSON-encoding the triple before hashing keeps the fields unambiguous,
    so "a-b" + "c" never collides with "a" + "b-c". Text is not normalized.
    """
    content = json.dumps([text, source, target], ensure_ascii=False)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class TranslationCache:
    """
    Hash-based translation cache.
    
    Usage:
        cache = TranslationCache(store=create_local_store("cache.json"))
        await cache.set("Hello", "en", "fr", "Bonjour")
        await cache.get("Hello", "en", "fr")  # -> "Bonjour"
    
    The memory tier evicts in insertion order (FIFO) once `max_memory_size`
    is reached; reads do not refresh an entry's position.
    """
    
    def __init__(
        self,
        store: TranslationStore | None = None,
        ttl_ms: int = DEFAULT_TTL_MS,
        max_memory_size: int = DEFAULT_MEMORY_SIZE,
        clock: Callable[[], int] = now_ms,
    ):
        self._memory: dict[str, CacheEntry] = {}
        self._store = store if store is not None else InMemoryTranslationStore()
        self.ttl_ms = ttl_ms
        self.max_memory_size = max_memory_size
        self._clock = clock
    
    @property
    def store(self) -> TranslationStore:
        return self._store
    
    def is_valid(self, entry: CacheEntry) -> bool:
        """An entry is valid while less than `ttl_ms` old."""
        return self._clock() - entry.timestamp < self.ttl_ms
    
    # =========================================================================
    # Lookups
    # =========================================================================
    
    async def get(self, text: str, source: str, target: str) -> str | None:
        """Get cached translation, or None on miss or expiry."""
        key = make_cache_key(text, source, target)
        
        # Check memory cache first
        entry = self._memory.get(key)
        if entry is not None and self.is_valid(entry):
            return entry.translated_text
        
        # Check persistent storage
        try:
            entry = await self._store_call("get", key)
        except CacheError as e:
            logger.warning(f"Cache read failed, treating as miss: {e}")
            return None
        
        if entry is not None and self.is_valid(entry):
            self._remember(key, entry)  # Populate memory cache
            return entry.translated_text
        
        return None
    
    async def set(self, text: str, source: str, target: str, translation: str) -> None:
        """Cache a translation in both tiers."""
        key = make_cache_key(text, source, target)
        entry = CacheEntry(
            text=text,
            source_language=source,
            target_language=target,
            translated_text=translation,
            timestamp=self._clock(),
        )
        self._remember(key, entry)
        
        try:
            await self._store_call("put", key, entry)
        except CacheError as e:
            logger.warning(f"Cache write failed, kept in memory only: {e}")
    
    async def get_batch(
        self,
        requests: list[tuple[str, str, str]],
    ) -> dict[str, str]:
        """Look up many (text, source, target) triples; returns key -> translation."""
        results: dict[str, str] = {}
        for text, source, target in requests:
            cached = await self.get(text, source, target)
            if cached is not None:
                results[make_cache_key(text, source, target)] = cached
        return results
    
    async def set_batch(self, entries: list[tuple[str, str, str, str]]) -> None:
        """Cache many (text, source, target, translation) tuples."""
        for text, source, target, translation in entries:
            await self.set(text, source, target, translation)
    
    # =========================================================================
    # Maintenance
    # =========================================================================
    
    async def cleanup_expired(self) -> int:
        """
        Remove expired entries from both tiers.
        
        Works on snapshots and re-checks each entry right before deleting,
        so lookups and writes interleaved with the sweep never lose a fresh
        entry. Returns the number of entries removed.
        """
        removed = 0
        
        for key, entry in list(self._memory.items()):
            if not self.is_valid(entry) and self._memory.get(key) is entry:
                del self._memory[key]
                removed += 1
        
        cutoff = self._clock() - self.ttl_ms
        try:
            keys = await self._store_call("scan_older_than", cutoff)
            for key in keys:
                current = await self._store_call("get", key)
                if current is not None and not self.is_valid(current):
                    if await self._store_call("delete", key):
                        removed += 1
        except CacheError as e:
            logger.warning(f"Cache cleanup failed: {e}")
        
        if removed:
            logger.info(f"Removed {removed} expired cache entries")
        return removed
    
    async def clear(self) -> None:
        """Clear both tiers."""
        self._memory.clear()
        try:
            await self._store_call("clear")
        except CacheError as e:
            logger.warning(f"Failed to clear durable cache: {e}")
    
    async def get_stats(self) -> dict[str, int]:
        """Entry counts per tier."""
        try:
            durable_size = await self._store_call("count")
        except CacheError as e:
            logger.warning(f"Failed to count durable cache: {e}")
            durable_size = 0
        return {"memory_size": len(self._memory), "durable_size": durable_size}
    
    # =========================================================================
    # Internals
    # =========================================================================
    
    def _remember(self, key: str, entry: CacheEntry) -> None:
        if key in self._memory:
            # Rewrites keep their original FIFO position
            self._memory[key] = entry
            return
        while self._memory and len(self._memory) >= self.max_memory_size:
            oldest = next(iter(self._memory))
            del self._memory[oldest]
        if self.max_memory_size > 0:
            self._memory[key] = entry
    
    async def _store_call(self, method: str, *args):
        try:
            return await getattr(self._store, method)(*args)
        except Exception as e:
            raise CacheError(f"{method} failed: {e}") from e
