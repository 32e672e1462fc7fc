"""
Storage abstraction for the durable translation cache tier.

All persistence goes through this interface. This allows swapping
implementations (in-memory -> JSON file -> Redis, SQL, ...) without
changing the cache.

The contract is a plain key -> entry map plus a scan by timestamp so
expired entries can be swept.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from jsonlingo.core.models import CacheEntry


class TranslationStore(ABC):
    """
    Durable key-value store for cached translations.
    
    Local Implementations: in-memory dict, JSON file on disk
    """
    
    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Get an entry by key."""
        pass
    
    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Insert or replace an entry."""
        pass
    
    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete an entry. Returns True if it existed."""
        pass
    
    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
        pass
    
    @abstractmethod
    async def scan_older_than(self, cutoff_ms: int) -> list[str]:
        """Keys of entries whose timestamp is at or before `cutoff_ms`."""
        pass
    
    @abstractmethod
    async def count(self) -> int:
        """Number of stored entries."""
        pass
    
    async def close(self) -> None:
        """Release any resources held by the store."""
        pass
