"""
Local store implementations for development.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from jsonlingo.core.models import CacheEntry
from jsonlingo.storage.base import TranslationStore


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryTranslationStore(TranslationStore):
    """In-memory store, lost on exit."""
    
    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}
    
    async def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)
    
    async def put(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry
    
    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None
    
    async def clear(self) -> None:
        self._entries.clear()
    
    async def scan_older_than(self, cutoff_ms: int) -> list[str]:
        return [
            key for key, entry in list(self._entries.items())
            if entry.timestamp <= cutoff_ms
        ]
    
    async def count(self) -> int:
        return len(self._entries)


# =============================================================================
# JSON File Store
# =============================================================================


class JsonFileTranslationStore(TranslationStore):
    """
    Store entries in a single JSON file.
    
    The whole file is loaded on first access and rewritten atomically
    (temp file + rename) after every change.
    """
    
    def __init__(self, path: str | Path = "./data/translation_cache.json"):
        self.path = Path(path)
        self._entries: dict[str, CacheEntry] | None = None
        self._lock = asyncio.Lock()
    
    def _load(self) -> dict[str, CacheEntry]:
        if self._entries is None:
            if self.path.exists():
                raw: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
                self._entries = {
                    key: CacheEntry.model_validate(value) for key, value in raw.items()
                }
            else:
                self._entries = {}
        return self._entries
    
    def _flush(self) -> None:
        entries = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: entry.model_dump() for key, entry in entries.items()}
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    
    async def get(self, key: str) -> CacheEntry | None:
        return self._load().get(key)
    
    async def put(self, key: str, entry: CacheEntry) -> None:
        async with self._lock:
            self._load()[key] = entry
            self._flush()
    
    async def delete(self, key: str) -> bool:
        async with self._lock:
            existed = self._load().pop(key, None) is not None
            if existed:
                self._flush()
            return existed
    
    async def clear(self) -> None:
        async with self._lock:
            self._load().clear()
            self._flush()
    
    async def scan_older_than(self, cutoff_ms: int) -> list[str]:
        return [
            key for key, entry in list(self._load().items())
            if entry.timestamp <= cutoff_ms
        ]
    
    async def count(self) -> int:
        return len(self._load())


# =============================================================================
# Factory
# =============================================================================


def create_local_store(path: str | Path | None = None) -> TranslationStore:
    """Create a file-backed store if a path is given, otherwise in-memory."""
    if path:
        return JsonFileTranslationStore(path)
    return InMemoryTranslationStore()
