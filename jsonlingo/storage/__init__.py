"""
Storage abstractions for the durable cache tier.
"""

from jsonlingo.storage.base import TranslationStore
from jsonlingo.storage.local import (
    InMemoryTranslationStore,
    JsonFileTranslationStore,
    create_local_store,
)

__all__ = [
    "TranslationStore",
    "InMemoryTranslationStore",
    "JsonFileTranslationStore",
    "create_local_store",
]
