"""
Core module - fundamental data models and infrastructure.

This module contains:
- models: Jobs, batches, sessions, cache entries and diff records
- errors: Exception taxonomy for the translation pipeline
- utils: Shared utility functions
"""

from jsonlingo.core.models import (
    BatchStatus,
    CacheEntry,
    DiffKind,
    DiffRecord,
    JobStatus,
    JsonPath,
    LanguageInfo,
    LogLevel,
    SessionStatus,
    StringOccurrence,
    TranslationBatch,
    TranslationConfig,
    TranslationJob,
    TranslationLog,
    TranslationSession,
    TranslationStats,
    UniqueString,
)

from jsonlingo.core.errors import (
    AlreadyRunning,
    BackendError,
    CacheError,
    DetectionError,
    JsonLingoError,
    NoSessionToResume,
    NoTranslatableContent,
)

from jsonlingo.core.utils import (
    generate_id,
    now_ms,
    utc_now,
)

__all__ = [
    # Models
    "BatchStatus",
    "CacheEntry",
    "DiffKind",
    "DiffRecord",
    "JobStatus",
    "JsonPath",
    "LanguageInfo",
    "LogLevel",
    "SessionStatus",
    "StringOccurrence",
    "TranslationBatch",
    "TranslationConfig",
    "TranslationJob",
    "TranslationLog",
    "TranslationSession",
    "TranslationStats",
    "UniqueString",
    # Errors
    "AlreadyRunning",
    "BackendError",
    "CacheError",
    "DetectionError",
    "JsonLingoError",
    "NoSessionToResume",
    "NoTranslatableContent",
    # Utils
    "generate_id",
    "now_ms",
    "utc_now",
]
