"""
jsonlingo - structure-preserving translation of large JSON documents.

Design:
1. Extract only human-readable leaf strings (URLs, ids, colors are skipped)
2. Deduplicate so each distinct string is translated once
3. Batch, rate-limit and retry calls to the translation backend
4. Cache translations by (text, source, target)
5. Rebuild the tree and report a diff / minimal patch

Usage:
    from jsonlingo import TranslationConfig, create_orchestrator

    orchestrator = create_orchestrator()
    session = await orchestrator.start_translation(
        data,
        TranslationConfig(source_language="en", target_language="fr"),
    )
    translated = session.translated_json
"""

from jsonlingo.core.models import (
    TranslationConfig,
    TranslationSession,
    SessionStatus,
    JobStatus,
)
from jsonlingo.core.errors import (
    AlreadyRunning,
    NoTranslatableContent,
    NoSessionToResume,
)
from jsonlingo.processing import (
    should_translate,
    extract_strings,
    apply_translations,
    deduplicate_strings,
    generate_diff,
    create_patch,
)
from jsonlingo.services import (
    TranslationCache,
    RateLimiter,
    TranslationOrchestrator,
    create_orchestrator,
)

__version__ = "0.1.0"

__all__ = [
    "TranslationConfig",
    "TranslationSession",
    "SessionStatus",
    "JobStatus",
    "AlreadyRunning",
    "NoTranslatableContent",
    "NoSessionToResume",
    "should_translate",
    "extract_strings",
    "apply_translations",
    "deduplicate_strings",
    "generate_diff",
    "create_patch",
    "TranslationCache",
    "RateLimiter",
    "TranslationOrchestrator",
    "create_orchestrator",
]
