"""
Translator backends.

Usage:
    from jsonlingo.backends import build_backend

    backend = build_backend(get_settings())
    text_fr = await backend.translate("Hello world", "en", "fr")
"""

from __future__ import annotations

from jsonlingo.backends.base import TranslatorBackend
from jsonlingo.backends.libretranslate import LibreTranslateBackend
from jsonlingo.config import Settings


def build_backend(settings: Settings) -> TranslatorBackend:
    """Create the backend selected by `settings.translator_backend`."""
    name = settings.translator_backend.strip().lower()
    
    if name == "libretranslate":
        return LibreTranslateBackend(
            base_url=settings.libretranslate_url,
            api_key=settings.libretranslate_api_key,
            timeout=settings.request_timeout,
            health_check_timeout=settings.health_check_timeout,
        )
    
    if name == "llm":
        # Imported here so dspy only loads when the LLM backend is selected
        from jsonlingo.backends.llm import LLMTranslatorBackend
        return LLMTranslatorBackend(settings)
    
    raise ValueError(f"Unknown translator backend: {settings.translator_backend}")


__all__ = [
    "TranslatorBackend",
    "LibreTranslateBackend",
    "build_backend",
]
