"""
LLM-backed translator using DSPy.

Supports Gemini (primary), OpenAI, and Anthropic through DSPy's LM
wrapper. DSPy predictors are synchronous, so calls run in a worker thread
to keep the event loop free and let the orchestrator's timeout apply.
"""

from __future__ import annotations

import asyncio
import logging

import dspy

from jsonlingo.backends.base import TranslatorBackend
from jsonlingo.backends.languages import (
    LANGUAGE_NAMES,
    get_language_name,
    normalize_language_code,
)
from jsonlingo.config import Settings
from jsonlingo.core.errors import BackendError, DetectionError
from jsonlingo.core.models import LanguageInfo

logger = logging.getLogger(__name__)


# =============================================================================
# DSPy Signatures
# =============================================================================


class TranslateText(dspy.Signature):
    """Translate text while preserving meaning, tone, placeholders and markup."""
    
    text: str = dspy.InputField(desc="Text to translate")
    source_language: str = dspy.InputField(desc="Source language name")
    target_language: str = dspy.InputField(desc="Target language name")
    
    translated_text: str = dspy.OutputField(desc="Translated text")


class DetectLanguage(dspy.Signature):
    """Detect the language of text."""
    
    text: str = dspy.InputField(desc="Text to analyze")
    
    language_code: str = dspy.OutputField(desc="ISO 639-1 language code (e.g., 'en', 'es', 'fr')")


# =============================================================================
# LM configuration
# =============================================================================


def get_lm(settings: Settings) -> dspy.LM:
    """
    Build the configured language model.
    
    Raises:
        ValueError: if the provider is unknown or its API key is missing.
    """
    provider = settings.llm_provider
    
    if provider == "gemini":
        # Accept both GOOGLE_API_KEY and GEMINI_API_KEY
        api_key = settings.google_api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY not set")
        return dspy.LM(model=f"gemini/{settings.gemini_model}", api_key=api_key)
    
    elif provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not set")
        return dspy.LM(model=f"openai/{settings.openai_model}", api_key=settings.openai_api_key)
    
    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")
        return dspy.LM(
            model=f"anthropic/{settings.anthropic_model}",
            api_key=settings.anthropic_api_key,
        )
    
    else:
        raise ValueError(f"Unknown provider: {provider}")


# =============================================================================
# Backend
# =============================================================================


class LLMTranslatorBackend(TranslatorBackend):
    """
    Translate through a large language model.
    
    The LM is built lazily on first use so constructing the backend never
    needs credentials. Pass `lm` to inject a preconfigured model.
    """
    
    backend_id = "llm"
    
    def __init__(self, settings: Settings, lm: dspy.LM | None = None):
        self.settings = settings
        self._lm = lm
        
        # DSPy modules (lazy initialized)
        self._translate_module: dspy.Predict | None = None
        self._detect_module: dspy.Predict | None = None
    
    @property
    def lm(self) -> dspy.LM:
        if self._lm is None:
            self._lm = get_lm(self.settings)
        return self._lm
    
    @property
    def translate_module(self) -> dspy.Predict:
        if self._translate_module is None:
            self._translate_module = dspy.Predict(TranslateText)
        return self._translate_module
    
    @property
    def detect_module(self) -> dspy.Predict:
        if self._detect_module is None:
            self._detect_module = dspy.Predict(DetectLanguage)
        return self._detect_module
    
    def _run(self, module: dspy.Predict, **kwargs):
        with dspy.context(lm=self.lm):
            return module(**kwargs)
    
    async def translate(self, text: str, source: str, target: str) -> str:
        try:
            result = await asyncio.to_thread(
                self._run,
                self.translate_module,
                text=text,
                source_language=get_language_name(source),
                target_language=get_language_name(target),
            )
        except Exception as e:
            raise BackendError(f"LLM translation failed: {e}") from e
        
        translation = (result.translated_text or "").strip()
        if not translation:
            raise BackendError("LLM returned an empty translation")
        return translation
    
    async def detect_language(self, text: str) -> str:
        try:
            result = await asyncio.to_thread(
                self._run, self.detect_module, text=text[:500]  # Limit text length
            )
        except Exception as e:
            raise DetectionError(f"LLM language detection failed: {e}") from e
        
        code = normalize_language_code(result.language_code or "")
        if not code:
            raise DetectionError("LLM returned no language code")
        return code
    
    async def list_languages(self) -> list[LanguageInfo]:
        return [LanguageInfo(code=code, name=name) for code, name in LANGUAGE_NAMES.items()]
    
    async def health_check(self) -> bool:
        try:
            self.lm
        except ValueError as e:
            logger.warning(f"LLM backend not configured: {e}")
            return False
        return True
