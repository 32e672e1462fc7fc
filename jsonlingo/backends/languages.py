"""
Language codes and utilities.

"auto" is a pseudo-language: the source is detected per string by the
backend before translating.
"""

from __future__ import annotations

from jsonlingo.core.models import LanguageInfo

AUTO = "auto"


# Human-readable names
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "zh": "Chinese",
    "pt": "Portuguese",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "ko": "Korean",
    "it": "Italian",
    "ru": "Russian",
    "vi": "Vietnamese",
    "nl": "Dutch",
    "pl": "Polish",
    "th": "Thai",
    "tr": "Turkish",
    "id": "Indonesian",
    "sv": "Swedish",
    "da": "Danish",
    "fi": "Finnish",
    "el": "Greek",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "uk": "Ukrainian",
    "hi": "Hindi",
    "bn": "Bengali",
    "ar": "Arabic",
    "he": "Hebrew",
    "fa": "Persian",
    "ur": "Urdu",
    "sw": "Swahili",
}


# Served when the backend's language list cannot be fetched
FALLBACK_LANGUAGES: list[LanguageInfo] = [
    LanguageInfo(code=AUTO, name="Auto Detect"),
    *(
        LanguageInfo(code=code, name=LANGUAGE_NAMES[code])
        for code in ["en", "vi", "es", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh"]
    ),
]


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def normalize_language_code(code: str) -> str:
    """Normalize language code to standard form."""
    code = code.lower().strip()
    
    # Handle common variants
    variants = {
        "english": "en",
        "spanish": "es",
        "french": "fr",
        "german": "de",
        "chinese": "zh",
        "japanese": "ja",
        "korean": "ko",
        "portuguese": "pt",
        "italian": "it",
        "russian": "ru",
        "vietnamese": "vi",
        "dutch": "nl",
        "arabic": "ar",
        "hindi": "hi",
        "farsi": "fa",
        "auto-detect": AUTO,
        "detect": AUTO,
    }
    
    return variants.get(code, code)


def is_auto(code: str) -> bool:
    return normalize_language_code(code) == AUTO
