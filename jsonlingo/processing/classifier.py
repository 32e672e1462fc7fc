"""
Decide whether a JSON string leaf is human-readable text worth translating.

Classification is conservative: anything that looks structural (URLs,
identifiers, colors, placeholders, markup) is skipped, even when it could
also pass as a short sentence. A skipped string is left untouched in the
output, a mistranslated identifier breaks the consumer.
"""

from __future__ import annotations

import re
from typing import Any

URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
HEX_COLOR_PATTERN = re.compile(r"^#(?:[A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
NUMBER_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?$")

# {{name}}, {name}, %name%, ${name}
PLACEHOLDER_PATTERN = re.compile(r"\{\{[^}]+\}\}|\{[^}]+\}|%[a-zA-Z0-9_]+%|\$\{[^}]+\}")
# $name, {name}
VARIABLE_PATTERN = re.compile(r"\$[a-zA-Z_][a-zA-Z0-9_]*|\{[a-zA-Z_][a-zA-Z0-9_]*\}")
HTML_TAG_PATTERN = re.compile(r"<[^>]+>")

PLACEHOLDER_RATIO = 0.5
HTML_RATIO = 0.7
MIN_LENGTH = 2

TECHNICAL_PATTERNS = [
    re.compile(r"^[A-Z_][A-Z0-9_]*$"),  # CONSTANT_NAMES
    re.compile(r"^[a-z]+(?:[A-Z][a-z]*)*$"),  # camelCase
    re.compile(r"^[a-z]+(?:-[a-z]+)*$"),  # kebab-case
    re.compile(r"^[a-z]+(?:_[a-z]+)*$"),  # snake_case
    re.compile(r"^\d{4}-\d{2}-\d{2}"),  # ISO dates
    re.compile(r"^\d+(?:px|%|em|rem)$"),  # CSS lengths
    re.compile(r"^(?:rgb|rgba|hsl|hsla)\(", re.IGNORECASE),  # CSS colors
]


def _matched_length(pattern: re.Pattern[str], text: str) -> int:
    return sum(len(match.group(0)) for match in pattern.finditer(text))


def is_structural_token(text: str) -> bool:
    """True if the stripped text has the shape of an identifier or CSS value."""
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in TECHNICAL_PATTERNS)


def should_translate(text: Any) -> bool:
    """
    Return True if `text` is a human-readable string worth translating.

    Pure and order-independent: any rejecting check short-circuits.
    """
    if not isinstance(text, str) or not text:
        return False

    stripped = text.strip()
    if len(stripped) < MIN_LENGTH:
        return False

    if URL_PATTERN.match(text) or EMAIL_PATTERN.match(text):
        return False

    if HEX_COLOR_PATTERN.match(text) or NUMBER_PATTERN.match(stripped):
        return False

    placeholder_length = (
        _matched_length(PLACEHOLDER_PATTERN, text)
        + _matched_length(VARIABLE_PATTERN, text)
    )
    if placeholder_length > len(text) * PLACEHOLDER_RATIO:
        return False

    if _matched_length(HTML_TAG_PATTERN, text) > len(text) * HTML_RATIO:
        return False

    return not is_structural_token(text)
