"""
JSON processing - classification, traversal, deduplication and diffing.

Everything here is pure: no I/O, no shared state.
"""

from jsonlingo.processing.classifier import should_translate
from jsonlingo.processing.walker import (
    extract_strings,
    apply_translations,
)
from jsonlingo.processing.dedup import deduplicate_strings
from jsonlingo.processing.diff import (
    generate_diff,
    create_patch,
    apply_patch,
    validate_json,
    format_file_size,
    estimate_translation_cost,
)

__all__ = [
    "should_translate",
    "extract_strings",
    "apply_translations",
    "deduplicate_strings",
    "generate_diff",
    "create_patch",
    "apply_patch",
    "validate_json",
    "format_file_size",
    "estimate_translation_cost",
]
