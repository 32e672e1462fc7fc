"""
Group extracted strings by value.

Deduplication bounds backend calls to the number of distinct strings,
no matter how often each one repeats in the document.
"""

from __future__ import annotations

from typing import Sequence

from jsonlingo.core.models import StringOccurrence, UniqueString


def deduplicate_strings(
    occurrences: Sequence[StringOccurrence],
) -> tuple[list[UniqueString], dict[str, list[int]]]:
    """
    Partition occurrences by exact value (case-sensitive, no normalization).

    Returns:
        (unique_strings, value_index) where unique strings are in first-seen
        order with the first occurrence's path as representative, and
        value_index maps each value to all its occurrence indices.
    """
    value_index: dict[str, list[int]] = {}
    for index, occurrence in enumerate(occurrences):
        value_index.setdefault(occurrence.value, []).append(index)

    unique = [
        UniqueString(
            path=occurrences[indices[0]].path,
            value=value,
            occurrence_indices=indices,
        )
        for value, indices in value_index.items()
    ]
    return unique, value_index
