"""
JSON tree traversal.

Pulls translatable leaf strings out of an arbitrary JSON tree and puts
translated text back in, preserving structure exactly. Paths are tuples of
object keys and stringified array indices.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Mapping

from jsonlingo.core.models import JsonPath, StringOccurrence
from jsonlingo.processing.classifier import should_translate


def extract_strings(
    tree: Any,
    predicate: Callable[[str], bool] = should_translate,
) -> list[StringOccurrence]:
    """
    Collect every translatable leaf string, depth-first.

    Object keys are visited in insertion order and arrays in index order,
    so repeated calls on the same tree yield the same sequence.
    """
    occurrences: list[StringOccurrence] = []

    def visit(node: Any, path: JsonPath) -> None:
        if isinstance(node, str):
            if predicate(node):
                occurrences.append(StringOccurrence(path=path, value=node))
        elif isinstance(node, list):
            for index, item in enumerate(node):
                visit(item, path + (str(index),))
        elif isinstance(node, dict):
            for key, value in node.items():
                visit(value, path + (str(key),))

    visit(tree, ())
    return occurrences


def apply_translations(tree: Any, translations: Mapping[JsonPath, str]) -> Any:
    """
    Return a deep copy of `tree` with translated leaves substituted.

    Only string leaves whose path appears in `translations` change; a partial
    map (e.g. a mid-run snapshot) leaves the remaining leaves as they were.
    The input tree is never mutated.
    """

    def rebuild(node: Any, path: JsonPath) -> Any:
        if isinstance(node, str):
            return translations.get(path, node)
        if isinstance(node, list):
            return [rebuild(item, path + (str(index),)) for index, item in enumerate(node)]
        if isinstance(node, dict):
            return {key: rebuild(value, path + (str(key),)) for key, value in node.items()}
        return copy.deepcopy(node)

    return rebuild(tree, ())

