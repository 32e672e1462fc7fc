"""
Structural diff and minimal patch between an original and a translated tree.

Also hosts the small document helpers used by the CLI and API (JSON
validation, size formatting, cost estimate).
"""

from __future__ import annotations

import copy
import json
import math
from typing import Any, Iterable

from jsonlingo.core.models import DiffKind, DiffRecord, JsonPath


def _same_scalar(a: Any, b: Any) -> bool:
    # JSON distinguishes true/1 and 1/1.0
    return type(a) is type(b) and a == b


def generate_diff(original: Any, translated: Any, path: JsonPath = ()) -> list[DiffRecord]:
    """
    Compare two trees leaf by leaf.

    Lists are compared index by index up to the longer length, dicts over
    the union of keys. Nodes of different types produce a single `changed`
    record at that path and are not recursed into.
    """
    diffs: list[DiffRecord] = []

    if isinstance(original, list) and isinstance(translated, list):
        for index in range(max(len(original), len(translated))):
            child = path + (str(index),)
            if index >= len(original):
                diffs.append(DiffRecord(
                    path=child, translated=translated[index], kind=DiffKind.ADDED,
                ))
            elif index >= len(translated):
                diffs.append(DiffRecord(
                    path=child, original=original[index], kind=DiffKind.REMOVED,
                ))
            else:
                diffs.extend(generate_diff(original[index], translated[index], child))
        return diffs

    if isinstance(original, dict) and isinstance(translated, dict):
        keys = list(original) + [key for key in translated if key not in original]
        for key in keys:
            child = path + (str(key),)
            if key not in original:
                diffs.append(DiffRecord(
                    path=child, translated=translated[key], kind=DiffKind.ADDED,
                ))
            elif key not in translated:
                diffs.append(DiffRecord(
                    path=child, original=original[key], kind=DiffKind.REMOVED,
                ))
            else:
                diffs.extend(generate_diff(original[key], translated[key], child))
        return diffs

    kind = DiffKind.UNCHANGED if _same_scalar(original, translated) else DiffKind.CHANGED
    diffs.append(DiffRecord(path=path, original=original, translated=translated, kind=kind))
    return diffs


def _patch_node(orig: Any, trans: Any) -> tuple[bool, Any]:
    if isinstance(orig, str) and isinstance(trans, str):
        return orig != trans, trans

    if isinstance(orig, list) and isinstance(trans, list):
        changes: dict[int, Any] = {}
        for index, item in enumerate(trans[:len(orig)]):
            changed, value = _patch_node(orig[index], item)
            if changed:
                changes[index] = value
        if not changes:
            return False, None
        if list(changes) == list(range(len(changes))):
            return True, list(changes.values())
        return True, {str(index): value for index, value in changes.items()}

    if isinstance(orig, dict) and isinstance(trans, dict):
        patch: dict[str, Any] = {}
        for key, value in trans.items():
            if key in orig:
                changed, sub = _patch_node(orig[key], value)
                if changed:
                    patch[key] = sub
        return bool(patch), patch

    return False, None


def create_patch(original: Any, translated: Any) -> Any:
    """
    Build a minimal tree holding only the string leaves that changed.

    Only keys and indices present in both trees are walked; anything that
    exists solely in `translated` is ignored. Changed values nest under the
    original key structure. An array whose changed positions run
    contiguously from index 0 stays a list; any other array becomes an
    object keyed by the index strings. If the roots are themselves
    differing strings the translated string is returned.
    """
    changed, patch = _patch_node(original, translated)
    if not changed:
        return {}
    return patch


def apply_patch(original: Any, patch: Any) -> Any:
    """Overlay a patch from `create_patch` onto a deep copy of `original`."""
    if not isinstance(patch, (dict, list)):
        return copy.deepcopy(patch)

    result = copy.deepcopy(original)

    def overlay(target: Any, changes: Any) -> None:
        items = enumerate(changes) if isinstance(changes, list) else changes.items()
        for key, value in items:
            slot = int(key) if isinstance(target, list) else key
            current = target[slot] if isinstance(target, list) else target.get(key)
            if isinstance(value, (dict, list)) and isinstance(current, (dict, list)):
                overlay(current, value)
            else:
                target[slot] = value

    overlay(result, patch)
    return result


# =============================================================================
# Document helpers
# =============================================================================


def validate_json(text: str) -> tuple[bool, str | None, Any]:
    """
    Parse JSON text.

    Returns:
        (is_valid, error_message, data)
    """
    try:
        return True, None, json.loads(text)
    except json.JSONDecodeError as e:
        return False, str(e), None


def format_file_size(size: int) -> str:
    """Human-readable byte size, e.g. '1.5 KB'."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {units[unit]}"


def estimate_translation_cost(strings: Iterable[str], tokens_per_string: int = 10) -> int:
    """Rough token estimate: one token per `tokens_per_string` characters."""
    return sum(math.ceil(len(s) / tokens_per_string) for s in strings)
