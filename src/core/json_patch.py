"""Minimal JSON patch support for `*.json.patch` bundle files.

Only `add`, `replace` and `remove` are understood; other ops are ignored.
Missing intermediate objects along a pointer are created. Operations whose
pointer cannot be followed (bad list index, scalar in the way) are skipped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from core.domain.errors import AddInError


logger = logging.getLogger(__name__)

APPEND_SEGMENT = "-"


def _pointer_segments(pointer: str) -> list[str]:
    segments = [s for s in pointer.split("/") if s]
    return [s.replace("~1", "/").replace("~0", "~") for s in segments]


def _list_index(items: list[Any], key: str, *, inserting: bool = False) -> int | None:
    """Index named by `key`, None when it is not a usable position."""

    if not key.isdecimal():
        return None
    index = int(key)
    upper = len(items) if inserting else len(items) - 1
    return index if index <= upper else None


def _parent_of(document: Any, segments: list[str]) -> Any:
    target = document
    for key in segments:
        if isinstance(target, list):
            index = _list_index(target, key)
            if index is None:
                return None
            target = target[index]
        elif isinstance(target, dict):
            if not isinstance(target.get(key), (dict, list)):
                target[key] = {}
            target = target[key]
        else:
            return None
    return target if isinstance(target, (dict, list)) else None


def _apply_to_list(items: list[Any], kind: str, last: str, value: Any) -> bool:
    if last == APPEND_SEGMENT:
        if kind == "remove":
            return False
        items.append(value)
        return True

    index = _list_index(items, last, inserting=kind == "add")
    if index is None:
        return False
    if kind == "add":
        items.insert(index, value)
    elif kind == "replace":
        items[index] = value
    else:
        del items[index]
    return True


def apply_patch_document(document: Any, operations: Iterable[Any]) -> Any:
    """Apply operations in order, mutating and returning `document`."""

    for op in operations:
        if not isinstance(op, dict):
            logger.debug("Ignoring malformed patch operation %r", op)
            continue

        kind = op.get("op")
        segments = _pointer_segments(str(op.get("path", "")))
        if kind not in ("add", "replace", "remove"):
            logger.debug("Ignoring unsupported patch op %r", kind)
            continue
        if not segments:
            continue

        target = _parent_of(document, segments[:-1])
        last = segments[-1]
        if isinstance(target, list):
            applied = _apply_to_list(target, kind, last, op.get("value"))
        elif isinstance(target, dict):
            if kind == "remove":
                target.pop(last, None)
            else:
                target[last] = op.get("value")
            applied = True
        else:
            applied = False

        if not applied:
            logger.debug("Skipping %s at unreachable path %r", kind, op.get("path"))
    return document


def _load_json(path: Path, role: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8-sig") or "{}")
    except ValueError as exc:
        raise AddInError(f"Invalid JSON in {role} '{path}': {exc}") from exc


def patch_json_file(target: Path, patch: Path) -> Any:
    """Apply the patch file to the target file, creating `{}` if missing.

    Raises `AddInError` naming the offending file when either side is not
    usable JSON.
    """

    if not target.exists():
        target.write_text("{}", encoding="utf-8")

    document = _load_json(target, "patch target")
    if not isinstance(document, (dict, list)):
        raise AddInError(f"Cannot patch '{target}': document is not a JSON object or array")

    operations = _load_json(patch, "patch file")
    if isinstance(operations, dict):
        operations = [operations]
    if not isinstance(operations, list):
        raise AddInError(f"Invalid patch file '{patch}': expected a list of operations")

    apply_patch_document(document, operations)
    target.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return document
