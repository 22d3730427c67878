"""Decoding of flat form submissions that use bracketed input names."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Union

_NAME_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")

FormItems = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def split_name(name: str) -> list[str]:
    """Split ``group[field][key]`` into ``["group", "field", "key"]``.

    An empty segment (``list[]``) is kept as ``""`` and means "append".
    Names that are not valid bracket notation are returned whole.
    """
    match = _NAME_PATTERN.match(name)
    if not match:
        return [name]
    return [match.group(1), *_SEGMENT_PATTERN.findall(match.group(2))]


def _assign(target: dict[str, Any], keys: list[str], value: Any) -> None:
    current: Any = target
    for index, key in enumerate(keys):
        last = index == len(keys) - 1
        if isinstance(current, list):
            if last:
                current.append(value)
                return
            current.append({} if keys[index + 1] else [])
            current = current[-1]
            continue

        if last:
            current[key] = value
            return

        following = keys[index + 1]
        existing = current.get(key)
        if following == "":
            if not isinstance(existing, list):
                existing = []
                current[key] = existing
        elif not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing


def parse_form(items: FormItems) -> dict[str, Any]:
    """Build nested values from flat ``(name, value)`` form pairs.

    ``colors[accent]=red`` becomes ``{"colors": {"accent": "red"}}`` and
    ``tags[]=a&tags[]=b`` becomes ``{"tags": ["a", "b"]}``. Later pairs win.
    """
    pairs = items.items() if isinstance(items, Mapping) else items
    result: dict[str, Any] = {}
    for name, value in pairs:
        _assign(result, split_name(str(name)), value)
    return result
