"""Encoding of multi-choice values and the read accessor for stored groups."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .utils import is_truthy

if TYPE_CHECKING:
    from .store import OptionStore


def encode_multi(flags: Mapping[str, Any]) -> str:
    """Encode an option-key to 0/1 mapping as the single stored string."""
    return json.dumps({str(key): int(bool(flag)) for key, flag in flags.items()}, separators=(",", ":"))


def selected_flags(raw: Any) -> dict[str, Any]:
    """Turn a submitted or default multi value into option-key to flag.

    Accepts a mapping of flags, a list of selected keys or an already encoded
    string. Anything else selects nothing.
    """
    raw = decode_value(raw)
    if isinstance(raw, Mapping):
        return {str(key): flag for key, flag in raw.items()}
    if isinstance(raw, (list, tuple, set)):
        return {str(key): 1 for key in raw}
    return {}


def encode_selection(raw: Any, options: Iterable[str]) -> str:
    """Encode a multi value with one flag per option, in option order."""
    selected = selected_flags(raw)
    keys = list(options) or list(selected)
    return encode_multi({key: 1 if is_truthy(selected.get(key)) else 0 for key in keys})


def decode_value(value: Any) -> Any:
    """Decode a stored multi string back to ``{key: bool}``.

    Anything that is not a string holding a JSON object is returned unchanged,
    so scalar fields and multi fields share one storage shape.
    """
    if not isinstance(value, str):
        return value
    try:
        decoded = json.loads(value)
    except ValueError:
        return value
    if not isinstance(decoded, dict) or not decoded:
        return value
    return {str(key): bool(flag) if isinstance(flag, (bool, int, float)) else flag for key, flag in decoded.items()}


def get_setting(store: OptionStore, group: str, field: str | None = None) -> Any:
    """Read a stored group, or one field of it, with multi values decoded.

    Returns:
        The decoded mapping for the group, the decoded field value, or None when
        the group or field does not exist. A non-mapping group value is returned
        as is when no field is requested.
    """
    stored = store.get(group)
    if isinstance(stored, Mapping):
        if field is not None:
            if stored.get(field) is None:
                return None
            return decode_value(stored[field])
        return {str(key): decode_value(value) for key, value in stored.items()}
    if field is not None:
        return None
    return stored
