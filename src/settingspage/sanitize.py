"""
Sanitizing of submitted settings values.

A field's custom ``sanitize`` callable always wins. Otherwise the field kind
selects one of the built-in rules below. Fields that store nothing (actions,
dividers, multi fields submitted empty) are left out of the result so the
stored value is not touched for them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .fields import ChoiceField, Field, FieldType
from .schema import SchemaRegistry
from .utils import absint, as_text, esc_url_raw, is_truthy, sanitize_email, sanitize_key, sanitize_text_field, to_float
from .values import encode_selection

LOGGER = logging.getLogger(__name__)

NEW_LINE_TOKEN = "SETTINGSPAGE-NEW-LINE"
TAB_TOKEN = "SETTINGSPAGE-TABULATION"


class _Omit:
    def __repr__(self) -> str:
        return "OMIT"


OMIT: Any = _Omit()


def sanitize_textarea(value: Any) -> str:
    """Sanitize multi-line text while keeping its newlines and tabs.

    The text sanitizer collapses all whitespace, so newlines and tabs are
    swapped for sentinel tokens first and restored line by line afterwards.
    """
    if isinstance(value, (dict, list, tuple, set)):
        return ""
    text = as_text(value).replace("\r\n", "\n")
    cleaned = sanitize_text_field(text.replace("\n", NEW_LINE_TOKEN).replace("\t", TAB_TOKEN))
    lines = [line.strip().replace(TAB_TOKEN, "\t") for line in cleaned.split(NEW_LINE_TOKEN)]
    return "\n".join(lines).strip()


def sanitize_multi(field: Field, raw: Any) -> Any:
    options = field.options if isinstance(field, ChoiceField) else {}
    if not is_truthy(raw) or not options:
        return OMIT
    return encode_selection(raw, options)


_RULES: dict[FieldType, Callable[[Field, Any], Any]] = {
    FieldType.CHECKBOX: lambda field, raw: 1 if is_truthy(raw) else 0,
    FieldType.RADIO: lambda field, raw: sanitize_key(raw),
    FieldType.SELECT: lambda field, raw: sanitize_key(raw),
    FieldType.MEDIA: lambda field, raw: absint(raw),
    FieldType.TEXTAREA: lambda field, raw: sanitize_textarea(raw),
    FieldType.MULTI: sanitize_multi,
    FieldType.ACTION: lambda field, raw: OMIT,
    FieldType.DIVIDER: lambda field, raw: OMIT,
    FieldType.EMAIL: lambda field, raw: sanitize_email(raw),
    FieldType.URL: lambda field, raw: esc_url_raw(raw),
    FieldType.NUMBER: lambda field, raw: to_float(raw),
}


def sanitize_field(field: Field, raw: Any) -> Any:
    """Return the storage value for one field, or ``OMIT`` when nothing is stored."""
    if field.sanitize is not None:
        return field.sanitize(raw, field.name)
    rule = _RULES.get(field.kind)
    if rule is None:
        return sanitize_text_field(raw)
    return rule(field, raw)


def sanitize_group(inputs: Any, registry: SchemaRegistry, marker_key: str) -> Any:
    """Sanitize the submitted values of one group.

    Args:
        inputs: Raw submitted mapping for the group
        registry: Schema the group is looked up in
        marker_key: Hidden input naming the submitted group

    Returns:
        Field name to sanitized value, in field order. Input without the group
        marker, or naming an unknown group, is returned unchanged.
    """
    if not isinstance(inputs, Mapping) or not is_truthy(inputs.get(marker_key)):
        return inputs

    group_key = as_text(inputs[marker_key])
    group = registry.get(group_key)
    if group is None:
        LOGGER.warning("Submitted values name unknown settings group %s; storing them as is", group_key)
        return inputs

    values: dict[str, Any] = {}
    for name, field in group.fields.items():
        value = sanitize_field(field, inputs.get(name))
        if value is not OMIT:
            values[name] = value
    LOGGER.debug("Sanitized %d value(s) for group %s", len(values), group_key)
    return values
