"""
Field definitions for settings groups.

Each field kind is its own frozen dataclass carrying only the attributes that
kind uses: choice fields own ``options``, action fields own ``action``, plain
inputs own their HTML ``input_type``. ``build_field`` turns a partial mapping
from a page definition into one of these variants.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

LOGGER = logging.getLogger(__name__)

SanitizeCallback = Callable[[Any, str], Any]
ActionCallback = Callable[..., Any]


class FieldType(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    MEDIA = "media"
    TEXTAREA = "textarea"
    MULTI = "multi"
    ACTION = "action"
    DIVIDER = "divider"
    EMAIL = "email"
    URL = "url"
    NUMBER = "number"


@dataclass(frozen=True)
class Field:
    """Attributes shared by every field kind."""

    name: str
    label: str | None = None
    description: str | None = None
    default: Any = None
    sanitize: SanitizeCallback | None = None

    kind: ClassVar[FieldType] = FieldType.TEXT

    @property
    def type(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class InputField(Field):
    """Single-line ``<input>``; also covers email, url, number and unlisted types."""

    input_type: str = "text"

    @property
    def kind(self) -> FieldType:  # type: ignore[override]
        try:
            resolved = FieldType(self.input_type)
        except ValueError:
            return FieldType.TEXT
        if resolved in _INPUT_KINDS:
            return resolved
        return FieldType.TEXT

    @property
    def type(self) -> str:
        return self.input_type


@dataclass(frozen=True)
class CheckboxField(Field):
    kind: ClassVar[FieldType] = FieldType.CHECKBOX


@dataclass(frozen=True)
class TextareaField(Field):
    kind: ClassVar[FieldType] = FieldType.TEXTAREA


@dataclass(frozen=True)
class MediaField(Field):
    kind: ClassVar[FieldType] = FieldType.MEDIA


@dataclass(frozen=True)
class DividerField(Field):
    kind: ClassVar[FieldType] = FieldType.DIVIDER


@dataclass(frozen=True)
class ChoiceField(Field):
    """Base for fields that pick from an ``options`` mapping of value to label."""

    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RadioField(ChoiceField):
    kind: ClassVar[FieldType] = FieldType.RADIO


@dataclass(frozen=True)
class SelectField(ChoiceField):
    kind: ClassVar[FieldType] = FieldType.SELECT


@dataclass(frozen=True)
class MultiField(ChoiceField):
    kind: ClassVar[FieldType] = FieldType.MULTI


@dataclass(frozen=True)
class ActionField(Field):
    """Button that triggers an asynchronous host action named ``{group}_{field}``."""

    action: ActionCallback | None = None

    kind: ClassVar[FieldType] = FieldType.ACTION


_INPUT_KINDS = frozenset({FieldType.TEXT, FieldType.EMAIL, FieldType.URL, FieldType.NUMBER})

FIELD_CLASSES: dict[str, type[Field]] = {
    FieldType.CHECKBOX.value: CheckboxField,
    FieldType.RADIO.value: RadioField,
    FieldType.SELECT.value: SelectField,
    FieldType.MEDIA.value: MediaField,
    FieldType.TEXTAREA.value: TextareaField,
    FieldType.MULTI.value: MultiField,
    FieldType.ACTION.value: ActionField,
    FieldType.DIVIDER.value: DividerField,
}

_COMMON_KEYS = ("label", "description", "default", "sanitize")


def _normalize_options(name: str, options: Any) -> dict[str, str]:
    if not options:
        return {}
    if isinstance(options, Mapping):
        return {str(key): "" if label is None else str(label) for key, label in options.items()}
    if isinstance(options, (list, tuple)):
        return {str(item): str(item) for item in options}
    LOGGER.warning("Ignoring options for field %s: expected a mapping, got %s", name, type(options).__name__)
    return {}


def build_field(name: str, config: Mapping[str, Any] | None = None) -> Field:
    """Build a fully populated field from a partial definition.

    Args:
        name: Field name, unique within its group
        config: Partial definition; ``type`` defaults to ``"text"`` and every
            other attribute to ``None`` (or an empty mapping for ``options``)

    Returns:
        The field variant matching ``type``. Unknown types become an
        ``InputField`` that keeps the type string as its HTML input type.
    """
    config = dict(config or {})
    field_type = str(config.get("type") or FieldType.TEXT.value)
    common = {key: config.get(key) for key in _COMMON_KEYS}

    cls = FIELD_CLASSES.get(field_type)
    if cls is None:
        return InputField(name=name, input_type=field_type, **common)
    if issubclass(cls, ChoiceField):
        return cls(name=name, options=_normalize_options(name, config.get("options")), **common)
    if cls is ActionField:
        return ActionField(name=name, action=config.get("action"), **common)
    return cls(name=name, **common)
