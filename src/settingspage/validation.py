from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jsonschema import Draft7Validator

from .fields import FieldType


@dataclass(slots=True)
class ValidationIssue:
    """Represents a single validation problem."""

    severity: str
    path: str
    message: str
    code: str


@dataclass(slots=True)
class ValidationReport:
    """Aggregates validation warnings and errors."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, severity: str, path: str, message: str, code: str) -> None:
        issue = ValidationIssue(severity=severity, path=path, message=message, code=code)
        if severity == "error":
            self.errors.append(issue)
        else:
            self.warnings.append(issue)


IMPORT_STRING_PATTERN = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")

_NULLABLE_STRING = {"type": ["string", "null"]}

FIELD_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "label": _NULLABLE_STRING,
        "description": _NULLABLE_STRING,
        "default": {},
        "sanitize": _NULLABLE_STRING,
        "options": {
            "oneOf": [
                {"type": "object", "additionalProperties": {"type": ["string", "number", "null"]}},
                {"type": "array", "items": {"type": ["string", "number"]}},
                {"type": "null"},
            ]
        },
        "action": _NULLABLE_STRING,
    },
    "additionalProperties": False,
}

GROUP_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "properties": {
        "title": _NULLABLE_STRING,
        "description": _NULLABLE_STRING,
        "fields": {"type": ["object", "null"], "additionalProperties": FIELD_SCHEMA},
    },
    "additionalProperties": False,
}

MENU_SCHEMA: Dict[str, Any] = {
    "anyOf": [
        {
            "type": "object",
            "properties": {
                "parent": {"type": ["string", "boolean", "null"]},
                "title": _NULLABLE_STRING,
                "capability": {"type": "string"},
                "icon": _NULLABLE_STRING,
                "icon_url": _NULLABLE_STRING,
                "position": {"type": ["integer", "null"]},
            },
            "additionalProperties": False,
        },
        {"type": ["boolean", "null", "string"]},
    ]
}

PAGE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "page": {"type": "string", "pattern": r"^[A-Za-z0-9_\-]+$"},
        "title": _NULLABLE_STRING,
        "menu": MENU_SCHEMA,
        "submit": {"type": "string"},
        "reset": {"type": ["string", "boolean", "null"]},
        "settings": {"type": "object", "additionalProperties": GROUP_SCHEMA},
    },
    "additionalProperties": False,
}

_FIELD_TYPES = frozenset(item.value for item in FieldType)
_CHOICE_TYPES = frozenset({FieldType.RADIO.value, FieldType.SELECT.value, FieldType.MULTI.value})


def _format_jsonschema_path(path: Sequence[Any]) -> str:
    if not path:
        return "<root>"
    tokens: List[str] = []
    for part in path:
        if isinstance(part, int):
            if tokens:
                tokens[-1] = f"{tokens[-1]}[{part}]"
            else:
                tokens.append(f"[{part}]")
        else:
            tokens.append(str(part))
    return ".".join(tokens) if tokens else "<root>"


def validate_page_data(data: Mapping[str, Any]) -> ValidationReport:
    """Validate a page definition against the schema and field rules.

    Args:
        data: Parsed page definition

    Returns:
        ValidationReport containing any errors or warnings found
    """
    report = ValidationReport()
    validator = Draft7Validator(PAGE_SCHEMA)

    for error in sorted(validator.iter_errors(data), key=lambda exc: _format_jsonschema_path(exc.absolute_path)):
        report.add("error", _format_jsonschema_path(error.absolute_path), error.message, "schema")

    if report.is_valid:
        _validate_fields(data, report)
    return report


def _validate_fields(data: Mapping[str, Any], report: ValidationReport) -> None:
    for group_key, group in (data.get("settings") or {}).items():
        for name, definition in ((group or {}).get("fields") or {}).items():
            path = f"settings.{group_key}.fields.{name}"
            definition = definition or {}
            field_type = definition.get("type") or FieldType.TEXT.value

            if field_type not in _FIELD_TYPES:
                report.add(
                    "warning",
                    f"{path}.type",
                    f"Unknown field type '{field_type}' is rendered as a plain input and sanitized as text",
                    "unknown-type",
                )
            if field_type in _CHOICE_TYPES and not definition.get("options"):
                report.add("warning", f"{path}.options", "No options defined; the control renders empty", "no-options")
            elif definition.get("options") and field_type not in _CHOICE_TYPES:
                report.add("warning", f"{path}.options", f"Options are ignored for '{field_type}' fields", "unused-options")
            if field_type == FieldType.ACTION.value and not definition.get("action"):
                report.add("warning", f"{path}.action", "No action defined; the button is inert", "no-action")

            for key in ("sanitize", "action"):
                reference: Optional[str] = definition.get(key)
                if reference and not IMPORT_STRING_PATTERN.match(reference):
                    report.add(
                        "error",
                        f"{path}.{key}",
                        f"'{reference}' is not an import string of the form 'package.module:function'",
                        "import-string",
                    )
