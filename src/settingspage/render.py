"""
HTML rendering of settings fields, sections and notices.

``render_field`` dispatches on the field kind. Every branch emits one
self-contained control followed by the field description, if any. Values are
compared in their string form, so a stored ``1``, ``"1"`` or ``True`` all check
a checkbox.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .fields import ActionField, ChoiceField, Field, FieldType
from .host import Notice
from .schema import SettingGroup
from .utils import absint, as_text, esc_attr, esc_html, is_truthy
from .values import decode_value

LOGGER = logging.getLogger(__name__)

MediaPreview = Callable[[int], "str | None"]

RESET_CONFIRMATION = "Do you really want to reset all these settings to their default values ?"


@dataclass(frozen=True)
class FieldContext:
    """A field resolved for one render: its HTML id, input name and current value."""

    field: Field
    group: str
    id: str
    name: str
    value: Any = None

    @classmethod
    def build(cls, group: str, field: Field, value: Any = None) -> FieldContext:
        return cls(
            field=field,
            group=group,
            id=f"{group}_{field.name}",
            name=f"{group}[{field.name}]",
            value=value,
        )

    def as_args(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "label_for": self.id,
            "type": self.field.type,
            "label": self.field.label,
            "description": self.field.description,
        }


def _checked(expected: Any, current: Any) -> str:
    return ' checked="checked"' if as_text(expected) == as_text(current) else ""


def _selected(expected: Any, current: Any) -> str:
    return ' selected="selected"' if as_text(expected) == as_text(current) else ""


def _description(field: Field) -> str:
    if field.description is None:
        return ""
    return f'<p class="description">{esc_html(field.description)}</p>'


def _options(ctx: FieldContext) -> Mapping[str, str]:
    field = ctx.field
    options = field.options if isinstance(field, ChoiceField) else {}
    if not options:
        LOGGER.debug("No options defined for field %s", ctx.id)
    return options


def _render_checkbox(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    return (
        f'<label><input name="{esc_attr(ctx.name)}" id="{esc_attr(ctx.id)}" type="checkbox" value="1"'
        f"{_checked(1, ctx.value)} />"
        f"{_description(ctx.field)}</label>"
    )


def _render_radio(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    choices = [
        f'<label><input name="{esc_attr(ctx.name)}" type="radio" value="{esc_attr(value)}"'
        f"{_checked(value, ctx.value)} /> {esc_html(label)}</label>"
        for value, label in _options(ctx).items()
    ]
    return f'<fieldset id="{esc_attr(ctx.id)}">{"<br />".join(choices)}{_description(ctx.field)}</fieldset>'


def _render_select(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    choices = "".join(
        f'<option value="{esc_attr(value)}"{_selected(value, ctx.value)}>{esc_html(label)}</option>'
        for value, label in _options(ctx).items()
    )
    return (
        f'<select name="{esc_attr(ctx.name)}" id="{esc_attr(ctx.id)}">{choices}</select>'
        f"{_description(ctx.field)}"
    )


def _render_media(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    label = ctx.field.label or ""
    parts = [
        f'<fieldset class="settings-media" id="{esc_attr(ctx.id)}">',
        f'<input name="{esc_attr(ctx.name)}" type="hidden" value="{esc_attr(ctx.value)}" />',
    ]
    media_id = absint(ctx.value)
    if media_id and media_preview is not None:
        preview = media_preview(media_id)
        if preview:
            parts.append(preview)
    parts.append(
        f'<p><a class="button button-large select-media" title="{esc_attr(label)}">Select {esc_html(label)}</a>'
        f'<a class="button button-small remove-media" title="{esc_attr(label)}">Remove {esc_html(label)}</a></p>'
    )
    parts.append(_description(ctx.field))
    parts.append("</fieldset>")
    return "".join(parts)


def _render_textarea(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    return (
        f'<textarea name="{esc_attr(ctx.name)}" rows="5" id="{esc_attr(ctx.id)}" class="large-text">'
        f"{esc_html(ctx.value)}</textarea>"
        f"{_description(ctx.field)}"
    )


def _render_multi(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    flags = decode_value(ctx.value)
    if not isinstance(flags, Mapping):
        flags = {}
    choices = [
        f'<label><input name="{esc_attr(ctx.name)}[{esc_attr(key)}]" type="checkbox" value="1"'
        f"{_checked(1, 1 if is_truthy(flags.get(key)) else 0)} /> {esc_html(label)}</label>"
        for key, label in _options(ctx).items()
    ]
    return f'<fieldset id="{esc_attr(ctx.id)}">{"<br />".join(choices)}{_description(ctx.field)}</fieldset>'


def _render_action(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    field = ctx.field
    if not (isinstance(field, ActionField) and callable(field.action)):
        LOGGER.debug("No action defined for field %s", ctx.id)
    return (
        f'<p class="settings-action"><input name="{esc_attr(ctx.name)}" id="{esc_attr(ctx.id)}" type="button"'
        f' class="button button-large" value="{esc_attr(field.label)}" /></p>'
        f"{_description(field)}"
    )


def _render_divider(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    return "<hr>"


def _render_input(ctx: FieldContext, media_preview: MediaPreview | None) -> str:
    return (
        f'<input name="{esc_attr(ctx.name)}" id="{esc_attr(ctx.id)}" type="{esc_attr(ctx.field.type)}"'
        f' value="{esc_attr(ctx.value)}" class="regular-text" />'
        f"{_description(ctx.field)}"
    )


_RENDERERS: dict[FieldType, Callable[[FieldContext, MediaPreview | None], str]] = {
    FieldType.CHECKBOX: _render_checkbox,
    FieldType.RADIO: _render_radio,
    FieldType.SELECT: _render_select,
    FieldType.MEDIA: _render_media,
    FieldType.TEXTAREA: _render_textarea,
    FieldType.MULTI: _render_multi,
    FieldType.ACTION: _render_action,
    FieldType.DIVIDER: _render_divider,
}


def render_field(ctx: FieldContext, media_preview: MediaPreview | None = None) -> str:
    """Render the control for one field.

    Args:
        ctx: Field resolved with its id, input name and current value
        media_preview: Optional host callback returning preview markup for a
            media id, or None when the asset has no preview

    Returns:
        The control markup
    """
    renderer = _RENDERERS.get(ctx.field.kind, _render_input)
    return renderer(ctx, media_preview)


def render_field_row(ctx: FieldContext, media_preview: MediaPreview | None = None) -> str:
    label = ""
    if ctx.field.label:
        label = f'<label for="{esc_attr(ctx.id)}">{esc_html(ctx.field.label)}</label>'
    return f'<tr><th scope="row">{label}</th><td>{render_field(ctx, media_preview)}</td></tr>'


def render_section(group: SettingGroup, page: str) -> str:
    """Render the group description and the hidden marker naming the group."""
    description = esc_html(group.description) if group.description else ""
    marker = (
        f'<input name="{esc_attr(f"{group.key}[{page}_setting]")}" type="hidden" value="{esc_attr(group.key)}" />'
    )
    return description + marker


def render_notices(notices: Iterable[Notice]) -> str:
    return "".join(
        f'<div id="setting-error-{esc_attr(notice.code)}" class="notice notice-{esc_attr(notice.level)}'
        f' settings-error is-dismissible"><p><strong>{esc_html(notice.message)}</strong></p></div>'
        for notice in notices
    )


def render_submit_button(label: str, name: str = "submit", *, primary: bool = True, confirm: str | None = None) -> str:
    classes = "button button-primary button-large" if primary else "button button-small"
    onclick = ""
    if confirm:
        onclick = f' onclick="{esc_attr(f"return confirm({json.dumps(confirm)})")}"'
    return (
        f'<p class="submit"><input type="submit" name="{esc_attr(name)}" id="{esc_attr(name)}"'
        f' class="{classes}" value="{esc_attr(label)}"{onclick} /></p>'
    )
