from __future__ import annotations

import html
import json
import re

from settingspage.fields import build_field
from settingspage.host import Notice
from settingspage.render import (
    FieldContext,
    render_field,
    render_field_row,
    render_notices,
    render_section,
    render_submit_button,
)
from settingspage.schema import normalize_group


def _render(config: dict, value=None, media_preview=None) -> str:
    ctx = FieldContext.build("colors", build_field("item", config), value)
    return render_field(ctx, media_preview)


def test_field_context_names() -> None:
    ctx = FieldContext.build("colors", build_field("accent", {"label": "Accent"}), "red")

    assert ctx.id == "colors_accent"
    assert ctx.name == "colors[accent]"
    assert ctx.as_args()["label_for"] == "colors_accent"
    assert ctx.as_args()["type"] == "text"


def test_text_input_escapes_value() -> None:
    html = _render({"description": "Shown below"}, 'say "hi"')

    assert '<input name="colors[item]" id="colors_item" type="text"' in html
    assert 'value="say &quot;hi&quot;"' in html
    assert 'class="regular-text"' in html
    assert '<p class="description">Shown below</p>' in html


def test_unknown_type_keeps_html_type() -> None:
    assert 'type="date"' in _render({"type": "date"}, "2024-01-01")


def test_checkbox_checked_for_stored_one() -> None:
    checked = _render({"type": "checkbox", "description": "Enable"}, 1)
    unchecked = _render({"type": "checkbox"}, 0)

    assert 'type="checkbox" value="1" checked="checked"' in checked
    assert '<p class="description">Enable</p></label>' in checked
    assert "checked=" not in unchecked


def test_radio_marks_current_option() -> None:
    html = _render({"type": "radio", "options": {"a": "Alpha", "b": "Beta"}}, "b")

    assert '<fieldset id="colors_item">' in html
    assert 'value="a" /> Alpha' in html
    assert 'value="b" checked="checked" /> Beta' in html
    assert html.count("<br />") == 1


def test_select_marks_current_option() -> None:
    html = _render({"type": "select", "options": {"blue": "Blue", "red": "Red"}}, "red")

    assert html.startswith('<select name="colors[item]" id="colors_item">')
    assert '<option value="blue">Blue</option>' in html
    assert '<option value="red" selected="selected">Red</option>' in html


def test_choice_fields_without_options_render_empty() -> None:
    assert _render({"type": "select"}) == '<select name="colors[item]" id="colors_item"></select>'
    assert _render({"type": "radio"}) == '<fieldset id="colors_item"></fieldset>'


def test_multi_checks_decoded_flags() -> None:
    html = _render({"type": "multi", "options": ["x", "y"]}, '{"x":1,"y":0}')

    assert 'name="colors[item][x]" type="checkbox" value="1" checked="checked"' in html
    assert 'name="colors[item][y]" type="checkbox" value="1" />' in html


def test_textarea() -> None:
    html = _render({"type": "textarea"}, "line <1>\nline 2")

    assert '<textarea name="colors[item]" rows="5" id="colors_item" class="large-text">' in html
    assert "line &lt;1&gt;\nline 2</textarea>" in html


def test_media_renders_preview_and_buttons() -> None:
    previews: list[int] = []

    def preview(media_id: int) -> str:
        previews.append(media_id)
        return f'<img src="/media/{media_id}.png">'

    html = _render({"type": "media", "label": "Logo"}, "12", preview)

    assert '<fieldset class="settings-media" id="colors_item">' in html
    assert '<input name="colors[item]" type="hidden" value="12" />' in html
    assert '<img src="/media/12.png">' in html
    assert "select-media" in html and "Select Logo" in html
    assert "remove-media" in html and "Remove Logo" in html
    assert previews == [12]


def test_media_without_value_skips_preview() -> None:
    html = _render({"type": "media"}, "", lambda media_id: "<img>")

    assert "<img>" not in html


def test_action_button() -> None:
    html = _render({"type": "action", "label": "Flush cache"})

    assert html.startswith('<p class="settings-action">')
    assert 'type="button" class="button button-large" value="Flush cache"' in html


def test_divider() -> None:
    assert _render({"type": "divider"}) == "<hr>"


def test_field_row_has_label() -> None:
    ctx = FieldContext.build("colors", build_field("accent", {"label": "Accent"}))

    row = render_field_row(ctx)

    assert row.startswith('<tr><th scope="row"><label for="colors_accent">Accent</label></th><td>')
    assert row.endswith("</td></tr>")


def test_section_emits_description_and_marker() -> None:
    group = normalize_group("colors", {"description": "Pick <colors>"})

    html = render_section(group, "theme_options")

    assert html.startswith("Pick &lt;colors&gt;")
    assert '<input name="colors[theme_options_setting]" type="hidden" value="colors" />' in html


def test_notices() -> None:
    html = render_notices([Notice("settings_reset", "Default settings have been reset.", "info")])

    assert html == (
        '<div id="setting-error-settings_reset" class="notice notice-info settings-error is-dismissible">'
        "<p><strong>Default settings have been reset.</strong></p></div>"
    )


def test_submit_buttons() -> None:
    primary = render_submit_button("Save")
    reset = render_submit_button("Reset", "theme_options_reset", primary=False, confirm="Sure ?")

    assert primary == (
        '<p class="submit"><input type="submit" name="submit" id="submit"'
        ' class="button button-primary button-large" value="Save" /></p>'
    )
    assert 'name="theme_options_reset"' in reset
    assert 'class="button button-small"' in reset
    assert 'onclick="return confirm(&quot;Sure ?&quot;)"' in reset


def test_reset_confirmation_is_a_javascript_string_literal() -> None:
    message = 'It\'s "final" \\ really?'

    button = render_submit_button("Reset", "reset", primary=False, confirm=message)

    onclick = html.unescape(re.search(r'onclick="([^"]*)"', button).group(1))
    assert onclick == f"return confirm({json.dumps(message)})"
    assert json.loads(onclick[len("return confirm(") : -1]) == message
