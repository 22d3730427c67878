from __future__ import annotations

import pytest

from settingspage.fields import build_field
from settingspage.sanitize import OMIT, sanitize_field, sanitize_group, sanitize_textarea
from settingspage.schema import SchemaRegistry
from settingspage.store import MemoryOptionStore

MARKER = "theme_options_setting"


def _registry(settings: dict) -> SchemaRegistry:
    registry = SchemaRegistry()
    registry.apply_settings(settings, MemoryOptionStore())
    return registry


@pytest.mark.parametrize(
    ("field_type", "raw", "expected"),
    [
        ("checkbox", "1", 1),
        ("checkbox", "on", 1),
        ("checkbox", None, 0),
        ("checkbox", "", 0),
        ("checkbox", "0", 0),
        ("radio", "Dark Blue", "dark-blue"),
        ("select", "red", "red"),
        ("media", "42", 42),
        ("media", "-3", 0),
        ("media", "abc", 0),
        ("email", " user@example.com ", "user@example.com"),
        ("email", "not-an-email", ""),
        ("url", "example.com/page", "http://example.com/page"),
        ("url", "javascript:alert(1)", ""),
        ("number", "3.5", 3.5),
        ("number", "12 apples", 12.0),
        ("number", "many", 0.0),
        ("text", "  <b>Hello</b>\n  world ", "Hello world"),
        ("text", None, ""),
    ],
)
def test_builtin_rules(field_type: str, raw, expected) -> None:
    field = build_field("item", {"type": field_type, "options": {"a": "A"}})

    assert sanitize_field(field, raw) == expected


@pytest.mark.parametrize("field_type", ["action", "divider"])
def test_fields_without_storage_are_omitted(field_type: str) -> None:
    assert sanitize_field(build_field("item", {"type": field_type}), "x") is OMIT


def test_textarea_preserves_newlines_and_tabs() -> None:
    assert sanitize_textarea("a\tb\nc") == "a\tb\nc"


def test_textarea_strips_markup_per_line() -> None:
    assert sanitize_textarea("  first <em>line</em>  \r\n second\n\n") == "first line\nsecond"


def test_multi_encodes_every_option() -> None:
    field = build_field("features", {"type": "multi", "options": ["x", "y", "z"]})

    assert sanitize_field(field, {"x": "1"}) == '{"x":1,"y":0,"z":0}'
    assert sanitize_field(field, ["y", "z"]) == '{"x":0,"y":1,"z":1}'


def test_multi_submitted_empty_is_omitted() -> None:
    field = build_field("features", {"type": "multi", "options": ["x"]})

    assert sanitize_field(field, None) is OMIT
    assert sanitize_field(field, {}) is OMIT


def test_custom_sanitize_wins_even_for_unknown_type() -> None:
    seen: list[tuple] = []

    def shout(value, name):
        seen.append((value, name))
        return str(value).upper()

    field = build_field("code", {"type": "made-up", "sanitize": shout})

    assert sanitize_field(field, "abc") == "ABC"
    assert seen == [("abc", "code")]


class TestSanitizeGroup:
    def test_sanitizes_fields_in_order(self) -> None:
        registry = _registry(
            {
                "colors": {
                    "fields": {
                        "accent": {"type": "select", "options": ["blue", "red"]},
                        "dark": {"type": "checkbox"},
                        "divider": {"type": "divider"},
                    }
                }
            }
        )

        result = sanitize_group({MARKER: "colors", "dark": "1", "accent": "RED", "extra": "x"}, registry, MARKER)

        assert result == {"accent": "red", "dark": 1}
        assert list(result) == ["accent", "dark"]

    def test_missing_marker_passes_input_through(self) -> None:
        registry = _registry({"colors": {"fields": {"dark": {"type": "checkbox"}}}})
        raw = {"dark": "<b>raw</b>"}

        assert sanitize_group(raw, registry, MARKER) is raw

    def test_unknown_group_passes_input_through(self, caplog) -> None:
        registry = _registry({"colors": {}})
        raw = {MARKER: "missing", "dark": "1"}

        assert sanitize_group(raw, registry, MARKER) is raw
        assert "unknown settings group missing" in caplog.text

    def test_non_mapping_input_is_returned(self) -> None:
        assert sanitize_group("scalar", _registry({}), MARKER) == "scalar"
