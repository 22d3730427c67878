from __future__ import annotations

import pytest

from settingspage.fields import CheckboxField, SelectField
from settingspage.schema import SchemaRegistry, action_hook_name, normalize_group, normalize_settings
from settingspage.store import MemoryOptionStore


def test_normalize_group_fills_missing_attributes() -> None:
    group = normalize_group("empty", None)

    assert group.key == "empty"
    assert group.title is None
    assert group.description is None
    assert dict(group.fields) == {}
    assert group.has_fields is False


def test_normalize_settings_keeps_field_order(theme_settings) -> None:
    groups = normalize_settings(theme_settings)

    assert list(groups) == ["colors", "about"]
    colors = groups["colors"]
    assert list(colors.fields) == ["accent", "dark", "tagline"]
    assert isinstance(colors.fields["accent"], SelectField)
    assert isinstance(colors.fields["dark"], CheckboxField)


def test_group_defaults_omit_none() -> None:
    group = normalize_group(
        "colors",
        {"fields": {"color": {"default": "blue"}, "size": {}}},
    )

    assert group.defaults() == {"color": "blue"}


def test_apply_settings_seeds_defaults_once(store: MemoryOptionStore, theme_settings) -> None:
    registry = SchemaRegistry()

    registry.apply_settings(theme_settings, store)
    assert store.get("colors") == {"accent": "blue", "dark": 1}
    assert store.get("about") == {}

    store.update("colors", {"accent": "red", "dark": 0})
    registry.apply_settings(theme_settings, store)

    assert store.get("colors") == {"accent": "red", "dark": 0}
    assert list(registry) == ["colors", "about"]
    assert len(registry) == 2


def test_apply_settings_keeps_empty_stored_group() -> None:
    store = MemoryOptionStore({"colors": {}})
    registry = SchemaRegistry()

    registry.apply_settings({"colors": {"fields": {"accent": {"default": "blue"}}}}, store)

    # add() is a no-op when the key exists, so the empty value stays
    assert store.get("colors") == {}


def test_apply_settings_registers_callable_actions(store, registrar) -> None:
    calls: list[str] = []

    def flush() -> str:
        calls.append("flush")
        return "flushed"

    settings = {
        "cache": {
            "fields": {
                "flush": {"type": "action", "action": flush},
                "inert": {"type": "action"},
            }
        }
    }
    SchemaRegistry().apply_settings(settings, store, registrar)

    assert list(registrar.actions) == ["cache_flush"]
    assert registrar.dispatch_action(action_hook_name("cache", "flush")) == ["flushed"]
    assert calls == ["flush"]


def test_registry_lookup(theme_settings) -> None:
    registry = SchemaRegistry()
    registry.apply_settings(theme_settings, MemoryOptionStore())

    assert "colors" in registry
    assert "missing" not in registry
    assert registry.get("missing") is None
    assert registry.defaults("colors") == {"accent": "blue", "dark": 1}
    assert registry.defaults("missing") == {}


@pytest.mark.parametrize(
    "default",
    [["x", "z"], {"x": 1, "y": 0, "z": True}, '{"x":1,"z":1}'],
)
def test_multi_defaults_are_stored_encoded(default) -> None:
    store = MemoryOptionStore()
    settings = {"g": {"fields": {"m": {"type": "multi", "options": ["x", "y", "z"], "default": default}}}}

    SchemaRegistry().apply_settings(settings, store)

    assert store.get("g") == {"m": '{"x":1,"y":0,"z":1}'}


def test_multi_default_without_options_keeps_its_keys() -> None:
    group = normalize_group("g", {"fields": {"m": {"type": "multi", "default": ["a"]}}})

    assert group.defaults() == {"m": '{"a":1}'}
