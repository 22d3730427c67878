from __future__ import annotations

import yaml

from settingspage.store import MemoryOptionStore, OptionStore, YamlOptionStore


def test_memory_store_add_is_noop_when_present() -> None:
    store = MemoryOptionStore()

    assert store.add("colors", {"accent": "blue"}) is True
    assert store.add("colors", {"accent": "red"}) is False
    assert store.get("colors") == {"accent": "blue"}


def test_memory_store_update_reports_changes() -> None:
    store = MemoryOptionStore({"colors": {"accent": "blue"}})

    assert store.update("colors", {"accent": "blue"}) is False
    assert store.update("colors", {"accent": "red"}) is True
    assert store.update("new", {}) is True
    assert store.to_dict() == {"colors": {"accent": "red"}, "new": {}}


def test_memory_store_copies_values() -> None:
    value = {"accent": "blue"}
    store = MemoryOptionStore()
    store.add("colors", value)

    value["accent"] = "red"
    fetched = store.get("colors")
    fetched["accent"] = "green"

    assert store.get("colors") == {"accent": "blue"}
    assert store.get("missing", "fallback") == "fallback"


def test_stores_satisfy_protocol(tmp_path) -> None:
    assert isinstance(MemoryOptionStore(), OptionStore)
    assert isinstance(YamlOptionStore(tmp_path / "options.yaml"), OptionStore)


def test_yaml_store_persists_changes(tmp_path) -> None:
    path = tmp_path / "state" / "options.yaml"
    store = YamlOptionStore(path)

    assert not path.exists()
    store.add("colors", {"accent": "blue", "features": '{"x":1}'})
    store.update("colors", {"accent": "red", "features": '{"x":1}'})

    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"colors": {"accent": "red", "features": '{"x":1}'}}
    assert YamlOptionStore(path).get("colors") == {"accent": "red", "features": '{"x":1}'}


def test_yaml_store_keeps_environment_references(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("ACCENT", "red")
    path = tmp_path / "options.yaml"
    path.write_text("colors:\n  accent: $ACCENT\n", encoding="utf-8")

    assert YamlOptionStore(path).get("colors") == {"accent": "$ACCENT"}


def test_yaml_store_ignores_unreadable_file(tmp_path, caplog) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("colors: [unclosed\n", encoding="utf-8")

    store = YamlOptionStore(path)

    assert store.get("colors") is None
    assert "Failed to load option store" in caplog.text


def test_yaml_store_ignores_non_mapping_payload(tmp_path, caplog) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    assert YamlOptionStore(path).get("0") is None
    assert "Ignoring malformed option store" in caplog.text
