"""Option stores: the persisted key/value blobs that back each settings group."""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from .utils import dump_yaml_file, load_yaml_file

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class OptionStore(Protocol):
    """Host option storage, keyed by settings group."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def add(self, key: str, value: Any) -> bool:
        """Store ``value`` only if ``key`` is not present yet."""
        ...

    def update(self, key: str, value: Any) -> bool: ...


class MemoryOptionStore:
    """Dict-backed store; values are copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._options: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._options:
            return default
        return copy.deepcopy(self._options[key])

    def add(self, key: str, value: Any) -> bool:
        if key in self._options:
            return False
        self._options[key] = copy.deepcopy(value)
        return True

    def update(self, key: str, value: Any) -> bool:
        value = copy.deepcopy(value)
        if key in self._options and self._options[key] == value:
            return False
        self._options[key] = value
        return True

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._options)


class YamlOptionStore(MemoryOptionStore):
    """Persists options to a YAML file, rewriting it after every change."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return

        try:
            payload = load_yaml_file(self.path, expand=False)
        except (OSError, yaml.YAMLError) as exc:
            LOGGER.warning("Failed to load option store %s: %s", self.path, exc)
            return

        if not isinstance(payload, dict):
            LOGGER.warning("Ignoring malformed option store %s", self.path)
            return

        self._options = {str(key): value for key, value in payload.items()}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return super().get(key, default)

    def add(self, key: str, value: Any) -> bool:
        with self._lock:
            added = super().add(key, value)
            if added:
                self._save()
            return added

    def update(self, key: str, value: Any) -> bool:
        with self._lock:
            changed = super().update(key, value)
            if changed:
                self._save()
            return changed

    def _save(self) -> None:
        dump_yaml_file(self.path, self._options)
        LOGGER.debug("Wrote option store %s", self.path)
