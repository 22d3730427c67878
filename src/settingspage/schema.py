"""
Settings schema: groups of fields and the registry that owns them.

``normalize_settings`` fills every partial group and field definition with its
defaults. ``SchemaRegistry.apply_settings`` additionally wires action hooks and
seeds the option store with default values the first time a group is seen.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .fields import ActionField, Field, MultiField, build_field
from .values import encode_selection

if TYPE_CHECKING:
    from .host import Registrar
    from .store import OptionStore

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingGroup:
    """A named collection of fields persisted as one option value."""

    key: str
    title: str | None = None
    description: str | None = None
    fields: Mapping[str, Field] = field(default_factory=dict)

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)

    def defaults(self) -> dict[str, Any]:
        """Return the stored form of every default that is not None.

        Multi defaults, given as a list of keys or a key-to-flag mapping, are
        encoded the same way a submitted multi value is.
        """
        defaults: dict[str, Any] = {}
        for name, item in self.fields.items():
            if item.default is None:
                continue
            if isinstance(item, MultiField):
                defaults[name] = encode_selection(item.default, item.options)
            else:
                defaults[name] = item.default
        return defaults


def action_hook_name(group_key: str, field_name: str) -> str:
    return f"{group_key}_{field_name}"


def normalize_group(key: str, config: Mapping[str, Any] | None) -> SettingGroup:
    config = dict(config or {})
    raw_fields = config.get("fields") or {}
    if not isinstance(raw_fields, Mapping):
        LOGGER.warning("Ignoring fields of group %s: expected a mapping", key)
        raw_fields = {}

    fields = {str(name): build_field(str(name), definition) for name, definition in raw_fields.items()}
    return SettingGroup(
        key=key,
        title=config.get("title"),
        description=config.get("description"),
        fields=fields,
    )


def normalize_settings(settings: Mapping[str, Mapping[str, Any] | None]) -> dict[str, SettingGroup]:
    """Map group key to partial group config onto fully populated groups."""
    return {str(key): normalize_group(str(key), config) for key, config in settings.items()}


class SchemaRegistry:
    """Holds the normalized groups of one settings page, in registration order."""

    def __init__(self, groups: Mapping[str, SettingGroup] | None = None) -> None:
        self._groups: dict[str, SettingGroup] = dict(groups or {})

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: object) -> bool:
        return key in self._groups

    def get(self, key: str) -> SettingGroup | None:
        return self._groups.get(key)

    def groups(self) -> list[SettingGroup]:
        return list(self._groups.values())

    def defaults(self, key: str) -> dict[str, Any]:
        group = self._groups.get(key)
        return group.defaults() if group else {}

    def apply_settings(
        self,
        settings: Mapping[str, Mapping[str, Any] | None],
        store: OptionStore,
        registrar: Registrar | None = None,
    ) -> list[SettingGroup]:
        """Normalize ``settings`` into the registry.

        Callable actions are registered with ``registrar`` under
        ``{group}_{field}``. Groups without a persisted value get their
        defaults written to ``store``; existing values are left untouched.

        Returns:
            The groups that were applied, in order.
        """
        applied: list[SettingGroup] = []
        for key, group in normalize_settings(settings).items():
            for name, item in group.fields.items():
                if isinstance(item, ActionField) and callable(item.action):
                    if registrar is None:
                        LOGGER.debug("No registrar to bind action %s", action_hook_name(key, name))
                    else:
                        registrar.register_action(action_hook_name(key, name), item.action)

            self._groups[key] = group
            applied.append(group)

            if not store.get(key):
                defaults = group.defaults()
                store.add(key, defaults)
                LOGGER.info("Initialized settings group %s with %d default value(s)", key, len(defaults))
        return applied
