"""
Host platform contracts used by settings pages.

A settings page never touches menus, settings validation hooks, async action
dispatch or asset loading directly; it calls a ``Registrar``. This module
defines that protocol, the one-time notices shown above the form and
``RecordingRegistrar``, an in-process registrar that keeps every registration
in memory so pages can be driven headless (CLI, tests).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)

RenderCallback = Callable[[], str]
LoadHook = Callable[[Mapping[str, Any]], None]
SanitizeHook = Callable[[Any], Any]


@dataclass(frozen=True)
class AssetBundle:
    """Client-side script and style used by media pickers and action buttons."""

    handle: str = "settingspage"
    script_url: str = "/static/settingspage.js"
    style_url: str = "/static/settingspage.css"
    config_name: str = "settingspageAjax"


@dataclass(frozen=True)
class MenuPage:
    handle: str
    slug: str
    page_title: str
    menu_title: str
    capability: str
    parent: str | None = None
    icon: str | None = None
    position: int | None = None
    render: RenderCallback | None = None


@dataclass(frozen=True)
class FieldRegistration:
    page: str
    group: str
    name: str
    label: str | None
    render: RenderCallback
    args: Mapping[str, Any] = field(default_factory=dict)


class Registrar(Protocol):
    """Menu, settings and action registration offered by the host."""

    def register_menu_page(
        self,
        *,
        slug: str,
        page_title: str,
        menu_title: str,
        capability: str,
        render: RenderCallback,
        icon: str | None = None,
        position: int | None = None,
    ) -> str: ...

    def register_submenu_page(
        self,
        *,
        parent: str,
        slug: str,
        page_title: str,
        menu_title: str,
        capability: str,
        render: RenderCallback | None = None,
    ) -> str: ...

    def add_load_hook(self, handle: str, hook: LoadHook) -> None: ...

    def register_settings_group(self, page: str, group: str, sanitize: SanitizeHook) -> None: ...

    def register_section(self, page: str, group: str, title: str | None, render: RenderCallback) -> None: ...

    def register_field(
        self,
        page: str,
        group: str,
        name: str,
        label: str | None,
        render: RenderCallback,
        args: Mapping[str, Any],
    ) -> None: ...

    def register_action(self, name: str, callback: Callable[..., Any]) -> None: ...

    def enqueue_assets(self, bundle: AssetBundle, config: Mapping[str, Any]) -> None: ...


@dataclass(frozen=True)
class Notice:
    code: str
    message: str
    level: str = "info"  # info | success | warning | error


class NoticeBoard:
    """One-time notices, shown once on the next render and then discarded."""

    def __init__(self) -> None:
        self._pending: list[Notice] = []

    @property
    def pending(self) -> list[Notice]:
        return list(self._pending)

    def add(self, code: str, message: str, level: str = "info") -> None:
        if any(notice.code == code for notice in self._pending):
            return
        self._pending.append(Notice(code=code, message=message, level=level))

    def pop_all(self) -> list[Notice]:
        notices, self._pending = self._pending, []
        return notices


def page_handle(slug: str, parent: str | None = None) -> str:
    if parent:
        return f"{parent}_page_{slug}"
    return f"toplevel_page_{slug}"


class RecordingRegistrar:
    """Keeps every registration in memory; re-registering the same key replaces it."""

    def __init__(self) -> None:
        self.menu_pages: dict[str, MenuPage] = {}
        self.submenu_pages: list[MenuPage] = []
        self.load_hooks: dict[str, list[LoadHook]] = {}
        self.settings_groups: dict[str, dict[str, SanitizeHook]] = {}
        self.sections: dict[str, dict[str, tuple[str | None, RenderCallback]]] = {}
        self.fields: dict[tuple[str, str, str], FieldRegistration] = {}
        self.actions: dict[str, list[Callable[..., Any]]] = {}
        self.enqueued: dict[str, tuple[AssetBundle, dict[str, Any]]] = {}

    def register_menu_page(
        self,
        *,
        slug: str,
        page_title: str,
        menu_title: str,
        capability: str,
        render: RenderCallback,
        icon: str | None = None,
        position: int | None = None,
    ) -> str:
        handle = page_handle(slug)
        self.menu_pages[slug] = MenuPage(
            handle=handle,
            slug=slug,
            page_title=page_title,
            menu_title=menu_title,
            capability=capability,
            icon=icon,
            position=position,
            render=render,
        )
        LOGGER.debug("Registered menu page %s", handle)
        return handle

    def register_submenu_page(
        self,
        *,
        parent: str,
        slug: str,
        page_title: str,
        menu_title: str,
        capability: str,
        render: RenderCallback | None = None,
    ) -> str:
        handle = page_handle(slug, parent)
        self.submenu_pages.append(
            MenuPage(
                handle=handle,
                slug=slug,
                page_title=page_title,
                menu_title=menu_title,
                capability=capability,
                parent=parent,
                render=render,
            )
        )
        LOGGER.debug("Registered submenu page %s under %s", slug, parent)
        return handle

    def add_load_hook(self, handle: str, hook: LoadHook) -> None:
        self.load_hooks.setdefault(handle, []).append(hook)

    def register_settings_group(self, page: str, group: str, sanitize: SanitizeHook) -> None:
        self.settings_groups.setdefault(page, {})[group] = sanitize

    def register_section(self, page: str, group: str, title: str | None, render: RenderCallback) -> None:
        self.sections.setdefault(page, {})[group] = (title, render)

    def register_field(
        self,
        page: str,
        group: str,
        name: str,
        label: str | None,
        render: RenderCallback,
        args: Mapping[str, Any],
    ) -> None:
        self.fields[(page, group, name)] = FieldRegistration(
            page=page,
            group=group,
            name=name,
            label=label,
            render=render,
            args=dict(args),
        )

    def register_action(self, name: str, callback: Callable[..., Any]) -> None:
        self.actions.setdefault(name, []).append(callback)

    def enqueue_assets(self, bundle: AssetBundle, config: Mapping[str, Any]) -> None:
        self.enqueued[bundle.handle] = (bundle, dict(config))

    def run_load_hooks(self, handle: str, query: Mapping[str, Any] | None = None) -> None:
        for hook in self.load_hooks.get(handle, []):
            hook(query or {})

    def dispatch_action(self, name: str, *args: Any, **kwargs: Any) -> list[Any]:
        """Invoke every callback registered under ``name``; unknown names do nothing."""
        return [callback(*args, **kwargs) for callback in self.actions.get(name, [])]

    def validate(self, page: str, group: str, inputs: Any) -> Any:
        """Run the sanitize hook bound to ``group``, as the host does before saving."""
        sanitize = self.settings_groups.get(page, {}).get(group)
        if sanitize is None:
            return inputs
        return sanitize(inputs)
