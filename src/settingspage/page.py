"""
Settings page controller.

``SettingsPage`` ties a schema registry, an option store and a host registrar
together: it registers the admin menu entry, registers each group and field for
rendering and validation, applies the reset button, stores sanitized
submissions and renders the edit form.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .fields import MultiField
from .host import AssetBundle, NoticeBoard, Registrar
from .render import (
    RESET_CONFIRMATION,
    FieldContext,
    MediaPreview,
    render_field,
    render_field_row,
    render_notices,
    render_section,
    render_submit_button,
)
from .sanitize import sanitize_group
from .schema import SchemaRegistry, SettingGroup
from .store import OptionStore
from .utils import esc_attr, esc_html, is_truthy
from .values import decode_value, get_setting

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE = "custom_settings"
DEFAULT_TITLE = "Custom Settings"
DEFAULT_MENU_PARENT = "appearance"
DEFAULT_CAPABILITY = "manage_options"
DEFAULT_SUBMIT_LABEL = "Save Settings"
DEFAULT_RESET_LABEL = "Reset Settings"

# Menu parent whose host screen already prints notices
GENERAL_SETTINGS_PARENT = "general"

# Passing this (the default) keeps the default menu placement
DEFAULT_MENU: Mapping[str, Any] = MappingProxyType({})

RESET_NOTICE = "Default settings have been reset."
SAVED_NOTICE = "Settings saved."


@dataclass(frozen=True)
class MenuConfig:
    title: str
    parent: str | None = DEFAULT_MENU_PARENT
    capability: str = DEFAULT_CAPABILITY
    icon: str | None = None
    position: int | None = None


@dataclass(frozen=True)
class PageConfig:
    slug: str = DEFAULT_PAGE
    title: str = DEFAULT_TITLE
    menu: MenuConfig | None = None
    submit: str = DEFAULT_SUBMIT_LABEL
    reset: str | None = DEFAULT_RESET_LABEL


def build_menu_config(menu: Any, title: str) -> MenuConfig | None:
    """Merge a menu mapping over the defaults; anything else disables the menu."""
    if not isinstance(menu, Mapping):
        return None
    return MenuConfig(
        title=menu.get("title") or title,
        parent=menu.get("parent", DEFAULT_MENU_PARENT) or None,
        capability=menu.get("capability") or DEFAULT_CAPABILITY,
        icon=menu.get("icon_url", menu.get("icon")),
        position=menu.get("position"),
    )


def build_page_config(
    page: str = DEFAULT_PAGE,
    title: str | None = None,
    menu: Any = DEFAULT_MENU,
    args: Mapping[str, Any] | None = None,
) -> PageConfig:
    title = title or DEFAULT_TITLE
    args = dict(args or {})
    return PageConfig(
        slug=page,
        title=title,
        menu=build_menu_config(menu, title),
        submit=args.get("submit", DEFAULT_SUBMIT_LABEL),
        reset=args.get("reset", DEFAULT_RESET_LABEL) or None,
    )


@dataclass
class _Section:
    group: SettingGroup
    fields: list[FieldContext] = field(default_factory=list)


class SettingsPage:
    """One admin settings page built from a declarative group/field schema.

    Args:
        config: Page identity, menu placement and button labels
        store: Option store holding one value per group
        registrar: Host registrar; a page without one can still render,
            sanitize and read values
        registry: Schema registry; a new one is created when omitted
        media_preview: Host callback producing preview markup for media ids
        assets: Client-side bundle enqueued when the page loads
        ajax_url: Endpoint passed to the client bundle for action buttons
        spinner_url: Loading indicator passed to the client bundle
    """

    def __init__(
        self,
        config: PageConfig,
        store: OptionStore,
        registrar: Registrar | None = None,
        *,
        registry: SchemaRegistry | None = None,
        media_preview: MediaPreview | None = None,
        assets: AssetBundle | None = None,
        ajax_url: str = "/admin-ajax",
        spinner_url: str = "/static/spinner.gif",
    ) -> None:
        self.config = config
        self.store = store
        self.registrar = registrar
        self.registry = registry if registry is not None else SchemaRegistry()
        self.media_preview = media_preview
        self.assets = assets or AssetBundle()
        self.ajax_url = ajax_url
        self.spinner_url = spinner_url
        self.notices = NoticeBoard()
        self.empty = True
        self._sections: list[_Section] = []
        self._updated_callbacks: list[Callable[[], None]] = []

    @property
    def slug(self) -> str:
        return self.config.slug

    @property
    def title(self) -> str:
        return self.config.title

    @property
    def menu(self) -> MenuConfig | None:
        return self.config.menu

    @property
    def marker_key(self) -> str:
        """Hidden input naming the group a submission belongs to."""
        return f"{self.slug}_setting"

    @property
    def reset_key(self) -> str:
        return f"{self.slug}_reset"

    def apply_settings(self, settings: Mapping[str, Mapping[str, Any] | None]) -> list[SettingGroup]:
        """Add groups to the page, seeding defaults for groups not stored yet."""
        return self.registry.apply_settings(settings, self.store, self.registrar)

    def on_settings_updated(self, callback: Callable[[], None]) -> None:
        """Register a callback fired when the page loads after a successful save."""
        self._updated_callbacks.append(callback)

    # Host phases

    def register_menu(self) -> str | None:
        """Register the admin menu entry; returns the page handle or None when disabled."""
        menu = self.menu
        if menu is None:
            LOGGER.debug("Menu disabled for settings page %s", self.slug)
            return None
        if self.registrar is None:
            LOGGER.debug("No registrar; menu for %s not registered", self.slug)
            return None

        if menu.parent:
            handle = self.registrar.register_submenu_page(
                parent=menu.parent,
                slug=self.slug,
                page_title=self.title,
                menu_title=menu.title,
                capability=menu.capability,
                render=self.render_page,
            )
        else:
            handle = self.registrar.register_menu_page(
                slug=self.slug,
                page_title=self.title,
                menu_title=menu.title,
                capability=menu.capability,
                render=self.render_page,
                icon=menu.icon,
                position=menu.position,
            )
            if self.title != menu.title:
                self.registrar.register_submenu_page(
                    parent=self.slug,
                    slug=self.slug,
                    page_title=self.title,
                    menu_title=self.title,
                    capability=menu.capability,
                )
        self.registrar.add_load_hook(handle, self.load_page)
        LOGGER.debug("Registered settings page %s as %s", self.slug, handle)
        return handle

    def register_settings(self, form: dict[str, Any] | None = None) -> None:
        """Register groups, sections and fields; apply the reset button if ``form`` carries it."""
        self.empty = True
        self._sections = []
        for group in self.registry.groups():
            section = _Section(group=group)
            self._sections.append(section)
            if self.registrar is not None:
                self.registrar.register_settings_group(self.slug, group.key, self.sanitize)
                self.registrar.register_section(
                    self.slug, group.key, group.title, lambda group=group: render_section(group, self.slug)
                )
            if not group.has_fields:
                continue

            self.empty = False
            stored = self.store.get(group.key)
            values = stored if isinstance(stored, Mapping) else {}
            for name, item in group.fields.items():
                value = values.get(name)
                if isinstance(item, MultiField):
                    value = decode_value(value)
                ctx = FieldContext.build(group.key, item, value)
                section.fields.append(ctx)
                if self.registrar is not None:
                    self.registrar.register_field(
                        self.slug,
                        group.key,
                        name,
                        item.label,
                        lambda ctx=ctx: render_field(ctx, self.media_preview),
                        ctx.as_args(),
                    )

        if form is not None and self.reset_key in form:
            self.reset(form)

    def reset(self, form: dict[str, Any]) -> None:
        """Overlay each submitted group's defaults onto ``form`` in place."""
        for group in self.registry.groups():
            submitted = form.get(group.key)
            if not isinstance(submitted, Mapping):
                continue
            form[group.key] = {**submitted, **group.defaults()}
            LOGGER.info("Reset settings group %s to defaults", group.key)
        self.notices.add("settings_reset", RESET_NOTICE, "info")

    def sanitize(self, inputs: Any) -> Any:
        return sanitize_group(inputs, self.registry, self.marker_key)

    def handle_submission(self, form: Mapping[str, Any]) -> dict[str, Any]:
        """Store a submitted form: reset if requested, then sanitize and save each group.

        Args:
            form: Nested submitted values, group key to field values

        Returns:
            Group key to the value written to the store
        """
        form = copy.deepcopy(dict(form))
        self.register_settings(form)

        saved: dict[str, Any] = {}
        for key in self.registry:
            if key not in form:
                continue
            value = self.sanitize(form[key])
            if self.store.update(key, value):
                LOGGER.info("Saved settings group %s", key)
            saved[key] = value

        if saved and not self.notices.pending:
            self.notices.add("settings_updated", SAVED_NOTICE, "success")
        return saved

    def load_page(self, query: Mapping[str, Any] | None = None) -> None:
        """Run when the page screen loads: fire update callbacks and enqueue assets."""
        query = query or {}
        if is_truthy(query.get("settings-updated")):
            for callback in self._updated_callbacks:
                callback()
        if self.registrar is not None:
            self.registrar.enqueue_assets(self.assets, {"url": self.ajax_url, "spinner": self.spinner_url})

    def get_setting(self, group: str, field: str | None = None) -> Any:
        return get_setting(self.store, group, field)

    # Rendering

    def _shows_notices(self) -> bool:
        return self.menu is None or self.menu.parent != GENERAL_SETTINGS_PARENT

    def render_page(self, action_url: str = "") -> str:
        """Render the full settings form with the current stored values."""
        self.register_settings()

        parts = [
            f'<form action="{esc_attr(action_url)}" method="POST" enctype="multipart/form-data" class="wrap">',
            f"<h2>{esc_html(self.title)}</h2>",
        ]
        if self._shows_notices():
            parts.append(render_notices(self.notices.pop_all()))

        for section in self._sections:
            if section.group.title:
                parts.append(f"<h2>{esc_html(section.group.title)}</h2>")
            parts.append(render_section(section.group, self.slug))
            if section.fields:
                rows = "".join(render_field_row(ctx, self.media_preview) for ctx in section.fields)
                parts.append(f'<table class="form-table" role="presentation">{rows}</table>')

        if not self.empty:
            parts.append(f'<input type="hidden" name="option_page" value="{esc_attr(self.slug)}" />')
            parts.append('<input type="hidden" name="action" value="update" />')
            parts.append(render_submit_button(self.config.submit))
            if self.config.reset:
                parts.append(
                    render_submit_button(self.config.reset, self.reset_key, primary=False, confirm=RESET_CONFIRMATION)
                )

        parts.append("</form>")
        return "".join(parts)


def create_settings_page(
    page: str = DEFAULT_PAGE,
    title: str | None = None,
    menu: Any = DEFAULT_MENU,
    settings: Mapping[str, Mapping[str, Any] | None] | None = None,
    args: Mapping[str, Any] | None = None,
    *,
    store: OptionStore,
    registrar: Registrar | None = None,
    **options: Any,
) -> SettingsPage:
    """Build a settings page, apply its schema and register its menu entry."""
    settings_page = SettingsPage(build_page_config(page, title, menu, args), store, registrar, **options)
    settings_page.apply_settings(settings or {})
    settings_page.register_menu()
    return settings_page
