"""
NiceGUI application setup for serving settings pages.

This module wires page definitions to a ``NiceGuiRegistrar``, adds the admin
index listing every registered page and starts the NiceGUI server.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from nicegui import app, ui

from ..config import build_page
from ..store import OptionStore
from .registrar import NiceGuiRegistrar

if TYPE_CHECKING:
    from ..config import PageDefinition
    from ..page import SettingsPage

LOGGER = logging.getLogger(__name__)


def admin_index(registrar: NiceGuiRegistrar) -> None:
    """Render the list of registered settings pages."""
    with ui.column().classes("w-full max-w-3xl mx-auto p-6 gap-2"):
        ui.label("Settings").classes("text-2xl font-semibold")
        entries = registrar.entries()
        if not entries:
            ui.label("No settings pages registered.").classes("text-sm opacity-70")
        for entry in entries:
            ui.link(entry.menu_title, registrar.page_path(entry.slug)).classes("text-lg")


def create_admin_app(pages: Iterable[SettingsPage], registrar: NiceGuiRegistrar) -> None:
    """Mount every page on the registrar and add the admin index route."""
    for page in pages:
        registrar.mount(page)

    @ui.page(registrar.base_path or "/")
    def admin_index_route() -> None:
        admin_index(registrar)

    @app.get("/api/settings-pages")
    def api_settings_pages() -> list:
        return [
            {"slug": entry.slug, "title": entry.page_title, "path": registrar.page_path(entry.slug)}
            for entry in registrar.entries()
        ]


def run_admin(
    definitions: Sequence[PageDefinition],
    store: OptionStore,
    host: str = "127.0.0.1",
    port: int = 8080,
    *,
    registrar: NiceGuiRegistrar | None = None,
) -> None:
    """Build pages from ``definitions`` and serve them until interrupted.

    Args:
        definitions: Loaded page definitions
        store: Option store shared by every page
        host: Host to bind the web server to
        port: Port to run the web server on
        registrar: Registrar to use; a default ``NiceGuiRegistrar`` when omitted
    """
    registrar = registrar or NiceGuiRegistrar()
    pages = [build_page(definition, store, registrar, ajax_url=registrar.ajax_path) for definition in definitions]
    create_admin_app(pages, registrar)

    LOGGER.info("Serving %d settings page(s) on http://%s:%d%s", len(pages), host, port, registrar.base_path)
    ui.run(
        host=host,
        port=port,
        title="Settings",
        reload=False,
        show=False,
    )
