"""
NiceGUI implementation of the host registrar.

Menu pages become ``ui.page`` routes that render the settings form as raw HTML,
form posts and action buttons are served by FastAPI routes on the NiceGUI
``app``, and client assets are injected into the page head.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from nicegui import app, ui

from ..forms import parse_form
from ..host import AssetBundle, MenuPage, RecordingRegistrar, RenderCallback
from ..utils import esc_attr

if TYPE_CHECKING:
    from ..page import SettingsPage

LOGGER = logging.getLogger(__name__)


class NiceGuiRegistrar(RecordingRegistrar):
    """Serve registered settings pages from a NiceGUI application.

    Args:
        base_path: URL prefix of the admin pages
        ajax_path: URL prefix of the action endpoints
    """

    def __init__(self, base_path: str = "/admin", ajax_path: str = "/admin-ajax") -> None:
        super().__init__()
        self.base_path = base_path.rstrip("/")
        self.ajax_path = ajax_path.rstrip("/")
        self._routes: set[str] = set()
        self._action_routes: set[str] = set()

    def page_path(self, slug: str) -> str:
        return f"{self.base_path}/{slug}"

    def entries(self) -> list[MenuPage]:
        """Menu entries that render a page, top-level pages first."""
        pages = [*self.menu_pages.values(), *self.submenu_pages]
        seen: set[str] = set()
        entries: list[MenuPage] = []
        for entry in pages:
            if entry.render is None or entry.slug in seen:
                continue
            seen.add(entry.slug)
            entries.append(entry)
        return entries

    def register_menu_page(self, *, slug: str, render: RenderCallback, **kwargs: Any) -> str:
        handle = super().register_menu_page(slug=slug, render=render, **kwargs)
        self._add_page_route(slug, handle, render)
        return handle

    def register_submenu_page(self, *, slug: str, render: RenderCallback | None = None, **kwargs: Any) -> str:
        handle = super().register_submenu_page(slug=slug, render=render, **kwargs)
        if render is not None:
            self._add_page_route(slug, handle, render)
        return handle

    def _add_page_route(self, slug: str, handle: str, render: Callable[..., str]) -> None:
        path = self.page_path(slug)
        if path in self._routes:
            return
        self._routes.add(path)
        action_url = f"{path}/save"

        @ui.page(path)
        def settings_page_route(request: Request) -> None:
            self.run_load_hooks(handle, dict(request.query_params))
            ui.html(render(action_url), sanitize=False)

        LOGGER.debug("Added settings page route %s", path)

    def register_action(self, name: str, callback: Callable[..., Any]) -> None:
        super().register_action(name, callback)
        if name in self._action_routes:
            return
        self._action_routes.add(name)

        @app.post(f"{self.ajax_path}/{name}")
        async def action_route(request: Request) -> JSONResponse:
            LOGGER.debug("Dispatching action %s", name)
            results = self.dispatch_action(name)
            return JSONResponse({"success": True, "data": results[-1] if results else None})

    def enqueue_assets(self, bundle: AssetBundle, config: Mapping[str, Any]) -> None:
        super().enqueue_assets(bundle, config)
        head = [f"<script>window.{bundle.config_name} = {json.dumps(dict(config))};</script>"]
        if bundle.style_url:
            head.append(f'<link rel="stylesheet" id="{esc_attr(bundle.handle)}-css" href="{esc_attr(bundle.style_url)}">')
        if bundle.script_url:
            head.append(f'<script id="{esc_attr(bundle.handle)}-js" src="{esc_attr(bundle.script_url)}"></script>')
        ui.add_head_html("\n".join(head))

    def mount(self, page: SettingsPage) -> None:
        """Accept form posts for ``page`` and redirect back with ``settings-updated``."""
        path = self.page_path(page.slug)

        @app.post(f"{path}/save")
        async def save_route(request: Request) -> RedirectResponse:
            form = await request.form()
            page.handle_submission(parse_form(form.multi_items()))
            return RedirectResponse(f"{path}?settings-updated=true", status_code=303)

        LOGGER.debug("Mounted settings page %s at %s", page.slug, path)
