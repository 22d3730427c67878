"""Loading of settings page definitions from YAML files."""

from __future__ import annotations

import copy
import importlib
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .host import Registrar
from .page import DEFAULT_MENU, DEFAULT_PAGE, PageConfig, SettingsPage, build_page_config
from .store import OptionStore
from .utils import load_yaml_file
from .validation import ValidationReport, validate_page_data

LOGGER = logging.getLogger(__name__)


class PageConfigError(ValueError):
    """Raised when a page definition cannot be loaded or fails validation."""

    def __init__(self, message: str, report: ValidationReport | None = None) -> None:
        super().__init__(message)
        self.report = report or ValidationReport()


@dataclass
class PageDefinition:
    page: str = DEFAULT_PAGE
    title: str | None = None
    menu: Any = field(default_factory=lambda: DEFAULT_MENU)
    args: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None

    def page_config(self) -> PageConfig:
        return build_page_config(self.page, self.title, self.menu, self.args)


def resolve_callable(reference: str) -> Callable[..., Any]:
    """Import ``package.module:attribute`` and return the callable it names."""
    module_name, _, attribute = reference.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise PageConfigError(f"Cannot import '{reference}': {exc}") from exc
    if not callable(target):
        raise PageConfigError(f"'{reference}' does not name a callable")
    return target


def _resolve_field_callables(settings: dict[str, Any]) -> None:
    for group in settings.values():
        for definition in ((group or {}).get("fields") or {}).values():
            if not definition:
                continue
            for key in ("sanitize", "action"):
                reference = definition.get(key)
                if isinstance(reference, str) and reference:
                    definition[key] = resolve_callable(reference)


def parse_page_definition(data: Mapping[str, Any], source: Path | None = None) -> PageDefinition:
    """Validate raw definition data and resolve its callable references.

    Raises:
        PageConfigError: When the data fails validation or a callable cannot be imported
    """
    report = validate_page_data(data)
    for warning in report.warnings:
        LOGGER.warning("%s: %s", warning.path, warning.message)
    if not report.is_valid:
        location = f" in {source}" if source else ""
        raise PageConfigError(f"Invalid settings page definition{location}", report)

    settings = copy.deepcopy(dict(data.get("settings") or {}))
    _resolve_field_callables(settings)

    args = {key: data[key] for key in ("submit", "reset") if key in data}
    return PageDefinition(
        page=data.get("page") or DEFAULT_PAGE,
        title=data.get("title"),
        menu=data.get("menu", DEFAULT_MENU),
        args=args,
        settings=settings,
        source=source,
    )


def load_page_definition(path: Path) -> PageDefinition:
    try:
        data = load_yaml_file(path)
    except (OSError, yaml.YAMLError) as exc:
        report = ValidationReport()
        report.add("error", "<root>", str(exc), "load-config")
        raise PageConfigError(f"Failed to load settings page definition {path}", report) from exc

    if not isinstance(data, dict):
        report = ValidationReport()
        report.add("error", "<root>", "Expected a mapping at the top level", "schema")
        raise PageConfigError(f"Invalid settings page definition in {path}", report)

    return parse_page_definition(data, source=path)


def build_page(
    definition: PageDefinition,
    store: OptionStore,
    registrar: Registrar | None = None,
    **options: Any,
) -> SettingsPage:
    """Create the page for a definition, apply its groups and register its menu."""
    page = SettingsPage(definition.page_config(), store, registrar, **options)
    page.apply_settings(definition.settings)
    page.register_menu()
    LOGGER.debug("Built settings page %s with %d group(s)", page.slug, len(page.registry))
    return page
