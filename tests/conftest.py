from __future__ import annotations

import copy
from pathlib import Path

import pytest

from settingspage.host import RecordingRegistrar
from settingspage.store import MemoryOptionStore

_THEME_SETTINGS = {
    "colors": {
        "title": "Colors",
        "description": "Pick the theme colors.",
        "fields": {
            "accent": {"type": "select", "label": "Accent", "default": "blue", "options": {"blue": "Blue", "red": "Red"}},
            "dark": {"type": "checkbox", "label": "Dark mode", "default": 1},
            "tagline": {"label": "Tagline"},
        },
    },
    "about": {
        "title": "About",
        "description": "A section without fields.",
    },
}


@pytest.fixture
def theme_settings() -> dict:
    return copy.deepcopy(_THEME_SETTINGS)


@pytest.fixture
def store() -> MemoryOptionStore:
    return MemoryOptionStore()


@pytest.fixture
def registrar() -> RecordingRegistrar:
    return RecordingRegistrar()


@pytest.fixture
def page_definition(tmp_path: Path) -> Path:
    path = tmp_path / "theme.yaml"
    path.write_text(
        """
page: theme_options
title: Theme Options
menu:
  parent: appearance
  title: Theme
submit: Save
reset: Reset
settings:
  colors:
    title: Colors
    fields:
      accent:
        type: select
        label: Accent
        default: blue
        options:
          blue: Blue
          red: Red
      dark:
        type: checkbox
        label: Dark mode
        default: 1
      features:
        type: multi
        options: [x, y, z]
""",
        encoding="utf-8",
    )
    return path
