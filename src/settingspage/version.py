"""Version lookup from the installed distribution metadata."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Fallback version when running from an uninstalled source tree
_FALLBACK_VERSION = "unknown"


def get_version() -> str:
    try:
        return version("settingspage")
    except PackageNotFoundError:
        return _FALLBACK_VERSION


__version__ = get_version()
