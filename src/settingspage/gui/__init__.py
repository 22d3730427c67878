"""
NiceGUI host for settings pages.

Public API:
    - NiceGuiRegistrar: Registrar serving menu pages, form posts and actions
    - create_admin_app: Mount pages and add the admin index
    - run_admin: Build pages from definitions and start the server
"""

from __future__ import annotations

from .app import create_admin_app, run_admin
from .registrar import NiceGuiRegistrar

__all__ = [
    "NiceGuiRegistrar",
    "create_admin_app",
    "run_admin",
]
