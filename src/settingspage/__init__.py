"""Declarative settings pages for an admin panel.

The settingspage package turns a nested description of settings groups and
their fields into host registrations, an HTML edit form, sanitized stored
values and a read accessor:

- **fields**: Closed field variants, one per field kind
- **schema**: Group normalization and the schema registry
- **store**: Option store protocol with in-memory and YAML implementations
- **host**: Registrar protocol, notices and the in-process ``RecordingRegistrar``
- **render** / **sanitize**: Per-kind HTML rendering and input sanitization
- **values**: Multi-value encoding and the ``get_setting`` accessor
- **page**: The ``SettingsPage`` controller
- **config** / **validation**: YAML page definitions and their validation

The NiceGUI host lives in ``settingspage.gui`` and is imported on demand.
"""

from .config import PageConfigError, PageDefinition, build_page, load_page_definition
from .host import AssetBundle, RecordingRegistrar, Registrar
from .page import SettingsPage, create_settings_page
from .schema import SchemaRegistry, SettingGroup
from .store import MemoryOptionStore, OptionStore, YamlOptionStore
from .values import get_setting
from .version import __version__

__all__ = [
    "__version__",
    "AssetBundle",
    "MemoryOptionStore",
    "OptionStore",
    "PageConfigError",
    "PageDefinition",
    "RecordingRegistrar",
    "Registrar",
    "SchemaRegistry",
    "SettingGroup",
    "SettingsPage",
    "YamlOptionStore",
    "build_page",
    "create_settings_page",
    "get_setting",
    "load_page_definition",
]
