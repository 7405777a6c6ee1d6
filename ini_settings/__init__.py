# =============================================================
#  ini_settings/__init__.py
# =============================================================
"""
ini-settings
============

Declarative mapping between **pydantic** records and INI files, with a
parsed in-memory cache, a per-instance async lock and a ``.bak`` backup
taken before every write.

Main ideas
~~~~~~~~~~
* A record is a pydantic model. ``@ini_section("Name")`` picks its
  section; ``IniField(default, key="Key")`` binds a member to a key.
  Members without ``IniField`` are never read nor written.
* :class:`IniSettings` owns one file. It parses the file once into a
  cache and serves typed reads from it; writes back the previous file up
  first and then replace the whole file atomically.
* Lists of records use numbered sections: ``[Server1]``, ``[Server2]``, …

Quick example
~~~~~~~~~~~~~
```python
from enum import Enum
from ini_settings import IniRecord, IniField, IniSettings, ini_section

class Theme(Enum):
    Light = 1
    Dark = 2

@ini_section("Display")
class DisplayCfg(IniRecord):
    width: int = IniField(800, key="Width")
    theme: Theme = IniField(Theme.Light, key="Theme")

settings = await IniSettings.create("~/my_app/settings.ini")
await settings.write(DisplayCfg(width=1024, theme=Theme.Dark))
await settings.reload()
cfg = await settings.read(DisplayCfg)          # -> width=1024 theme=Dark
cfg = await settings.read_safe(DisplayCfg)     # never raises
await settings.restore_from_backup()           # undo the last write
```
"""

from __future__ import annotations

from importlib import metadata as _meta
import logging as _logging

# --------------------------------------------------------------------- #
# Version
# --------------------------------------------------------------------- #
try:  # When installed (pip/poetry)
    __version__: str = _meta.version("ini-settings")
except _meta.PackageNotFoundError:  # Editable checkout / source tree
    __version__ = "0.1.0"

# --------------------------------------------------------------------- #
# Logging
# --------------------------------------------------------------------- #
_logging.getLogger(__name__).addHandler(_logging.NullHandler()) # *never* touch the root logger.

# --------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------- #
from pydantic import BaseModel  # noqa: E402

from .binding import BindingDescriptor, FieldBinding, list_section, resolve  # noqa: E402
from .codec import (  # noqa: E402
    IniDocument,
    ValueKind,
    coerce,
    format_value,
    parse,
    parse_file,
    parse_lines,
    serialize,
)
from .config import IniSettingsConfig  # noqa: E402
from .engine import IniSettings  # noqa: E402
from .errors import (  # noqa: E402
    AccessDeniedError,
    BackupNotFoundError,
    CoercionError,
    EmptyOrUnreadableError,
    IniSettingsError,
    IOFailureError,
    MalformedLineError,
    UnboundTypeError,
)
from .helpers import IniField, IniRecord, ini_section  # noqa: E402
from .watchers import watch_and_reload  # noqa: E402

__all__ = [
    "IniSettings",
    "IniSettingsConfig",
    "IniRecord",
    "IniField",
    "ini_section",
    "BaseModel",
    "BindingDescriptor",
    "FieldBinding",
    "resolve",
    "list_section",
    "IniDocument",
    "ValueKind",
    "parse",
    "parse_lines",
    "parse_file",
    "serialize",
    "coerce",
    "format_value",
    "watch_and_reload",
    "IniSettingsError",
    "MalformedLineError",
    "UnboundTypeError",
    "CoercionError",
    "EmptyOrUnreadableError",
    "AccessDeniedError",
    "BackupNotFoundError",
    "IOFailureError",
]
