# =============================================================
#  ini_settings/errors.py
# =============================================================
"""Exception taxonomy.

Every error derives from :class:`IniSettingsError` *and* from the builtin
exception a caller would naturally expect (``ValueError`` for bad data,
``PermissionError`` for a read-only target, ...), so both styles of
``except`` clause work.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

__all__ = [
    "IniSettingsError",
    "MalformedLineError",
    "UnboundTypeError",
    "CoercionError",
    "EmptyOrUnreadableError",
    "AccessDeniedError",
    "BackupNotFoundError",
    "IOFailureError",
]


class IniSettingsError(Exception):
    """Base class for all errors raised by ini_settings."""


class MalformedLineError(IniSettingsError, ValueError):
    """A line is neither blank, a comment, a header nor ``key=value``."""

    def __init__(self, line: str, lineno: Optional[int] = None):
        self.line = line
        self.lineno = lineno
        where = f" (line {lineno})" if lineno is not None else ""
        super().__init__(f"Malformed INI line{where}: {line!r}")


class UnboundTypeError(IniSettingsError, TypeError):
    """The record type carries no usable section / field bindings."""

    def __init__(self, model_cls: Any, reason: str = "no @ini_section declaration"):
        self.model_cls = model_cls
        name = getattr(model_cls, "__qualname__", repr(model_cls))
        super().__init__(f"Type '{name}' is not bound to an INI section: {reason}.")


class CoercionError(IniSettingsError, ValueError):
    """A stored value cannot be converted to the member's declared type."""

    def __init__(self, value: str, target: str, *, key: Optional[str] = None, detail: str = ""):
        self.value = value
        self.target = target
        self.key = key
        msg = f"Cannot convert {value!r} to {target}"
        if key is not None:
            msg += f" for key '{key}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class EmptyOrUnreadableError(IniSettingsError):
    """The cache could not be populated from the backing file."""

    def __init__(self, path: Path, reason: str = "file is empty"):
        self.path = path
        super().__init__(f"Cannot load settings from {path}: {reason}")


class AccessDeniedError(IniSettingsError, PermissionError):
    """Write attempted against a read-only target."""

    def __init__(self, path: Path, reason: str = "file is read-only"):
        self.path = path
        super().__init__(f"Access to {path} denied: {reason}")


class BackupNotFoundError(IniSettingsError, FileNotFoundError):
    """Restore requested but no backup file exists."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Backup file not found: {path}")


class IOFailureError(IniSettingsError, OSError):
    """Underlying storage failed (disk, filesystem permissions, mkdir)."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"I/O failure on {path}: {reason}")
