# =============================================================
#  ini_settings/engine.py
# =============================================================
from __future__ import annotations

import asyncio
import logging
import os
import secrets
import shutil
import stat
from pathlib import Path
from typing import List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from .binding import BindingDescriptor, list_section, resolve
from .codec import IniDocument, parse_file, section_keys
from .config import IniSettingsConfig
from .errors import (
    AccessDeniedError,
    BackupNotFoundError,
    EmptyOrUnreadableError,
    IOFailureError,
    MalformedLineError,
)

__all__ = ["IniSettings"]

log = logging.getLogger(__name__)
R = TypeVar("R", bound=BaseModel)


# ---------- file helpers ---------------------------------------------------- #


def _is_read_only(path: Path) -> bool:
    return not (path.stat().st_mode & stat.S_IWUSR)


def _clear_read_only(path: Path) -> None:
    mode = path.stat().st_mode
    if not mode & stat.S_IWUSR:
        os.chmod(path, mode | stat.S_IWUSR)


# --------------------------------------------------------------------------- #
#                              IniSettings                                    #
# --------------------------------------------------------------------------- #


class IniSettings:
    """
    Typed access to one INI file with a parsed in-memory cache.

    Build it with :meth:`create` (async) or :meth:`open` (sync); both make
    sure the file exists and try an initial load.

    Every operation on one instance runs under a single ``asyncio.Lock``.
    Two instances pointed at the same file do **not** exclude each other.

    The cache is only replaced by a reload: ``write``, ``write_list`` and
    ``restore_from_backup`` leave it as it was, so call :meth:`reload` to
    observe what was just written.
    """

    def __init__(self, path: str | os.PathLike, *, config: Optional[IniSettingsConfig] = None):
        self._config = config or IniSettingsConfig()
        self._path = Path(path).expanduser()
        self._backup_path = self._path.with_name(self._path.name + self._config.backup_suffix)
        self._cache: IniDocument = {}
        self._lock = asyncio.Lock()

    # ------------ construction ---------------------------------------- #

    @classmethod
    async def create(
        cls, path: str | os.PathLike, *, config: Optional[IniSettingsConfig] = None
    ) -> "IniSettings":
        inst = cls(path, config=config)
        await asyncio.to_thread(inst._prepare)
        return inst

    @classmethod
    def open(
        cls, path: str | os.PathLike, *, config: Optional[IniSettingsConfig] = None
    ) -> "IniSettings":
        inst = cls(path, config=config)
        inst._prepare()
        return inst

    # ------------ accessors ------------------------------------------- #

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    @property
    def has_backup(self) -> bool:
        return self._backup_path.exists()

    @property
    def cache(self) -> IniDocument:
        """Snapshot of the parsed document (a copy)."""
        return dict(self._cache)

    # ------------ reading --------------------------------------------- #

    async def reload(self) -> None:
        """Replace the cache with a fresh parse of the file."""
        async with self._lock:
            self._cache = await asyncio.to_thread(self._load_document)

    async def read(self, model_cls: Type[R]) -> R:
        binding = resolve(model_cls)
        async with self._lock:
            await self._ensure_loaded()
            return binding.populate(self._cache)

    async def read_safe(self, model_cls: Type[R]) -> R:
        """Like :meth:`read`, but any failure yields a default record."""
        binding = resolve(model_cls)
        async with self._lock:
            try:
                await self._ensure_loaded()
                return binding.populate(self._cache)
            except Exception as exc:
                log.warning(
                    "Could not read [%s] from %s; using defaults.  (%s)",
                    binding.section,
                    self._path,
                    exc,
                )
                return binding.default_record()

    async def read_list(self, model_cls: Type[R]) -> List[R]:
        """Read ``{section}1``, ``{section}2``, ... up to the first missing one."""
        binding = resolve(model_cls)
        async with self._lock:
            if not self._cache:
                self._cache = await asyncio.to_thread(self._load_document)
            return self._collect_list(binding)

    # ------------ writing --------------------------------------------- #

    async def write(self, record: BaseModel) -> None:
        binding = resolve(type(record))
        lines = binding.render(record)
        async with self._lock:
            await asyncio.to_thread(self._replace_contents, lines, False)
        log.debug("Wrote [%s] to %s", binding.section, self._path)

    async def write_list(self, records: Sequence[BaseModel], model_cls: Optional[Type[BaseModel]] = None) -> None:
        """Append one numbered section per record to the file."""
        if model_cls is None:
            if not records:
                raise ValueError("model_cls is required when records is empty")
            model_cls = type(records[0])
        binding = resolve(model_cls)
        lines: List[str] = []
        for idx, record in enumerate(records, start=1):
            lines.extend(binding.render(record, list_section(binding.section, idx)))
            lines.append("")
        async with self._lock:
            await asyncio.to_thread(self._replace_contents, lines, True)
        log.debug("Wrote %d [%s<n>] sections to %s", len(records), binding.section, self._path)

    async def restore_from_backup(self) -> None:
        """Overwrite the primary file with the backup copy."""
        async with self._lock:
            await asyncio.to_thread(self._restore)

    # ------------ internal -------------------------------------------- #

    def _prepare(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._path.touch()
                log.debug("Created empty settings file %s", self._path)
        except OSError as e:
            raise IOFailureError(self._path, str(e)) from e

        try:
            self._cache = self._load_document()
        except EmptyOrUnreadableError as e:
            log.warning("Initial load of %s failed; cache left empty.  (%s)", self._path, e)

    def _load_document(self) -> IniDocument:
        try:
            return parse_file(self._path, encoding=self._config.encoding)
        except FileNotFoundError as e:
            raise EmptyOrUnreadableError(self._path, "file not found") from e
        except (MalformedLineError, OSError, UnicodeDecodeError) as e:
            raise EmptyOrUnreadableError(self._path, str(e)) from e

    async def _ensure_loaded(self) -> None:
        if self._cache:
            return
        doc = await asyncio.to_thread(self._load_document)
        if not doc:
            raise EmptyOrUnreadableError(self._path)
        self._cache = doc

    def _collect_list(self, binding: BindingDescriptor) -> list:
        out = []
        idx = 1
        while section_keys(self._cache, list_section(binding.section, idx)):
            out.append(binding.populate(self._cache, list_section(binding.section, idx)))
            idx += 1
        return out

    def _replace_contents(self, lines: List[str], append: bool) -> None:
        """Back up the current file, then atomically swap in the new content."""
        encoding = self._config.encoding
        existing = ""
        mode: Optional[int] = None
        try:
            if self._path.exists():
                if _is_read_only(self._path):
                    raise AccessDeniedError(self._path)
                mode = stat.S_IMODE(self._path.stat().st_mode)
                if append:
                    existing = self._path.read_text(encoding=encoding)

            if existing and not existing.endswith("\n"):
                existing += "\n"
            text = existing + "".join(f"{line}\n" for line in lines)
            # fail before the backup is taken
            text.encode(encoding)

            if mode is not None:
                if self._backup_path.exists():
                    _clear_read_only(self._backup_path)
                shutil.copyfile(self._path, self._backup_path)
                log.info("Backed up %s to %s", self._path, self._backup_path)

            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_name = self._path.with_name(f".{self._path.name}.{secrets.token_hex(4)}.tmp")
            # 0o666 is narrowed by the process umask, like any new file
            fd = os.open(tmp_name, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
            try:
                with open(fd, "w", encoding=encoding, newline=self._config.newline) as handle:
                    handle.write(text)
                if mode is not None:
                    os.chmod(tmp_name, mode)
                os.replace(tmp_name, self._path)
            except BaseException:
                if tmp_name.exists():
                    os.unlink(tmp_name)
                raise
        except AccessDeniedError:
            raise
        except PermissionError as e:
            raise AccessDeniedError(self._path, str(e)) from e
        except (OSError, UnicodeError) as e:
            raise IOFailureError(self._path, str(e)) from e

    def _restore(self) -> None:
        if not self._backup_path.exists():
            raise BackupNotFoundError(self._backup_path)
        try:
            _clear_read_only(self._backup_path)
            shutil.copyfile(self._backup_path, self._path)
        except PermissionError as e:
            raise AccessDeniedError(self._path, str(e)) from e
        except OSError as e:
            raise IOFailureError(self._path, str(e)) from e
        log.info("Restored %s from %s", self._path, self._backup_path)
