from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from watchfiles import Change, awatch

from .engine import IniSettings
from .errors import EmptyOrUnreadableError

log = logging.getLogger(__name__)


def _normalize_path(path: Path) -> str:
    """Return a normalized path for cross-platform comparison."""
    try:
        return os.path.normcase(str(path.resolve()))
    except (OSError, ValueError) as e:
        log.warning("Failed to normalize path %s: %s", path, e)
        return os.path.normcase(str(path))


async def watch_and_reload(
    settings: IniSettings,
    *,
    debounce: int = 500,
    stop_event: Optional[asyncio.Event] = None,
    max_attempts: int = 5,
) -> None:
    """Reload ``settings`` whenever its file changes on disk.

    Runs until ``stop_event`` is set (or the task is cancelled), so it is
    meant to be wrapped in :func:`asyncio.create_task`.

    Parameters
    ----------
    settings : IniSettings
        The engine whose cache should follow the file.
    debounce : int, default ``500``
        Milliseconds to group a burst of events (passed straight to
        :pyfunc:`watchfiles.awatch`).
    stop_event : asyncio.Event | None
        Set it to end the watch loop.
    max_attempts : int, default ``5``
        Reload retries for a file caught mid-write.
    """
    target = _normalize_path(settings.path)
    reload_events = {Change.modified, Change.added}

    log.debug("Watching %s for changes", settings.path)
    async for batch in awatch(settings.path.parent, debounce=debounce, stop_event=stop_event):
        hit = any(
            change in reload_events and _normalize_path(Path(changed)) == target
            for change, changed in batch
        )
        if hit:
            await _reload_with_retry(settings, max_attempts)
    log.debug("Stopped watching %s", settings.path)


async def _reload_with_retry(settings: IniSettings, max_attempts: int) -> None:
    base_delay = 0.01
    for attempt in range(max_attempts):
        try:
            await settings.reload()
            log.debug("Reloaded %s on attempt %d", settings.path, attempt + 1)
            return
        except EmptyOrUnreadableError as e:
            log.debug("Reload of %s failed on attempt %d: %s", settings.path, attempt + 1, e)
        if attempt < max_attempts - 1:
            await asyncio.sleep(base_delay * (2 ** attempt))
    log.warning(
        "Failed to reload %s after %d attempts, keeping the previous cache",
        settings.path,
        max_attempts,
    )


__all__ = ["watch_and_reload"]
