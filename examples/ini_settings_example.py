#!/usr/bin/env python3
# =============================================================
#  examples/ini_settings_example.py
# =============================================================
"""
Example showing the full read / write / backup cycle.

1. Declare records with ``@ini_section`` and ``IniField``
2. Write a single record and a numbered list of records
3. Read them back (after an explicit reload)
4. Undo the last write with ``restore_from_backup``
"""

import asyncio
import logging
import tempfile
from enum import Enum
from pathlib import Path

from ini_settings import IniField, IniRecord, IniSettings, ini_section


class Theme(Enum):
    Light = 1
    Dark = 2


@ini_section("Display")
class DisplayConfig(IniRecord):
    """Window settings."""
    width: int = IniField(800, key="Width")
    height: int = IniField(600, key="Height")
    theme: Theme = IniField(Theme.Light, key="Theme")
    fullscreen: bool = IniField(False, key="Fullscreen")


@ini_section("Server")
class ServerConfig(IniRecord):
    """One entry of the server list."""
    host: str = IniField("localhost", key="Host")
    port: int = IniField(80, key="Port")


async def main():
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    path = Path(tempfile.mkdtemp(prefix="ini_settings_")) / "app.ini"

    settings = await IniSettings.create(path)

    print("=== Single record ===")
    await settings.write(DisplayConfig(width=1920, height=1080, theme=Theme.Dark))
    await settings.reload()
    print(await settings.read(DisplayConfig))
    print(path.read_text())

    print("=== Record list ===")
    await settings.write_list([ServerConfig(host="a.example"), ServerConfig(host="b.example", port=8080)])
    await settings.reload()
    for server in await settings.read_list(ServerConfig):
        print(f"   - {server.host}:{server.port}")

    print("=== Undo last write ===")
    await settings.restore_from_backup()
    print(path.read_text())


if __name__ == "__main__":
    asyncio.run(main())
