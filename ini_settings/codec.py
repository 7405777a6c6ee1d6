# =============================================================
#  ini_settings/codec.py
#  INI text <-> ordered (section, key) -> value document
# =============================================================
"""Pure text codec - no file handles are opened except in :func:`parse_file`.

Format
------
```ini
; comment
[Section]
Key = Value
```

* lines are trimmed; blank lines and ``;`` comments are skipped
* ``[name]`` opens a section (name trimmed, never validated)
* ``key=value`` needs **exactly one** ``=``; both sides are trimmed
* anything else raises :class:`MalformedLineError` and nothing is returned

Values are never quoted or escaped.
"""

from __future__ import annotations

import io
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from .errors import CoercionError, MalformedLineError

__all__ = [
    "IniDocument",
    "ValueKind",
    "parse",
    "parse_lines",
    "parse_file",
    "render_section",
    "serialize",
    "coerce",
    "format_value",
    "section_keys",
]

log = logging.getLogger(__name__)

IniDocument = Dict[Tuple[str, str], str]


class ValueKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"


# --------------------------------------------------------------------------- #
#                               parsing                                       #
# --------------------------------------------------------------------------- #


def parse_lines(lines: Iterable[str]) -> IniDocument:
    """Parse an iterable of lines (list, generator or open text file).

    The iterable is consumed lazily, so a file object is streamed line by
    line. The returned document is only built up locally and handed back
    once every line has been accepted.
    """
    doc: IniDocument = {}
    section = ""
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(";"):
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            continue
        if line.count("=") != 1:
            raise MalformedLineError(line, lineno)
        key, value = line.split("=")
        doc[(section, key.strip())] = value.strip()
    return doc


def parse(text: str) -> IniDocument:
    # universal newlines, exactly like a file opened in text mode
    return parse_lines(io.StringIO(text, newline=None))


def parse_file(path: Path, *, encoding: str = "utf-8") -> IniDocument:
    """Stream ``path`` through :func:`parse_lines`."""
    with open(path, "r", encoding=encoding) as fp:
        doc = parse_lines(fp)
    log.debug("Parsed %d entries from %s", len(doc), path)
    return doc


def section_keys(doc: IniDocument, section: str) -> List[str]:
    """Keys stored under ``section`` in document order."""
    return [k for (s, k) in doc if s == section]


# --------------------------------------------------------------------------- #
#                             serialisation                                   #
# --------------------------------------------------------------------------- #


def render_section(section: str, field_lines: Iterable[Tuple[str, str]]) -> List[str]:
    out = [f"[{section}]"]
    out.extend(f"{key}={value}" for key, value in field_lines)
    return out


def serialize(section: str, field_lines: Iterable[Tuple[str, str]]) -> str:
    """``[section]`` followed by one ``key=value`` line per pair, in order."""
    return "\n".join(render_section(section, field_lines)) + "\n"


# --------------------------------------------------------------------------- #
#                               coercion                                      #
# --------------------------------------------------------------------------- #


def _to_bool(raw: str) -> bool:
    low = raw.lower()
    if low == "true":
        return True
    if low == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


def coerce(
    raw: str,
    kind: ValueKind,
    enum_cls: Optional[Type[Enum]] = None,
    *,
    key: Optional[str] = None,
) -> Any:
    """Convert the stored text ``raw`` into a value of ``kind``."""
    if kind is ValueKind.STRING:
        return raw
    if kind is ValueKind.ENUM:
        if enum_cls is None:
            raise TypeError("enum coercion needs an enum class")
        try:
            return enum_cls[raw]
        except KeyError:
            raise CoercionError(
                raw,
                enum_cls.__name__,
                key=key,
                detail=f"unknown variant '{raw}' (expected one of {list(enum_cls.__members__)})",
            ) from None

    parser = {ValueKind.INTEGER: int, ValueKind.FLOAT: float, ValueKind.BOOLEAN: _to_bool}[kind]
    try:
        return parser(raw)
    except ValueError as e:
        raise CoercionError(raw, kind.value, key=key, detail=str(e)) from e


def format_value(value: Any, kind: ValueKind, *, key: Optional[str] = None) -> str:
    """Textual form written to disk. ``None`` becomes an empty value.

    Values the parser could not read back (an ``=`` or a line break) raise
    :class:`CoercionError`.
    """
    if value is None:
        return ""
    if kind is ValueKind.ENUM and isinstance(value, Enum):
        text = value.name
    elif kind is ValueKind.BOOLEAN:
        text = "true" if value else "false"
    else:
        text = str(value)
    if "=" in text or "\n" in text or "\r" in text:
        raise CoercionError(text, "INI value", key=key, detail="'=' and line breaks cannot be stored")
    return text
