from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import PydanticUndefined

__all__ = ["IniRecord", "IniField", "ini_section", "SECTION_ATTR", "KEY_EXTRA"]

SECTION_ATTR = "__ini_section__"
KEY_EXTRA = "ini_key"

M = TypeVar("M", bound=Type[BaseModel])


class IniRecord(BaseModel):
    """Convenience base class for records mapped to an INI section."""

    model_config = ConfigDict(validate_assignment=True)


def ini_section(name: str) -> Callable[[M], M]:
    """Class decorator declaring the section a record type maps to."""

    def _decorate(cls: M) -> M:
        setattr(cls, SECTION_ATTR, name)
        return cls

    return _decorate


def IniField(
    default: Any = PydanticUndefined,
    *,
    key: str,
    read_only: bool = False,
    write_only: bool = False,
    json_schema_extra: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
):
    """Wrapper around :func:`pydantic.Field` binding a member to ``key``.

    ``read_only`` members are written but never populated from the file;
    ``write_only`` members are populated but never written.
    """

    extra = dict(json_schema_extra or {})
    extra[KEY_EXTRA] = key
    if read_only:
        extra["editable"] = False
    if write_only:
        kwargs["exclude"] = True

    return Field(default, json_schema_extra=extra, **kwargs)
