# =============================================================
#  ini_settings/binding.py
# =============================================================
"""Resolve a record type into its INI binding.

A record is a pydantic model decorated with :func:`ini_section` whose
members use :func:`IniField`. :func:`resolve` turns that declaration into an
immutable :class:`BindingDescriptor` once per type; every later call is a
cache hit.

```python
@ini_section("Window")
class WindowCfg(IniRecord):
    width: int = IniField(800, key="Width")
    mode: Mode = IniField(Mode.NORMAL, key="Mode")
    note: str = "not bound, never read or written"
```
"""

from __future__ import annotations

import functools
import logging
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .codec import IniDocument, ValueKind, coerce, format_value, render_section
from .errors import CoercionError, UnboundTypeError
from .helpers import KEY_EXTRA, SECTION_ATTR

__all__ = ["FieldBinding", "BindingDescriptor", "resolve", "list_section"]

log = logging.getLogger(__name__)

_SCALAR_KINDS = {
    str: ValueKind.STRING,
    bool: ValueKind.BOOLEAN,
    int: ValueKind.INTEGER,
    float: ValueKind.FLOAT,
}


@dataclass(frozen=True)
class FieldBinding:
    member: str
    key: str
    kind: ValueKind
    enum_cls: Optional[Type[Enum]] = None
    populate: bool = True  # False for read-only members
    serialize: bool = True  # False for write-only members


@dataclass(frozen=True)
class BindingDescriptor:
    model_cls: Type[BaseModel]
    section: str
    fields: Tuple[FieldBinding, ...]

    # ------------ reading ------------------------------------------- #

    def has_section(self, doc: IniDocument, section: Optional[str] = None) -> bool:
        target = self.section if section is None else section
        return any(s == target for (s, _) in doc)

    def populate(self, doc: IniDocument, section: Optional[str] = None) -> BaseModel:
        """Build a record from ``doc``; keys that are absent keep their default."""
        target = self.section if section is None else section
        values: Dict[str, Any] = {}
        for fb in self.fields:
            if not fb.populate:
                continue
            raw = doc.get((target, fb.key))
            if raw is None:
                continue
            values[fb.member] = coerce(raw, fb.kind, fb.enum_cls, key=fb.key)
        try:
            return self.model_cls(**values)
        except ValidationError as e:
            raise CoercionError(
                str(values), self.model_cls.__name__, detail=f"[{target}] {e}"
            ) from e

    def default_record(self) -> BaseModel:
        try:
            return self.model_cls()
        except ValidationError:
            # required members without defaults stay unset
            return self.model_cls.model_construct()

    # ------------ writing ------------------------------------------- #

    def field_lines(self, record: BaseModel) -> List[Tuple[str, str]]:
        return [
            (fb.key, format_value(getattr(record, fb.member, None), fb.kind, key=fb.key))
            for fb in self.fields
            if fb.serialize
        ]

    def render(self, record: BaseModel, section: Optional[str] = None) -> List[str]:
        target = self.section if section is None else section
        return render_section(target, self.field_lines(record))


def list_section(base: str, index: int) -> str:
    """Name of the ``index``-th (1-based) section of a record list."""
    return f"{base}{index}"


# --------------------------------------------------------------------------- #
#                              resolution                                     #
# --------------------------------------------------------------------------- #


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _value_kind(model_cls: type, member: str, annotation: Any) -> Tuple[ValueKind, Optional[Type[Enum]]]:
    target = _unwrap_optional(annotation)
    if isinstance(target, type):
        if issubclass(target, Enum):
            return ValueKind.ENUM, target
        for py_type, kind in _SCALAR_KINDS.items():
            if target is py_type:
                return kind, None
    raise UnboundTypeError(
        model_cls, f"member '{member}' has unsupported type {annotation!r}"
    )


def _field_binding(model_cls: type, member: str, info: FieldInfo) -> Optional[FieldBinding]:
    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
    key = extra.get(KEY_EXTRA)
    if key is None:
        return None
    kind, enum_cls = _value_kind(model_cls, member, info.annotation)
    return FieldBinding(
        member=member,
        key=str(key),
        kind=kind,
        enum_cls=enum_cls,
        populate=extra.get("editable", True) is not False,
        serialize=not info.exclude,
    )


@functools.lru_cache(maxsize=None)
def resolve(model_cls: type) -> BindingDescriptor:
    """Return the (cached) binding of ``model_cls``."""
    if not (isinstance(model_cls, type) and issubclass(model_cls, BaseModel)):
        raise UnboundTypeError(model_cls, "not a pydantic model")
    section = getattr(model_cls, SECTION_ATTR, None)
    if section is None:
        raise UnboundTypeError(model_cls)

    fields = []
    for member, info in model_cls.model_fields.items():
        fb = _field_binding(model_cls, member, info)
        if fb is not None:
            fields.append(fb)

    log.debug("Resolved %s -> [%s] with %d bound fields", model_cls.__name__, section, len(fields))
    return BindingDescriptor(model_cls=model_cls, section=str(section), fields=tuple(fields))
