"""Small helpers for reading nested values out of platform JSON."""

from __future__ import annotations

import re
from typing import Any, Mapping

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _camel_to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def get_prop(obj: Any, path: str, default: Any = None) -> Any:
    """Read a dotted ``path`` from nested mappings and objects.

    Mapping keys are looked up verbatim; object attributes are tried as
    written and then in snake_case, so ``"currentUser.username"`` works
    against both a JSON document and an :class:`ArcGISContext`.

    Example::

        get_prop({"data": {"values": {"pages": []}}}, "data.values.pages")  # []
        get_prop(context, "currentUser.orgId")
    """
    current = obj
    for segment in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, (list, tuple)) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            value = getattr(current, segment, None)
            if value is None:
                value = getattr(current, _camel_to_snake(segment), None)
            current = value
    return default if current is None else current


def set_prop(obj: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Set a dotted ``path`` in nested dicts, creating them as needed."""
    *parents, last = path.split(".")
    current = obj
    for segment in parents:
        current = current.setdefault(segment, {})
    current[last] = value
    return obj


def is_guid(value: Any) -> bool:
    """Is ``value`` a 32 character hex id (with or without dashes)?"""
    if not isinstance(value, str):
        return False
    return re.fullmatch(r"[0-9a-fA-F]{32}", value.replace("-", "")) is not None


__all__ = ["get_prop", "is_guid", "set_prop"]
