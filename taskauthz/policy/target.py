"""Read-only field access on target entities (mappings, ORM rows, plain objects)."""

from __future__ import annotations

import re
from typing import Any, Mapping

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", key).lower()


def _candidates(key: str, *, is_object: bool) -> list[str]:
    snake = _snake_case(key)
    names = []
    # On objects a bare ``organization`` is usually a relationship; the
    # foreign-key column carries the id.
    if is_object and key not in ("id", "type"):
        names.append(f"{snake}_id")
    names.append(key)
    if snake != key:
        names.append(snake)
    if key == "id":
        names.append("_id")
    return names


def get_field(target: Any, key: str) -> Any:
    """
    Return the value of matrix field ``key`` on a target.

    Objects exposing ``to_target()`` are read through that mapping. Other
    objects are read by attribute: ``<key>_id`` first, then the camelCase
    name, then its snake_case form (``createdBy`` -> ``created_by``).
    Mappings use the camelCase then snake_case key. ``id`` also falls back
    to ``_id``. A missing target or field yields None.
    """

    if target is None:
        return None

    to_target = getattr(target, "to_target", None)
    if callable(to_target):
        target = to_target()

    if isinstance(target, Mapping):
        for name in _candidates(key, is_object=False):
            if target.get(name) is not None:
                return target[name]
        return None

    for name in _candidates(key, is_object=True):
        value = getattr(target, name, None)
        if value is not None:
            return value
    return None
