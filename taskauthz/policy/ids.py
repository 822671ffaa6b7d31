from __future__ import annotations

from typing import Any


def normalize_id(value: Any) -> str | None:
    """
    Canonical string form of an identifier.

    Ids arrive as ints, UUIDs, ORM-native id objects or plain strings. Falsy
    values (``None``, ``""``, ``0``) mean "no id".
    """

    if not value:
        return None
    return str(value)
