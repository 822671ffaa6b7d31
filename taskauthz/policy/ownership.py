"""
Ownership matching: is the principal connected to the target through a field?

Each ownership key maps to a small matcher function. Keys outside the
registry are only valid when the matrix declares them in ``ownershipFields``;
those are compared by plain field equality.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

from .ids import normalize_id
from .principal import Principal
from .target import get_field

if TYPE_CHECKING:
    from .matrix import Rule

OwnershipMatcher = Callable[[str, str | None, Any, Mapping[str, Any]], bool]


def _field_equals(key: str, user_id: str | None, target: Any, _params: Mapping[str, Any]) -> bool:
    return user_id is not None and normalize_id(get_field(target, key)) == user_id


def _list_contains(key: str, user_id: str | None, target: Any, _params: Mapping[str, Any]) -> bool:
    values = get_field(target, key)
    if user_id is None or not isinstance(values, (list, tuple)):
        return False
    return any(normalize_id(v) == user_id for v in values)


def _self(_key: str, user_id: str | None, target: Any, params: Mapping[str, Any]) -> bool:
    # A userId route parameter wins over the loaded target.
    param_user_id = normalize_id(params.get("userId"))
    if param_user_id:
        return param_user_id == user_id
    return user_id is not None and normalize_id(get_field(target, "id")) == user_id


OWNERSHIP_MATCHERS: dict[str, OwnershipMatcher] = {
    "self": _self,
    "manager": _field_equals,
    "createdBy": _field_equals,
    "uploadedBy": _field_equals,
    "assignees": _list_contains,
    "watchers": _list_contains,
    "mentioned": _list_contains,
    "mentions": _list_contains,
}


def matches_ownership(
    rule: Rule,
    principal: Principal,
    target: Any,
    request_params: Mapping[str, Any] | None = None,
) -> bool:
    """
    True when the rule has no ownership constraint or any of its keys matches.
    """

    if not rule.ownership:
        return True

    params = request_params or {}
    user_id = normalize_id(principal.id)
    for key in rule.ownership:
        matcher = OWNERSHIP_MATCHERS.get(key, _field_equals)
        if matcher(key, user_id, target, params):
            return True
    return False
