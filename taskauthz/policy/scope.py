"""Scope matching: organizational/departmental position of principal vs. target."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .constants import Scope
from .ids import normalize_id
from .principal import Principal
from .target import get_field

if TYPE_CHECKING:
    from .matrix import Rule


def _same_org(principal: Principal, target_org: str | None) -> bool:
    return target_org is None or target_org == normalize_id(principal.organization_id)


def matches_scope(rule: Rule, principal: Principal, target: Any) -> bool:
    """
    Return True when the principal's position satisfies ``rule.scope``.

    ``any`` (or no scope) always matches. Unrecognized labels deny.
    """

    scope = str(rule.scope.value if isinstance(rule.scope, Scope) else rule.scope or "").strip()
    if not scope or scope == Scope.ANY.value:
        return True

    target_org = normalize_id(get_field(target, "organization"))

    if scope == Scope.CROSS_ORG.value:
        if not principal.is_platform_org_user:
            return False
        return target_org is None or target_org != normalize_id(principal.organization_id)

    if scope in (Scope.OWN_ORG.value, Scope.OWN_ORG_CROSS_DEPT.value):
        # ownOrg.crossDept: any department inside the principal's organization.
        return _same_org(principal, target_org)

    if scope == Scope.OWN_ORG_OWN_DEPT.value:
        target_dept = normalize_id(get_field(target, "department"))
        same_dept = target_dept is None or target_dept == normalize_id(principal.department_id)
        return _same_org(principal, target_org) and same_dept

    return False
