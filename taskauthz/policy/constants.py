"""Closed vocabularies used by the authorization matrix."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "SuperAdmin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"


class ResourceType(str, Enum):
    """Subtype tags a rule may be restricted to via ``resourceType``."""

    PROJECT_TASK = "ProjectTask"
    ASSIGNED_TASK = "AssignedTask"
    ROUTINE_TASK = "RoutineTask"
    TASK = "Task"
    TASK_ACTIVITY = "TaskActivity"
    TASK_COMMENT = "TaskComment"


class Scope(str, Enum):
    """Organizational relationship a rule requires between principal and target."""

    ANY = "any"
    CROSS_ORG = "crossOrg"
    OWN_ORG = "ownOrg"
    OWN_ORG_CROSS_DEPT = "ownOrg.crossDept"
    OWN_ORG_OWN_DEPT = "ownOrg.ownDept"


# Principal flags every matrix may reference in ``requires``.
BUILTIN_FLAGS: frozenset[str] = frozenset({"isHod", "isPlatformOrgUser"})
