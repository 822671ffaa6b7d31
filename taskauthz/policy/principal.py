"""Authenticated actor as seen by the policy engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .ids import normalize_id


@dataclass(frozen=True)
class Principal:
    """
    Per-request, read-only view of the authenticated user.

    Built by the authentication layer; the engine only reads it.
    """

    id: str
    role: str | None
    organization_id: str | None = None
    department_id: str | None = None
    is_platform_org_user: bool = False
    is_hod: bool = False
    capabilities: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    """Additional boolean flags referenced by ``requires`` (declared in the matrix)."""

    def flag(self, name: str) -> bool:
        """Return a capability flag by its matrix name; absent flags are False."""
        if name == "isHod":
            return self.is_hod
        if name == "isPlatformOrgUser":
            return self.is_platform_org_user
        return bool(self.capabilities.get(name, False))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Principal:
        """
        Build a principal from a claims payload or user record mapping.

        Accepts the keys the authentication layer emits (``id``/``sub``,
        ``organization``/``orgId``, ``department``/``departmentId``); any other
        boolean value is kept as a capability flag.
        """

        known = {
            "id", "sub", "userId", "role", "organization", "orgId", "organizationId",
            "department", "departmentId", "isPlatformOrgUser", "isHod",
        }
        capabilities = {k: v for k, v in data.items() if k not in known and isinstance(v, bool)}
        return cls(
            id=normalize_id(data.get("id") or data.get("sub") or data.get("userId")) or "",
            role=data.get("role"),
            organization_id=normalize_id(
                data.get("organization") or data.get("orgId") or data.get("organizationId")
            ),
            department_id=normalize_id(data.get("department") or data.get("departmentId")),
            is_platform_org_user=bool(data.get("isPlatformOrgUser", False)),
            is_hod=bool(data.get("isHod", False)),
            capabilities=MappingProxyType(capabilities),
        )

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "id": self.id,
            "role": self.role,
            "organization": self.organization_id,
            "department": self.department_id,
            "isPlatformOrgUser": self.is_platform_org_user,
            "isHod": self.is_hod,
            **dict(self.capabilities),
        }
