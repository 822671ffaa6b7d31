"""
Authorization matrix: data structures and YAML loader.

The matrix is a declarative table ``resource -> operation -> [rule, ...]``.
It is loaded once at startup, validated strictly, and never mutated
afterwards, so any number of concurrent requests can read it without locks.

Expected shape (simplified):

    capabilities: [canApprove]          # optional extra principal flags
    ownershipFields: [reviewer]         # optional extra field-equality keys
    resources:
      Task:
        read:
          - roles: [User]
            scope: ownOrg.ownDept
          - roles: [User]
            resourceType: AssignedTask
            ownership: [assignees, createdBy]
        update:
          - roles: [Manager]
            requires: ["!isHod"]
            scope: ownOrg

Anything unknown (role, subtype, scope label, flag, ownership key) is a
configuration error: the process should refuse to start rather than
silently fail open or closed at request time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from .constants import BUILTIN_FLAGS, ResourceType, Role, Scope
from .errors import MatrixConfigError
from .ownership import OWNERSHIP_MATCHERS

logger = logging.getLogger(__name__)


# ---- Data structures -----------------------------------------------------------------


@dataclass(frozen=True)
class Rule:
    """One eligibility + scope + ownership clause."""

    roles: frozenset[str]
    resource_type: str | None = None
    requires: tuple[str, ...] = ()
    scope: Scope | str = Scope.ANY
    ownership: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleMatrix:
    """Fully-loaded, read-only authorization matrix."""

    resources: Mapping[str, Mapping[str, tuple[Rule, ...]]]
    capabilities: frozenset[str] = frozenset()
    ownership_fields: frozenset[str] = frozenset()
    source: str | None = field(default=None, compare=False)

    def rules_for(self, resource: str, operation: str) -> tuple[Rule, ...]:
        """Rules for (resource, operation); empty when not configured."""
        operations = self.resources.get(resource)
        if not operations:
            return ()
        return operations.get(operation, ())

    @property
    def rule_count(self) -> int:
        return sum(len(rules) for ops in self.resources.values() for rules in ops.values())


# ---- Source models -------------------------------------------------------------------


class RuleSource(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    roles: list[str] = Field(min_length=1)
    resource_type: str | None = Field(default=None, alias="resourceType")
    requires: list[str] = Field(default_factory=list)
    scope: str | None = None
    ownership: list[str] = Field(default_factory=list)


class MatrixSource(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    resources: dict[str, dict[str, list[RuleSource]]]
    capabilities: list[str] = Field(default_factory=list)
    ownership_fields: list[str] = Field(default_factory=list, alias="ownershipFields")


# ---- Loader --------------------------------------------------------------------------


_ROLES = frozenset(r.value for r in Role)
_RESOURCE_TYPES = frozenset(t.value for t in ResourceType)


def _parse_scope(where: str, raw: str | None) -> Scope:
    if raw is None or not str(raw).strip():
        return Scope.ANY
    try:
        return Scope(str(raw).strip())
    except ValueError:
        raise MatrixConfigError(f"{where}: unknown scope {raw!r}") from None


def _parse_rule(
    where: str,
    src: RuleSource,
    flags: frozenset[str],
    ownership_keys: frozenset[str],
) -> Rule:
    unknown_roles = set(src.roles) - _ROLES
    if unknown_roles:
        raise MatrixConfigError(f"{where}: unknown roles {sorted(unknown_roles)}")

    if src.resource_type is not None and src.resource_type not in _RESOURCE_TYPES:
        raise MatrixConfigError(f"{where}: unknown resourceType {src.resource_type!r}")

    for requirement in src.requires:
        name = requirement[1:] if requirement.startswith("!") else requirement
        if name not in flags:
            raise MatrixConfigError(f"{where}: requires unknown flag {name!r}")

    unknown_keys = set(src.ownership) - ownership_keys
    if unknown_keys:
        raise MatrixConfigError(f"{where}: unknown ownership keys {sorted(unknown_keys)}")

    return Rule(
        roles=frozenset(src.roles),
        resource_type=src.resource_type,
        requires=tuple(src.requires),
        scope=_parse_scope(where, src.scope),
        ownership=tuple(src.ownership),
    )


def build_rule_matrix(raw: Mapping[str, Any], *, source: str | None = None) -> RuleMatrix:
    """Validate an already-parsed matrix mapping and freeze it."""

    if not isinstance(raw, Mapping):
        raise MatrixConfigError("authorization matrix must be a mapping")
    if "resources" not in raw:
        raise MatrixConfigError("missing top-level 'resources' key in authorization matrix")

    try:
        model = MatrixSource.model_validate(raw)
    except ValidationError as exc:
        raise MatrixConfigError(f"invalid authorization matrix: {exc}") from exc

    flags = BUILTIN_FLAGS | frozenset(model.capabilities)
    clashing = set(model.ownership_fields) & set(OWNERSHIP_MATCHERS)
    if clashing:
        raise MatrixConfigError(f"ownershipFields redefine built-in keys: {sorted(clashing)}")
    ownership_keys = frozenset(OWNERSHIP_MATCHERS) | frozenset(model.ownership_fields)

    resources: dict[str, Mapping[str, tuple[Rule, ...]]] = {}
    for resource, operations in model.resources.items():
        parsed_ops: dict[str, tuple[Rule, ...]] = {}
        for operation, rules in operations.items():
            where = f"{resource}.{operation}"
            if not rules:
                raise MatrixConfigError(f"{where}: rule list must not be empty (omit the operation instead)")
            parsed_ops[operation] = tuple(
                _parse_rule(f"{where}[{i}]", rule, flags, ownership_keys) for i, rule in enumerate(rules)
            )
        resources[resource] = MappingProxyType(parsed_ops)

    matrix = RuleMatrix(
        resources=MappingProxyType(resources),
        capabilities=frozenset(model.capabilities),
        ownership_fields=frozenset(model.ownership_fields),
        source=source,
    )
    logger.info(
        "Authorization matrix loaded source=%s resources=%d rules=%d",
        source or "<mapping>",
        len(resources),
        matrix.rule_count,
    )
    return matrix


def load_rule_matrix(path: Path) -> RuleMatrix:
    """Load and validate the authorization matrix YAML from disk."""

    try:
        raw_text = path.read_text(encoding="utf-8")
        raw = yaml.safe_load(raw_text) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise MatrixConfigError(f"cannot read authorization matrix {path}: {exc}") from exc

    return build_rule_matrix(raw, source=str(path))
