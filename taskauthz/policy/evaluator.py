"""
Policy evaluator: turns the matrix plus request inputs into a Decision.

Algorithm:
1. Look up rules for (resource, operation). None configured -> deny.
2. Eligibility filter over all rules: role membership, declared
   ``resourceType`` and ``requires`` flags. Survivors are the candidates.
3. Allow iff any candidate matches both its scope and its ownership keys.

Pure and synchronous: no I/O, no shared mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping

from .matrix import Rule, RuleMatrix
from .ownership import matches_ownership
from .principal import Principal
from .scope import matches_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of one authorization check, attached to the request for auditing."""

    allowed: bool
    resource: str
    operation: str
    resource_type: str | None
    rules_evaluated: int

    def to_dict(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "resource": self.resource,
            "operation": self.operation,
            "resourceType": self.resource_type,
            "rulesEvaluated": self.rules_evaluated,
        }


def satisfies_requires(rule: Rule, principal: Principal) -> bool:
    """Every plain flag must be set on the principal; ``!flag`` must be unset."""
    for requirement in rule.requires:
        if requirement.startswith("!"):
            if principal.flag(requirement[1:]):
                return False
        elif not principal.flag(requirement):
            return False
    return True


def is_eligible(rule: Rule, principal: Principal, resource_type: str | None) -> bool:
    if principal.role not in rule.roles:
        return False
    if rule.resource_type and rule.resource_type != resource_type:
        return False
    return satisfies_requires(rule, principal)


class PolicyEvaluator:
    """
    Evaluates requests against an injected, read-only RuleMatrix.

    Usage:
        matrix = load_rule_matrix(Path("config/authorization_matrix.yaml"))
        evaluator = PolicyEvaluator(matrix)
        decision = evaluator.evaluate("Task", "read", principal, task, "AssignedTask")
    """

    def __init__(self, matrix: RuleMatrix) -> None:
        self._matrix = matrix

    @property
    def matrix(self) -> RuleMatrix:
        return self._matrix

    def is_configured(self, resource: str, operation: str) -> bool:
        return bool(self._matrix.rules_for(resource, operation))

    def evaluate(
        self,
        resource: str,
        operation: str,
        principal: Principal,
        target: Any = None,
        resource_type: str | None = None,
        request_params: Mapping[str, Any] | None = None,
    ) -> Decision:
        rules = self._matrix.rules_for(resource, operation)
        if not rules:
            logger.debug("Authz: no rules configured resource=%s operation=%s", resource, operation)
            return Decision(False, resource, operation, resource_type, 0)

        candidates = [rule for rule in rules if is_eligible(rule, principal, resource_type)]

        allowed = any(
            matches_scope(rule, principal, target) and matches_ownership(rule, principal, target, request_params)
            for rule in candidates
        )

        logger.debug(
            "Authz: %s resource=%s operation=%s resource_type=%s role=%s candidates=%d",
            "allowed" if allowed else "denied",
            resource,
            operation,
            resource_type,
            principal.role,
            len(candidates),
        )
        return Decision(allowed, resource, operation, resource_type, len(candidates))


def evaluate(
    matrix: RuleMatrix,
    resource: str,
    operation: str,
    principal: Principal,
    target: Any = None,
    resource_type: str | None = None,
    request_params: Mapping[str, Any] | None = None,
) -> Decision:
    """Convenience: one-off evaluation without keeping an evaluator around."""
    return PolicyEvaluator(matrix).evaluate(resource, operation, principal, target, resource_type, request_params)
