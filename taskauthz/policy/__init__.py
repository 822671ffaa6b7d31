"""
Authorization policy engine.

This package has no dependency on other taskauthz packages (db, security,
routers). Load a matrix with load_rule_matrix(), wrap it in a
PolicyEvaluator, and call enforce() with a RequestContext.
"""

from .constants import ResourceType, Role, Scope
from .enforcement import RequestContext, enforce
from .errors import AppError, MatrixConfigError, NotFoundError, UnauthenticatedError, UnauthorizedError
from .evaluator import Decision, PolicyEvaluator, evaluate
from .matrix import Rule, RuleMatrix, build_rule_matrix, load_rule_matrix
from .ownership import matches_ownership
from .principal import Principal
from .scope import matches_scope

__all__ = [
    "AppError",
    "Decision",
    "MatrixConfigError",
    "NotFoundError",
    "PolicyEvaluator",
    "Principal",
    "RequestContext",
    "ResourceType",
    "Role",
    "Rule",
    "RuleMatrix",
    "Scope",
    "UnauthenticatedError",
    "UnauthorizedError",
    "build_rule_matrix",
    "enforce",
    "evaluate",
    "load_rule_matrix",
    "matches_ownership",
    "matches_scope",
]
