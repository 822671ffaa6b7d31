"""
Framework-agnostic enforcement adapter.

Takes a request-like context, resolves the target and its subtype through
optional collaborator functions, runs the evaluator and either returns the
Decision (also attached to the context) or raises an access error.

Resolver failures (e.g. "not found") propagate unchanged: they belong to the
resource's own domain, not to authorization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Union

from .errors import UnauthenticatedError, UnauthorizedError
from .evaluator import Decision, PolicyEvaluator
from .principal import Principal
from .target import get_field

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """
    What the adapter needs from one inbound request.

    ``target`` holds a value pre-attached by an upstream collaborator (for
    example a validator that already fetched the record). ``extras`` carries
    anything resolvers need, such as a database session.
    """

    principal: Principal | None
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None
    target: Any = None
    extras: dict[str, Any] = field(default_factory=dict)
    decision: Decision | None = None


TargetResolver = Callable[[RequestContext], Union[Any, Awaitable[Any]]]
ResourceTypeResolver = Callable[[RequestContext, Any], Union[str, None, Awaitable[str | None]]]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def resource_type_from_request(ctx: RequestContext, target: Any) -> str | None:
    """Default subtype lookup: submitted ``type``/``resourceType``, then ``target.type``."""
    body = ctx.body or {}
    for key in ("type", "resourceType"):
        value = body.get(key)
        if value:
            return str(value)
    value = get_field(target, "type")
    return str(value) if value else None


async def enforce(
    evaluator: PolicyEvaluator,
    resource: str,
    operation: str,
    ctx: RequestContext,
    *,
    get_target: TargetResolver | None = None,
    get_resource_type: ResourceTypeResolver | None = None,
) -> Decision:
    """Authorize ``ctx`` for (resource, operation) or raise."""

    principal = ctx.principal
    if principal is None:
        raise UnauthenticatedError()

    if not evaluator.is_configured(resource, operation):
        logger.warning("Authz: no rules configured resource=%s operation=%s", resource, operation)
        raise UnauthorizedError(f"No authorization rules found for {resource}.{operation}")

    if get_target is not None:
        target = await _maybe_await(get_target(ctx))
    else:
        target = ctx.target

    if get_resource_type is not None:
        resource_type = await _maybe_await(get_resource_type(ctx, target))
    else:
        resource_type = resource_type_from_request(ctx, target)

    decision = evaluator.evaluate(resource, operation, principal, target, resource_type, ctx.params)
    if not decision.allowed:
        logger.info(
            "Authz denied principal=%s role=%s resource=%s operation=%s",
            principal.id,
            principal.role,
            resource,
            operation,
        )
        raise UnauthorizedError()

    ctx.decision = decision
    return decision
