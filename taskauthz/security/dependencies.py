from __future__ import annotations

import inspect
from typing import Any, Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from taskauthz.db.session import get_db
from taskauthz.policy import Decision, PolicyEvaluator, Principal, RequestContext, UnauthenticatedError, enforce
from taskauthz.security.auth import resolve_principal
from taskauthz.settings import get_settings

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def get_evaluator(request: Request) -> PolicyEvaluator:
    evaluator = getattr(request.app.state, "evaluator", None)
    if evaluator is None:
        raise RuntimeError("Authorization matrix not loaded. Did app startup run?")
    return evaluator


def get_principal(request: Request, db: Session = Depends(get_db)) -> Principal | None:
    """
    Resolve the bearer token into a principal (or None) and keep it on ``request.state``.

    Only guarded routes depend on this, so public routes such as ``/health``
    never parse a token or touch the user table. A missing token is not an
    error here; ``authorize`` rejects it.
    """

    principal = resolve_principal(request, db, get_settings())
    request.state.principal = principal
    return principal


def get_current_principal(principal: Principal | None = Depends(get_principal)) -> Principal:
    if principal is None:
        raise UnauthenticatedError()
    return principal


async def _json_body(request: Request) -> dict[str, Any] | None:
    if request.method.upper() not in _BODY_METHODS:
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _off_loop(fn: Callable | None) -> Callable | None:
    # Sync resolvers hit the database; keep them off the event loop.
    if fn is None or inspect.iscoroutinefunction(fn):
        return fn

    def call(*args: Any) -> Any:
        return run_in_threadpool(fn, *args)

    return call


def authorize(
    resource: str,
    operation: str,
    *,
    get_target: Callable | None = None,
    get_resource_type: Callable | None = None,
) -> Callable:
    """
    Build a route dependency enforcing (resource, operation).

    Usage:
        @router.get("/tasks/{task_id}")
        def get_task(task_id: int, _: Decision = Depends(authorize("Task", "read", get_target=load_task))):
            ...

    Resolvers receive the ``RequestContext``; the request's DB session is in
    ``ctx.extras["db"]``. The resulting Decision is stored on
    ``request.state.authorization``.
    """

    target_resolver = _off_loop(get_target)
    type_resolver = _off_loop(get_resource_type)

    async def dependency(
        request: Request,
        evaluator: PolicyEvaluator = Depends(get_evaluator),
        db: Session = Depends(get_db),
        principal: Principal | None = Depends(get_principal),
    ) -> Decision:
        ctx = RequestContext(
            principal=principal,
            params=dict(request.path_params),
            body=await _json_body(request),
            target=getattr(request.state, "authorization_target", None),
            extras={"db": db},
        )
        decision = await enforce(
            evaluator,
            resource,
            operation,
            ctx,
            get_target=target_resolver,
            get_resource_type=type_resolver,
        )
        request.state.authorization = decision
        return decision

    return dependency
