from __future__ import annotations

from taskauthz.policy import NotFoundError, RequestContext


def int_param(ctx: RequestContext, name: str, *, what: str) -> int:
    """Path parameter as int; anything unparseable is reported as not found."""
    try:
        return int(ctx.params[name])
    except (KeyError, TypeError, ValueError):
        raise NotFoundError(f"{what} not found") from None
