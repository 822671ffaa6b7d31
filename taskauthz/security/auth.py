from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any, Mapping

from fastapi import HTTPException, Request, status
import jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskauthz.models.security import User
from taskauthz.policy import Principal, UnauthenticatedError, UnauthorizedError
from taskauthz.policy.ids import normalize_id
from taskauthz.settings import Settings

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request) -> str | None:
    """
    Read the access token from ``Authorization: Bearer <jwt>``.

    Returns None when the header is absent; routes then see no principal and the
    authorization dependency answers 401.
    """

    raw = request.headers.get(AUTHORIZATION_HEADER)
    if not raw:
        return None

    prefix = f"{BEARER_PREFIX} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Expected '{BEARER_PREFIX} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Missing token after '{BEARER_PREFIX}'.",
        )
    return token


def create_access_token(claims: dict[str, Any], settings: Settings, *, expires_in: int = 900) -> str:
    """Issue a signed access token (used by tests and local tooling)."""
    now = int(time.time())
    payload = {"iat": now, "exp": now + expires_in, **claims}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        # Do not log the token.
        logger.info("Access token rejected: %s", type(exc).__name__)
        raise UnauthenticatedError("Invalid or expired authentication token") from exc


def load_user(db: Session, user_id: str) -> User | None:
    try:
        pk = int(user_id)
    except ValueError:
        return None
    user = db.execute(select(User).where(User.id == pk)).scalar_one_or_none()
    if user is None or user.is_deleted:
        return None
    return user


def principal_from_user(user: User, capabilities: Mapping[str, bool] | None = None) -> Principal:
    """Principal for a stored user; extra capability flags come from the token claims."""
    return Principal(
        id=normalize_id(user.id) or "",
        role=user.role,
        organization_id=normalize_id(user.organization_id),
        department_id=normalize_id(user.department_id),
        is_platform_org_user=user.is_platform_org_user,
        is_hod=user.is_hod,
        capabilities=MappingProxyType(dict(capabilities or {})),
    )


def resolve_principal(request: Request, db: Session, settings: Settings) -> Principal | None:
    """
    Turn the request's bearer token into a Principal.

    The stored user record wins over token claims, so role or department changes
    apply immediately instead of at token expiry.
    """

    token = extract_bearer_token(request)
    if token is None:
        return None

    claims = Principal.from_mapping(decode_access_token(token, settings))
    if not claims.id:
        raise UnauthenticatedError("Invalid or expired authentication token")

    user = load_user(db, claims.id)
    if user is None:
        raise UnauthenticatedError("Authenticated user was not found")
    if not user.is_active:
        raise UnauthorizedError("Account is inactive")

    return principal_from_user(user, claims.capabilities)
