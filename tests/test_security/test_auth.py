"""
Tests for principal resolution (token decoding + user loading).

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from unittest.mock import MagicMock

import jwt
import pytest
from fastapi import HTTPException

from taskauthz.models.security import Department, Organization, User
from taskauthz.policy import UnauthenticatedError, UnauthorizedError
from taskauthz.security.auth import (
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    load_user,
    principal_from_user,
    resolve_principal,
)
from taskauthz.settings import Settings

SETTINGS = Settings(jwt_secret="test-secret-test-secret-test-secret!")


def _request(headers: dict[str, str]) -> MagicMock:
    request = MagicMock()
    request.headers = headers
    request.url.path = "/tasks/1"
    request.method = "GET"
    return request


def _make_user(db_session, **overrides) -> User:
    org = Organization(name="Acme", is_platform=False)
    db_session.add(org)
    db_session.flush()
    dept = Department(name="IT", organization_id=org.id)
    db_session.add(dept)
    db_session.flush()

    fields = {
        "username": "testuser",
        "email": "test@example.com",
        "role": "Manager",
        "organization_id": org.id,
        "department_id": dept.id,
        "is_hod": True,
    }
    fields.update(overrides)
    user = User(**fields)
    db_session.add(user)
    db_session.commit()
    return user


def test_load_user_returns_user(db_session):
    user = _make_user(db_session)

    loaded = load_user(db_session, str(user.id))

    assert loaded is not None
    assert loaded.id == user.id
    assert loaded.username == "testuser"


def test_load_user_missing_or_deleted(db_session):
    assert load_user(db_session, "99999") is None
    assert load_user(db_session, "not-a-number") is None

    deleted = _make_user(db_session, is_deleted=True)
    assert load_user(db_session, str(deleted.id)) is None


def test_principal_from_user(db_session):
    user = _make_user(db_session)
    principal = principal_from_user(user)
    assert principal.id == str(user.id)
    assert principal.role == "Manager"
    assert principal.organization_id == str(user.organization_id)
    assert principal.department_id == str(user.department_id)
    assert principal.is_hod is True
    assert principal.is_platform_org_user is False


def test_extract_bearer_token():
    assert extract_bearer_token(_request({})) is None
    assert extract_bearer_token(_request({"Authorization": "Bearer abc"})) == "abc"

    with pytest.raises(HTTPException) as exc_info:
        extract_bearer_token(_request({"Authorization": "Token abc"}))
    assert exc_info.value.status_code == 400

    with pytest.raises(HTTPException):
        extract_bearer_token(_request({"Authorization": "Bearer    "}))


def test_token_roundtrip_and_rejections():
    token = create_access_token({"sub": "7", "role": "User"}, SETTINGS)
    claims = decode_access_token(token, SETTINGS)
    assert claims["sub"] == "7"

    expired = create_access_token({"sub": "7"}, SETTINGS, expires_in=-60)
    with pytest.raises(UnauthenticatedError):
        decode_access_token(expired, SETTINGS)

    forged = jwt.encode({"sub": "7"}, "another-secret-another-secret-1234", algorithm="HS256")
    with pytest.raises(UnauthenticatedError):
        decode_access_token(forged, SETTINGS)


def test_resolve_principal_prefers_stored_record(db_session):
    user = _make_user(db_session)
    # Token claims a stale role; the record wins.
    token = create_access_token({"sub": str(user.id), "role": "SuperAdmin"}, SETTINGS)

    principal = resolve_principal(_request({"Authorization": f"Bearer {token}"}), db_session, SETTINGS)

    assert principal is not None
    assert principal.role == "Manager"


def test_resolve_principal_without_header(db_session):
    assert resolve_principal(_request({}), db_session, SETTINGS) is None


def test_resolve_principal_unknown_user(db_session):
    token = create_access_token({"sub": "424242"}, SETTINGS)
    with pytest.raises(UnauthenticatedError):
        resolve_principal(_request({"Authorization": f"Bearer {token}"}), db_session, SETTINGS)


def test_resolve_principal_token_without_subject(db_session):
    token = create_access_token({"role": "User"}, SETTINGS)
    with pytest.raises(UnauthenticatedError):
        resolve_principal(_request({"Authorization": f"Bearer {token}"}), db_session, SETTINGS)


def test_resolve_principal_inactive_user(db_session):
    user = _make_user(db_session, is_active=False)
    token = create_access_token({"sub": str(user.id)}, SETTINGS)
    with pytest.raises(UnauthorizedError):
        resolve_principal(_request({"Authorization": f"Bearer {token}"}), db_session, SETTINGS)


def test_principal_from_user_keeps_capability_flags(db_session):
    user = _make_user(db_session)
    principal = principal_from_user(user, {"canApprove": True})
    assert principal.flag("canApprove") is True
    assert principal.flag("canExport") is False


def test_resolve_principal_carries_token_capabilities(db_session):
    user = _make_user(db_session)
    token = create_access_token({"sub": str(user.id), "canApprove": True, "isHod": False}, SETTINGS)

    principal = resolve_principal(_request({"Authorization": f"Bearer {token}"}), db_session, SETTINGS)

    assert principal is not None
    assert principal.flag("canApprove") is True
    # Built-in flags still come from the stored record.
    assert principal.is_hod is True
