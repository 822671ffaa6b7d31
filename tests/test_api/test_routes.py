"""
End-to-end authorization through the FastAPI routes.

Runs against the seeded demo data: a platform org (root_super), tenant Acme with
Engineering (ada_admin as HOD/manager, mike_mgr, uma_user) and Finance
(fred_fin), and tenant Globex (gina_globex, a non-platform SuperAdmin).
"""
from __future__ import annotations

import pytest
from sqlalchemy import select

from taskauthz.models.security import Department, Organization
from taskauthz.models.tasks import Attachment, Task


@pytest.fixture
def ids(seeded_db, user_by_name):
    def task(title: str) -> int:
        return seeded_db.execute(select(Task.id).where(Task.title == title)).scalar_one()

    def org(name: str) -> int:
        return seeded_db.execute(select(Organization.id).where(Organization.name == name)).scalar_one()

    def dept(name: str) -> int:
        return seeded_db.execute(select(Department.id).where(Department.name == name)).scalar_one()

    return {
        "assigned_task": task("Ship login page"),
        "routine_task": task("Daily standup notes"),
        "finance_task": task("Quarterly budget"),
        "acme": org("Acme Corp"),
        "globex": org("Globex"),
        "engineering": dept("Engineering"),
        "finance": dept("Finance"),
        "uma": user_by_name("uma_user").id,
        "fred": user_by_name("fred_fin").id,
        "attachment": seeded_db.execute(select(Attachment.id)).scalars().first(),
    }


def test_health_is_public(client):
    assert client.get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize("header", ["Bearer not-a-jwt", "Token abc"])
def test_health_ignores_authorization_header(client, header):
    resp = client.get("/health", headers={"Authorization": header})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_missing_token_is_401(client, ids):
    resp = client.get(f"/tasks/{ids['assigned_task']}")
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "UNAUTHENTICATED_ERROR"


def test_malformed_authorization_header_is_400(client, ids):
    resp = client.get(f"/tasks/{ids['assigned_task']}", headers={"Authorization": "Token abc"})
    assert resp.status_code == 400


def test_invalid_token_is_401(client, ids):
    resp = client.get(f"/tasks/{ids['assigned_task']}", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_inactive_user_is_403(client, auth_header, ids):
    resp = client.get(f"/tasks/{ids['assigned_task']}", headers=auth_header("ivan_inactive"))
    assert resp.status_code == 403


def test_me(client, auth_header, ids):
    resp = client.get("/me", headers=auth_header("uma_user"))
    assert resp.status_code == 200
    assert resp.json()["id"] == str(ids["uma"])
    assert client.get("/me").status_code == 401


@pytest.mark.parametrize(
    ("username", "task", "status"),
    [
        ("uma_user", "assigned_task", 200),  # same department
        ("fred_fin", "assigned_task", 403),  # other department
        ("ada_admin", "finance_task", 200),  # admin, own organization
        ("root_super", "assigned_task", 200),  # platform user acting cross-org
        ("gina_globex", "assigned_task", 403),  # tenant SuperAdmin, other tenant
    ],
)
def test_read_task(client, auth_header, ids, username, task, status):
    resp = client.get(f"/tasks/{ids[task]}", headers=auth_header(username))
    assert resp.status_code == status
    if status == 403:
        assert resp.json()["error_code"] == "UNAUTHORIZED_ERROR"


def test_read_missing_task_is_404(client, auth_header):
    resp = client.get("/tasks/99999", headers=auth_header("uma_user"))
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NOT_FOUND_ERROR"


def test_delete_task_requires_creator(client, auth_header, ids):
    assert client.delete(f"/tasks/{ids['assigned_task']}", headers=auth_header("uma_user")).status_code == 403
    assert client.delete(f"/tasks/{ids['routine_task']}", headers=auth_header("uma_user")).status_code == 204
    assert client.delete(f"/tasks/{ids['assigned_task']}", headers=auth_header("mike_mgr")).status_code == 204


def test_update_own_user_via_path_param(client, auth_header, ids):
    resp = client.put(f"/users/{ids['uma']}", json={"email": "uma@new.example.com"}, headers=auth_header("uma_user"))
    assert resp.status_code == 200
    assert resp.json()["email"] == "uma@new.example.com"

    resp = client.put(f"/users/{ids['fred']}", json={"email": "x@example.com"}, headers=auth_header("uma_user"))
    assert resp.status_code == 403


def test_department_update_by_manager_only(client, auth_header, ids):
    ok = client.put(f"/departments/{ids['engineering']}", json={"name": "Platform Eng"}, headers=auth_header("ada_admin"))
    assert ok.status_code == 200
    assert ok.json()["name"] == "Platform Eng"

    denied = client.put(f"/departments/{ids['finance']}", json={"name": "Money"}, headers=auth_header("ada_admin"))
    assert denied.status_code == 403


def test_department_read_scopes(client, auth_header, ids):
    assert client.get(f"/departments/{ids['finance']}", headers=auth_header("ada_admin")).status_code == 200
    assert client.get(f"/departments/{ids['finance']}", headers=auth_header("uma_user")).status_code == 403


def test_organization_read(client, auth_header, ids):
    assert client.get(f"/organizations/{ids['globex']}", headers=auth_header("root_super")).status_code == 200
    assert client.get(f"/organizations/{ids['acme']}", headers=auth_header("uma_user")).status_code == 200
    assert client.get(f"/organizations/{ids['acme']}", headers=auth_header("gina_globex")).status_code == 403


def test_create_attachment_on_parent_task(client, auth_header, ids):
    body = {
        "fileName": "notes.txt",
        "fileUrl": "https://files.example.com/notes.txt",
        "parentModel": "Task",
        "parent": ids["assigned_task"],
    }
    created = client.post("/attachments", json=body, headers=auth_header("uma_user"))
    assert created.status_code == 201
    assert created.json()["uploaded_by"] == ids["uma"]

    assert client.post("/attachments", json=body, headers=auth_header("fred_fin")).status_code == 403

    missing = client.post("/attachments", json={**body, "parent": 99999}, headers=auth_header("uma_user"))
    assert missing.status_code == 404


def test_delete_attachment_requires_uploader(client, auth_header, ids):
    url = f"/attachments/{ids['attachment']}"
    assert client.delete(url, headers=auth_header("fred_fin")).status_code == 403
    assert client.delete(url, headers=auth_header("uma_user")).status_code == 204
