from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OrganizationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_platform: bool


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    organization_id: int
    manager_id: int | None


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    organization_id: int
    department_id: int
    is_hod: bool
    is_active: bool


class UserUpdate(BaseModel):
    email: str | None = Field(default=None, max_length=100)


class PrincipalOut(BaseModel):
    id: str
    role: str | None
    organization_id: str | None
    department_id: str | None
    is_platform_org_user: bool
    is_hod: bool
