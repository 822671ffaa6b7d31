from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskauthz.db.session import get_db
from taskauthz.models.security import Department
from taskauthz.policy import NotFoundError, RequestContext
from taskauthz.routers._params import int_param
from taskauthz.schemas.security import DepartmentOut, DepartmentUpdate
from taskauthz.security.dependencies import authorize

router = APIRouter(prefix="/departments", tags=["departments"])


def load_department(ctx: RequestContext) -> dict[str, object]:
    department = ctx.extras["db"].get(Department, int_param(ctx, "department_id", what="Department"))
    if department is None:
        raise NotFoundError("Department not found")
    return department.to_target()


@router.get(
    "/{department_id}",
    response_model=DepartmentOut,
    dependencies=[Depends(authorize("Department", "read", get_target=load_department))],
)
def get_department(department_id: int, db: Session = Depends(get_db)) -> Department:
    return db.get(Department, department_id)


@router.put(
    "/{department_id}",
    response_model=DepartmentOut,
    dependencies=[Depends(authorize("Department", "update", get_target=load_department))],
)
def update_department(department_id: int, payload: DepartmentUpdate, db: Session = Depends(get_db)) -> Department:
    department = db.get(Department, department_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(department, field, value)
    db.commit()
    db.refresh(department)
    return department
