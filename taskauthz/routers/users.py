from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskauthz.db.session import get_db
from taskauthz.models.security import User
from taskauthz.policy import NotFoundError, Principal, RequestContext
from taskauthz.routers._params import int_param
from taskauthz.schemas.security import PrincipalOut, UserOut, UserUpdate
from taskauthz.security.dependencies import authorize, get_current_principal

router = APIRouter(tags=["users"])


def load_user_target(ctx: RequestContext) -> dict[str, object]:
    user = ctx.extras["db"].get(User, int_param(ctx, "userId", what="User"))
    if user is None or user.is_deleted:
        raise NotFoundError("User not found")
    return user.to_target()


@router.get("/me", response_model=PrincipalOut)
def me(principal: Principal = Depends(get_current_principal)) -> PrincipalOut:
    return PrincipalOut(
        id=principal.id,
        role=principal.role,
        organization_id=principal.organization_id,
        department_id=principal.department_id,
        is_platform_org_user=principal.is_platform_org_user,
        is_hod=principal.is_hod,
    )


@router.get(
    "/users/{userId}",
    response_model=UserOut,
    dependencies=[Depends(authorize("User", "read", get_target=load_user_target))],
)
def get_user(userId: int, db: Session = Depends(get_db)) -> User:  # noqa: N803 (matches the ownership param name)
    return db.get(User, userId)


@router.put(
    "/users/{userId}",
    response_model=UserOut,
    dependencies=[Depends(authorize("User", "update", get_target=load_user_target))],
)
def update_user(userId: int, payload: UserUpdate, db: Session = Depends(get_db)) -> User:  # noqa: N803
    user = db.get(User, userId)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user
