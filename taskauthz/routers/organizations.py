from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskauthz.db.session import get_db
from taskauthz.models.security import Organization
from taskauthz.policy import NotFoundError, RequestContext
from taskauthz.routers._params import int_param
from taskauthz.schemas.security import OrganizationOut
from taskauthz.security.dependencies import authorize

router = APIRouter(prefix="/organizations", tags=["organizations"])


def load_organization(ctx: RequestContext) -> dict[str, object]:
    org = ctx.extras["db"].get(Organization, int_param(ctx, "organization_id", what="Organization"))
    if org is None:
        raise NotFoundError("Organization not found")
    return org.to_target()


@router.get(
    "/{organization_id}",
    response_model=OrganizationOut,
    dependencies=[Depends(authorize("Organization", "read", get_target=load_organization))],
)
def get_organization(organization_id: int, db: Session = Depends(get_db)) -> Organization:
    return db.get(Organization, organization_id)
