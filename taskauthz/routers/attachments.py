from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskauthz.db.session import get_db
from taskauthz.models.tasks import Attachment, Task
from taskauthz.policy import NotFoundError, Principal, RequestContext
from taskauthz.routers._params import int_param
from taskauthz.schemas.tasks import AttachmentCreate, AttachmentOut
from taskauthz.security.dependencies import authorize, get_current_principal

router = APIRouter(prefix="/attachments", tags=["attachments"])

_PARENT_MODELS = {"Task": Task}


def load_parent(ctx: RequestContext) -> dict[str, object]:
    """An attachment is authorized against the record it will hang off."""
    body = ctx.body or {}
    model = _PARENT_MODELS.get(str(body.get("parentModel")))
    parent_id = body.get("parent")
    if model is None or not isinstance(parent_id, int):
        raise NotFoundError("Attachment parent not found")
    parent = ctx.extras["db"].get(model, parent_id)
    if parent is None:
        raise NotFoundError("Attachment parent not found")
    return parent.to_target()


def parent_model(ctx: RequestContext, _target: object) -> str | None:
    return (ctx.body or {}).get("parentModel")


def load_attachment(ctx: RequestContext) -> dict[str, object]:
    attachment = ctx.extras["db"].get(Attachment, int_param(ctx, "attachment_id", what="Attachment"))
    if attachment is None:
        raise NotFoundError("Attachment not found")
    return attachment.to_target()


@router.post(
    "",
    response_model=AttachmentOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(authorize("Attachment", "create", get_target=load_parent, get_resource_type=parent_model))
    ],
)
def create_attachment(
    payload: AttachmentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Attachment:
    parent = db.get(_PARENT_MODELS[payload.parent_model], payload.parent)
    attachment = Attachment(
        file_name=payload.file_name,
        file_url=payload.file_url,
        parent_model=payload.parent_model,
        parent_id=parent.id,
        organization_id=parent.organization_id,
        department_id=parent.department_id,
        uploaded_by=int(principal.id),
    )
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    return attachment


@router.delete(
    "/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(authorize("Attachment", "delete", get_target=load_attachment))],
)
def delete_attachment(attachment_id: int, db: Session = Depends(get_db)) -> Response:
    db.delete(db.get(Attachment, attachment_id))
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
