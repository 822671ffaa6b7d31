from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete
from sqlalchemy.orm import Session

from taskauthz.db.session import get_db
from taskauthz.models.tasks import Attachment, Task
from taskauthz.policy import NotFoundError, RequestContext
from taskauthz.routers._params import int_param
from taskauthz.schemas.tasks import TaskOut
from taskauthz.security.dependencies import authorize

router = APIRouter(prefix="/tasks", tags=["tasks"])


def load_task(ctx: RequestContext) -> dict[str, object]:
    task = ctx.extras["db"].get(Task, int_param(ctx, "task_id", what="Task"))
    if task is None:
        raise NotFoundError("Task not found")
    return task.to_target()


def task_type(_ctx: RequestContext, target: dict[str, object] | None) -> str | None:
    # Subtype comes from the stored record, never from the request body.
    return str(target["type"]) if target else None


@router.get(
    "/{task_id}",
    response_model=TaskOut,
    dependencies=[Depends(authorize("Task", "read", get_target=load_task, get_resource_type=task_type))],
)
def get_task(task_id: int, db: Session = Depends(get_db)) -> Task:
    return db.get(Task, task_id)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(authorize("Task", "delete", get_target=load_task, get_resource_type=task_type))],
)
def delete_task(task_id: int, db: Session = Depends(get_db)) -> Response:
    db.execute(delete(Attachment).where(Attachment.parent_model == "Task", Attachment.parent_id == task_id))
    db.delete(db.get(Task, task_id))
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
