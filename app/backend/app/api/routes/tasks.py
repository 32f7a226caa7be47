"""Task mutation endpoints that refresh stored efficiency scores."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.db.dependencies import get_db_session, get_session_factory
from app.models.entities import TaskProgress
from app.services.efficiency_recalculation import dispatch_efficiency_recalculation
from app.services.task_service import TaskMutationResult, TaskService, TaskUpdateData

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    task_progress: TaskProgress | None = None
    description: str | None = Field(default=None, max_length=2000)
    note: str | None = Field(default=None, max_length=2000)
    priority: str | None = Field(default=None, max_length=32)
    start_date: datetime | None = None
    end_date: datetime | None = None


class TaskReviewPayload(BaseModel):
    task_progress: TaskProgress


def _recalculate(
    result: TaskMutationResult,
    *,
    db: Session,
    session_factory: sessionmaker[Session],
    background_tasks: BackgroundTasks,
) -> None:
    dispatch_efficiency_recalculation(
        user_ids=result.affected_user_ids,
        mode=get_settings().efficiency_recalculation_mode,
        db=db,
        session_factory=session_factory,
        background_tasks=background_tasks,
    )


@router.patch("/{task_id}")
def update_task(
    task_id: int,
    payload: TaskUpdatePayload,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db_session),
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> dict[str, object]:
    service = TaskService(db)
    result = service.partial_update_task(task_id, TaskUpdateData(**payload.model_dump()))
    _recalculate(result, db=db, session_factory=session_factory, background_tasks=background_tasks)
    return service.serialize_task(result.task)


@router.post("/{task_id}/review")
def review_task(
    task_id: int,
    payload: TaskReviewPayload,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db_session),
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> dict[str, object]:
    service = TaskService(db)
    result = service.review_task(task_id, payload.task_progress)
    _recalculate(result, db=db, session_factory=session_factory, background_tasks=background_tasks)
    return service.serialize_task(result.task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db_session),
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> Response:
    result = TaskService(db).delete_task(task_id)
    _recalculate(result, db=db, session_factory=session_factory, background_tasks=background_tasks)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
