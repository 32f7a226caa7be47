"""Task mutations that affect efficiency scores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.entities import TERMINAL_OUTCOMES, Task, TaskProgress
from app.repositories.farm_repository import FarmRepository


@dataclass(slots=True)
class TaskUpdateData:
    name: str | None = None
    task_progress: TaskProgress | None = None
    description: str | None = None
    note: str | None = None
    priority: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(slots=True)
class TaskMutationResult:
    task: Task | None
    affected_user_ids: list[int]


class TaskService:
    """Applies task updates, deletes and reviews.

    Each operation commits before returning and reports the assignees whose
    stored efficiency must be refreshed; refreshing them is left to the caller.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = FarmRepository(db)

    @staticmethod
    def serialize_task(task: Task) -> dict[str, object]:
        return {
            "id": task.id,
            "name": task.name,
            "description": task.description,
            "note": task.note,
            "priority": task.priority,
            "task_progress": task.task_progress.value,
            "start_date": task.start_date.isoformat() if task.start_date else None,
            "end_date": task.end_date.isoformat() if task.end_date else None,
            "is_archived": task.is_archived,
            "team_id": task.team_id,
        }

    def _get_task_or_404(self, task_id: int) -> Task:
        task = self.repo.get_task(task_id)
        if task is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found.")
        return task

    def _assignee_ids(self, task_id: int) -> list[int]:
        return [user.id for user in self.repo.list_users_for_task(task_id)]

    def partial_update_task(self, task_id: int, data: TaskUpdateData) -> TaskMutationResult:
        task = self._get_task_or_404(task_id)

        if data.name is not None:
            task.name = data.name
        if data.task_progress is not None:
            task.task_progress = data.task_progress
        if data.description is not None:
            task.description = data.description
        if data.note is not None:
            task.note = data.note
        if data.priority is not None:
            task.priority = data.priority
        if data.start_date is not None:
            task.start_date = data.start_date
        if data.end_date is not None:
            task.end_date = data.end_date
        now = datetime.utcnow()
        # A task moved into a final outcome needs an end date to show up in windowed reports.
        if task.task_progress in TERMINAL_OUTCOMES and task.end_date is None:
            task.end_date = now
        task.updated_at = now

        self.db.commit()
        self.db.refresh(task)
        return TaskMutationResult(task=task, affected_user_ids=self._assignee_ids(task.id))

    def delete_task(self, task_id: int) -> TaskMutationResult:
        task = self._get_task_or_404(task_id)
        # Assignments go away with the task, so collect them first.
        affected = self._assignee_ids(task.id)
        self.repo.delete_task(task)
        self.db.commit()
        return TaskMutationResult(task=None, affected_user_ids=affected)

    def review_task(self, task_id: int, task_progress: TaskProgress) -> TaskMutationResult:
        task = self._get_task_or_404(task_id)
        if task_progress not in TERMINAL_OUTCOMES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Task cannot be reviewed as {task_progress.value}.",
            )

        now = datetime.utcnow()
        task.task_progress = task_progress
        if task.end_date is None:
            task.end_date = now
        task.updated_at = now

        self.db.commit()
        self.db.refresh(task)
        return TaskMutationResult(task=task, affected_user_ids=self._assignee_ids(task.id))
