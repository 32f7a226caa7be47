"""Repository helpers for the reporting engine and task mutations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.orm import Session

from app.models.entities import (
    TERMINAL_OUTCOMES,
    Resource,
    ResourceType,
    Task,
    TaskProgress,
    TaskResource,
    TaskResourceType,
    Team,
    TeamMember,
    User,
    UserRole,
    UserTask,
)


@dataclass(frozen=True, slots=True)
class ResourceMovement:
    """One resource assignment or return recorded against a task."""

    task_id: int
    resource_id: int
    resource_name: str
    resource_type: ResourceType
    direction: TaskResourceType
    quantity: Decimal
    occurred_at: datetime


def _window_conditions(column, from_at: datetime | None, to_at: datetime | None) -> list:
    conditions = []
    if from_at is not None:
        conditions.append(column >= from_at)
    if to_at is not None:
        conditions.append(column <= to_at)
    return conditions


def _contains_ci(expression, needle: str):
    return func.lower(expression).contains(needle.lower(), autoescape=True)


class FarmRepository:
    """Persistence operations used by report and task services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Users ----------
    def get_user(self, user_id: int) -> User | None:
        return self.db.scalar(select(User).where(User.id == user_id))

    def list_workers(self, name_filter: str | None = None) -> list[User]:
        """Return every WORKER, or every user whose name matches when a filter is given.

        A name match is not restricted by role.
        """

        if name_filter:
            condition = or_(
                _contains_ci(User.first_name, name_filter),
                _contains_ci(User.last_name, name_filter),
                _contains_ci(User.first_name + " " + User.last_name, name_filter),
            )
        else:
            condition = User.role == UserRole.WORKER
        return self.db.scalars(select(User).where(condition).order_by(User.id.asc())).all()

    def list_team_leaders(self, name_filter: str | None = None) -> list[User]:
        leader_ids = select(Team.leader_id).where(Team.leader_id.is_not(None)).distinct()
        conditions = [User.id.in_(leader_ids)]
        if name_filter:
            conditions.append(_contains_ci(User.first_name + " " + User.last_name, name_filter))
        return self.db.scalars(select(User).where(and_(*conditions)).order_by(User.id.asc())).all()

    def list_users_for_task(self, task_id: int) -> list[User]:
        return self.db.scalars(
            select(User)
            .join(UserTask, UserTask.user_id == User.id)
            .where(UserTask.task_id == task_id)
            .order_by(User.id.asc())
        ).all()

    # ---------- Teams ----------
    def list_teams(self, name_filter: str | None = None) -> list[Team]:
        statement = select(Team)
        if name_filter:
            statement = statement.where(_contains_ci(Team.name, name_filter))
        return self.db.scalars(statement.order_by(Team.id.asc())).all()

    def count_teams_for_member(self, user_id: int) -> int:
        return self.db.scalar(select(func.count(TeamMember.id)).where(TeamMember.user_id == user_id)) or 0

    def count_teams_for_leader(self, leader_id: int) -> int:
        return self.db.scalar(select(func.count(Team.id)).where(Team.leader_id == leader_id)) or 0

    def count_members_for_team(self, team_id: int) -> int:
        return self.db.scalar(select(func.count(TeamMember.id)).where(TeamMember.team_id == team_id)) or 0

    def count_distinct_members_for_leader(self, leader_id: int) -> int:
        return (
            self.db.scalar(
                select(func.count(func.distinct(TeamMember.user_id)))
                .join(Team, Team.id == TeamMember.team_id)
                .where(Team.leader_id == leader_id)
            )
            or 0
        )

    # ---------- Task outcomes ----------
    def _count_outcomes(self, statement, from_at: datetime | None, to_at: datetime | None) -> dict[TaskProgress, int]:
        conditions = [Task.task_progress.in_(TERMINAL_OUTCOMES)]
        conditions.extend(_window_conditions(Task.end_date, from_at, to_at))
        rows = self.db.execute(
            statement.where(and_(*conditions)).group_by(Task.task_progress)
        ).all()
        counts = {outcome: 0 for outcome in TERMINAL_OUTCOMES}
        for progress, count in rows:
            counts[progress] = count
        return counts

    def count_outcomes_for_user(
        self,
        user_id: int,
        *,
        from_at: datetime | None = None,
        to_at: datetime | None = None,
    ) -> dict[TaskProgress, int]:
        statement = (
            select(Task.task_progress, func.count(Task.id))
            .join(UserTask, UserTask.task_id == Task.id)
            .where(UserTask.user_id == user_id)
        )
        return self._count_outcomes(statement, from_at, to_at)

    def count_outcomes_for_team(
        self,
        team_id: int,
        *,
        from_at: datetime | None = None,
        to_at: datetime | None = None,
    ) -> dict[TaskProgress, int]:
        statement = select(Task.task_progress, func.count(Task.id)).where(Task.team_id == team_id)
        return self._count_outcomes(statement, from_at, to_at)

    def count_outcomes_for_leader(
        self,
        leader_id: int,
        *,
        from_at: datetime | None = None,
        to_at: datetime | None = None,
    ) -> dict[TaskProgress, int]:
        statement = (
            select(Task.task_progress, func.count(Task.id))
            .join(Team, Team.id == Task.team_id)
            .where(Team.leader_id == leader_id)
        )
        return self._count_outcomes(statement, from_at, to_at)

    # ---------- Resource movements ----------
    def list_resource_movements(
        self,
        *,
        from_at: datetime,
        to_at: datetime,
        task_progress: TaskProgress,
        resource_name: str | None = None,
    ) -> list[ResourceMovement]:
        conditions = [
            Task.task_progress == task_progress,
            TaskResource.created_at >= from_at,
            TaskResource.created_at <= to_at,
        ]
        if resource_name is not None:
            conditions.append(func.lower(Resource.name) == resource_name.lower())

        rows = self.db.execute(
            select(
                TaskResource.task_id,
                TaskResource.resource_id,
                Resource.name,
                Resource.resource_type,
                TaskResource.task_resource_type,
                TaskResource.quantity,
                TaskResource.created_at,
            )
            .join(Task, Task.id == TaskResource.task_id)
            .join(Resource, Resource.id == TaskResource.resource_id)
            .where(and_(*conditions))
            .order_by(TaskResource.created_at.asc(), TaskResource.id.asc())
        ).all()
        return [ResourceMovement(*row) for row in rows]

    # ---------- Tasks ----------
    def get_task(self, task_id: int) -> Task | None:
        return self.db.scalar(select(Task).where(Task.id == task_id))

    def delete_task(self, task: Task) -> None:
        self.db.execute(delete(UserTask).where(UserTask.task_id == task.id))
        self.db.execute(delete(TaskResource).where(TaskResource.task_id == task.id))
        self.db.delete(task)
        self.db.flush()
