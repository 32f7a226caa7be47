"""Worker, leader and team efficiency reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.entities import TaskProgress, Team, User
from app.repositories.farm_repository import FarmRepository
from app.services.pagination import Page, paginate

ALL_FILTER = "all"


def normalize_filter(value: str | None) -> str | None:
    """Map ``None``, blank and ``"all"`` (any case) to no filtering."""

    if value is None:
        return None
    stripped = value.strip()
    if not stripped or stripped.lower() == ALL_FILTER:
        return None
    return stripped


def efficiency_rate(tasks_count: int, failed_count: int) -> float:
    denominator = tasks_count + failed_count
    if denominator <= 0:
        return 0.0
    return tasks_count / denominator


@dataclass(frozen=True, slots=True)
class OutcomeCounts:
    accepted: int
    terminated: int
    failed: int

    @classmethod
    def from_counts(cls, counts: dict[TaskProgress, int]) -> OutcomeCounts:
        return cls(
            accepted=counts.get(TaskProgress.COMPLETED_ACCEPTED, 0),
            terminated=counts.get(TaskProgress.COMPLETED_TERMINATED, 0),
            failed=counts.get(TaskProgress.FAILED, 0),
        )

    @property
    def tasks_count(self) -> int:
        return self.accepted + self.terminated

    @property
    def efficiency_rate(self) -> float:
        return efficiency_rate(self.tasks_count, self.failed)

    def serialize(self) -> dict[str, object]:
        return {
            "accepted_count": self.accepted,
            "terminated_count": self.terminated,
            "failed_count": self.failed,
            "tasks_count": self.tasks_count,
            "efficiency_rate": self.efficiency_rate,
        }


@dataclass(frozen=True, slots=True)
class WorkerEfficiencySummary:
    user_id: int
    full_name: str
    status: str
    hired_at: datetime | None
    team_count: int
    outcomes: OutcomeCounts


@dataclass(frozen=True, slots=True)
class LeaderEfficiencySummary:
    leader_id: int
    full_name: str
    status: str
    hired_at: datetime | None
    teams_count: int
    employees_count: int
    outcomes: OutcomeCounts


@dataclass(frozen=True, slots=True)
class TeamEfficiencySummary:
    team_id: int
    team_name: str
    leader_name: str
    members_count: int
    outcomes: OutcomeCounts


def _iso_date(value: datetime | None) -> str | None:
    return value.date().isoformat() if value is not None else None


class EfficiencyReportService:
    """Counts task outcomes per subject over a window and pages the result.

    Each summary is built from several independent count queries, so counts
    taken while tasks are being reviewed may be slightly out of step with
    each other. Subjects are always ordered by id before paging.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = FarmRepository(db)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_worker(row: WorkerEfficiencySummary) -> dict[str, object]:
        return {
            "user_id": row.user_id,
            "full_name": row.full_name,
            "status": row.status,
            "hired_at": _iso_date(row.hired_at),
            "team_count": row.team_count,
            **row.outcomes.serialize(),
        }

    @staticmethod
    def serialize_leader(row: LeaderEfficiencySummary) -> dict[str, object]:
        return {
            "leader_id": row.leader_id,
            "full_name": row.full_name,
            "status": row.status,
            "hired_at": _iso_date(row.hired_at),
            "teams_count": row.teams_count,
            "employees_count": row.employees_count,
            **row.outcomes.serialize(),
        }

    @staticmethod
    def serialize_team(row: TeamEfficiencySummary) -> dict[str, object]:
        return {
            "team_id": row.team_id,
            "team_name": row.team_name,
            "leader_name": row.leader_name,
            "members_count": row.members_count,
            **row.outcomes.serialize(),
        }

    # ---------- Stored score ----------
    def user_efficiency(self, user_id: int) -> dict[str, object]:
        """Return the all-time score persisted on the user by the recalculation trigger."""

        user = self.repo.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        return {
            "user_id": user.id,
            "full_name": user.full_name,
            "role": user.role.value,
            "efficiency": user.efficiency,
        }

    # ---------- Reports ----------
    def report_workers(
        self,
        *,
        from_at: datetime,
        to_at: datetime,
        name_filter: str | None,
        page: int,
        size: int,
    ) -> Page[WorkerEfficiencySummary]:
        workers = self.repo.list_workers(normalize_filter(name_filter))
        rows = [
            WorkerEfficiencySummary(
                user_id=user.id,
                full_name=user.full_name,
                status=user.status.value,
                hired_at=user.hired_at,
                team_count=self.repo.count_teams_for_member(user.id),
                outcomes=OutcomeCounts.from_counts(
                    self.repo.count_outcomes_for_user(user.id, from_at=from_at, to_at=to_at)
                ),
            )
            for user in workers
        ]
        rows.sort(key=lambda row: row.user_id)
        return paginate(rows, page, size)

    def report_leaders(
        self,
        *,
        from_at: datetime,
        to_at: datetime,
        name_filter: str | None,
        page: int,
        size: int,
    ) -> Page[LeaderEfficiencySummary]:
        leaders = self.repo.list_team_leaders(normalize_filter(name_filter))
        rows = [
            LeaderEfficiencySummary(
                leader_id=leader.id,
                full_name=leader.full_name,
                status=leader.status.value,
                hired_at=leader.hired_at,
                teams_count=self.repo.count_teams_for_leader(leader.id),
                employees_count=self.repo.count_distinct_members_for_leader(leader.id),
                outcomes=OutcomeCounts.from_counts(
                    self.repo.count_outcomes_for_leader(leader.id, from_at=from_at, to_at=to_at)
                ),
            )
            for leader in leaders
        ]
        rows.sort(key=lambda row: row.leader_id)
        return paginate(rows, page, size)

    def report_teams(
        self,
        *,
        from_at: datetime,
        to_at: datetime,
        name_filter: str | None,
        page: int,
        size: int,
    ) -> Page[TeamEfficiencySummary]:
        teams = self.repo.list_teams(normalize_filter(name_filter))
        leader_names = self._leader_names(teams)
        rows = [
            TeamEfficiencySummary(
                team_id=team.id,
                team_name=team.name,
                leader_name=leader_names.get(team.leader_id, "") if team.leader_id is not None else "",
                members_count=self.repo.count_members_for_team(team.id),
                outcomes=OutcomeCounts.from_counts(
                    self.repo.count_outcomes_for_team(team.id, from_at=from_at, to_at=to_at)
                ),
            )
            for team in teams
        ]
        rows.sort(key=lambda row: row.team_id)
        return paginate(rows, page, size)

    def _leader_names(self, teams: list[Team]) -> dict[int, str]:
        names: dict[int, str] = {}
        for team in teams:
            if team.leader_id is None or team.leader_id in names:
                continue
            leader: User | None = self.repo.get_user(team.leader_id)
            names[team.leader_id] = leader.full_name if leader is not None else ""
        return names
