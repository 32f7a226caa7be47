"""Resource usage report with previous-period comparison."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models.entities import ResourceType, TaskProgress, TaskResourceType
from app.repositories.farm_repository import FarmRepository, ResourceMovement
from app.services.efficiency_report_service import normalize_filter
from app.services.pagination import Page, paginate
from app.services.report_windows import previous_window

ZERO = Decimal("0.00")

# Movements of terminated tasks are left out of resource accounting even
# though terminated tasks count as done in efficiency reports.
USAGE_TASK_PROGRESS = TaskProgress.COMPLETED_ACCEPTED


def _safe_div(numerator: Decimal, denominator: int) -> Decimal:
    if denominator == 0:
        return ZERO
    # Unrounded; exact quotients keep the scale of the summed quantities.
    return numerator / Decimal(denominator)


@dataclass(frozen=True, slots=True)
class UsageTotals:
    gained: Decimal
    consumed: Decimal
    tasks_count: int

    @property
    def net(self) -> Decimal:
        return self.gained - self.consumed

    @property
    def average_usage(self) -> Decimal:
        return _safe_div(self.net, self.tasks_count)


EMPTY_TOTALS = UsageTotals(gained=ZERO, consumed=ZERO, tasks_count=0)


def usage_totals(movements: Sequence[ResourceMovement]) -> UsageTotals:
    gained = ZERO
    consumed = ZERO
    for movement in movements:
        if movement.direction is TaskResourceType.RETURNED:
            gained += movement.quantity
        elif movement.direction is TaskResourceType.ASSIGNED:
            consumed += movement.quantity
    return UsageTotals(
        gained=gained,
        consumed=consumed,
        tasks_count=len({movement.task_id for movement in movements}),
    )


def group_by_resource(movements: Sequence[ResourceMovement]) -> dict[int, list[ResourceMovement]]:
    grouped: dict[int, list[ResourceMovement]] = {}
    for movement in movements:
        grouped.setdefault(movement.resource_id, []).append(movement)
    return grouped


@dataclass(frozen=True, slots=True)
class ResourceUsageSummary:
    resource_id: int
    resource_name: str
    resource_type: ResourceType
    current: UsageTotals
    previous: UsageTotals
    last_used_at: datetime

    @property
    def gained(self) -> Decimal:
        return self.current.gained

    @property
    def consumed(self) -> Decimal:
        return self.current.consumed

    @property
    def net(self) -> Decimal:
        return self.current.net

    @property
    def tasks_count(self) -> int:
        return self.current.tasks_count

    @property
    def average_usage(self) -> Decimal:
        return self.current.average_usage

    @property
    def previous_net(self) -> Decimal:
        return self.previous.net

    @property
    def previous_average_usage(self) -> Decimal:
        return self.previous.average_usage


class ResourceUsageReportService:
    """Aggregates accepted-task resource movements per resource."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = FarmRepository(db)

    @staticmethod
    def serialize_summary(row: ResourceUsageSummary) -> dict[str, object]:
        return {
            "resource_id": row.resource_id,
            "resource_name": row.resource_name,
            "resource_type": row.resource_type.value,
            "gained": str(row.gained),
            "consumed": str(row.consumed),
            "net": str(row.net),
            "tasks_count": row.tasks_count,
            "average_usage": str(row.average_usage),
            "last_used_at": row.last_used_at.isoformat(),
            "previous_net": str(row.previous_net),
            "previous_average_usage": str(row.previous_average_usage),
        }

    def _movements(self, from_at: datetime, to_at: datetime, resource_name: str | None) -> list[ResourceMovement]:
        return self.repo.list_resource_movements(
            from_at=from_at,
            to_at=to_at,
            task_progress=USAGE_TASK_PROGRESS,
            resource_name=resource_name,
        )

    def report_resource_usage(
        self,
        *,
        from_at: datetime,
        to_at: datetime,
        resource_filter: str | None,
        page: int,
        size: int,
    ) -> Page[ResourceUsageSummary]:
        resource_name = normalize_filter(resource_filter)
        prev_from, prev_to = previous_window(from_at, to_at)

        current_by_resource = group_by_resource(self._movements(from_at, to_at, resource_name))
        previous_by_resource = group_by_resource(self._movements(prev_from, prev_to, resource_name))

        rows: list[ResourceUsageSummary] = []
        for resource_id, movements in current_by_resource.items():
            first = movements[0]
            previous = previous_by_resource.get(resource_id)
            rows.append(
                ResourceUsageSummary(
                    resource_id=resource_id,
                    resource_name=first.resource_name,
                    resource_type=first.resource_type,
                    current=usage_totals(movements),
                    previous=usage_totals(previous) if previous else EMPTY_TOTALS,
                    last_used_at=max(movement.occurred_at for movement in movements),
                )
            )

        rows.sort(key=lambda row: (row.resource_name, row.resource_id))
        return paginate(rows, page, size)
