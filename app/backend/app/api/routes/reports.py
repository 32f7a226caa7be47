"""Reporting endpoints for efficiency and resource usage analytics."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.dependencies import get_db_session
from app.services.efficiency_report_service import EfficiencyReportService
from app.services.report_windows import day_window
from app.services.resource_usage_service import ResourceUsageReportService

router = APIRouter(prefix="/reports", tags=["reports"])


def _window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_date must be greater than or equal to start_date.",
        )
    return day_window(start_date, end_date)


def _page_size(size: int | None) -> int:
    settings = get_settings()
    if size is None:
        return settings.report_default_page_size
    return min(size, settings.report_max_page_size)


@router.get("/efficiency/workers")
def report_workers(
    start_date: date,
    end_date: date,
    filter: str = "all",
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    from_at, to_at = _window(start_date, end_date)
    service = EfficiencyReportService(db)
    result = service.report_workers(
        from_at=from_at,
        to_at=to_at,
        name_filter=filter,
        page=page,
        size=_page_size(size),
    )
    return result.serialize(service.serialize_worker)


@router.get("/efficiency/leaders")
def report_leaders(
    start_date: date,
    end_date: date,
    filter: str = "all",
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    from_at, to_at = _window(start_date, end_date)
    service = EfficiencyReportService(db)
    result = service.report_leaders(
        from_at=from_at,
        to_at=to_at,
        name_filter=filter,
        page=page,
        size=_page_size(size),
    )
    return result.serialize(service.serialize_leader)


@router.get("/efficiency/teams")
def report_teams(
    start_date: date,
    end_date: date,
    filter: str = "all",
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    from_at, to_at = _window(start_date, end_date)
    service = EfficiencyReportService(db)
    result = service.report_teams(
        from_at=from_at,
        to_at=to_at,
        name_filter=filter,
        page=page,
        size=_page_size(size),
    )
    return result.serialize(service.serialize_team)


@router.get("/resource-usage")
def report_resource_usage(
    start_date: date,
    end_date: date,
    resource: str = "all",
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    from_at, to_at = _window(start_date, end_date)
    service = ResourceUsageReportService(db)
    result = service.report_resource_usage(
        from_at=from_at,
        to_at=to_at,
        resource_filter=resource,
        page=page,
        size=_page_size(size),
    )
    return result.serialize(service.serialize_summary)
