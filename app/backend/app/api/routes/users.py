"""User lookups backed by the stored efficiency score."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.dependencies import get_db_session
from app.services.efficiency_report_service import EfficiencyReportService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/efficiency")
def get_user_efficiency(
    user_id: int,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return EfficiencyReportService(db).user_efficiency(user_id)
