"""Liveness and readiness probes."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.dependencies import get_db_session

router = APIRouter(prefix="/health")


@router.get("")
def health() -> dict[str, str]:
    """Simple liveness endpoint."""

    return {"status": "ok"}


@router.get("/ready")
def readiness(db: Session = Depends(get_db_session)) -> dict[str, str]:
    """Report whether the reporting store answers queries."""

    db.execute(text("SELECT 1"))
    return {
        "status": "ready",
        "efficiency_recalculation_mode": get_settings().efficiency_recalculation_mode,
    }
