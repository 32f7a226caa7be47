"""Best-effort refresh of the all-time efficiency score stored on users."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker

from app.repositories.farm_repository import FarmRepository
from app.services.efficiency_report_service import OutcomeCounts

logger = logging.getLogger(__name__)


class EfficiencyRecalculator:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = FarmRepository(db)

    def recalculate_user(self, user_id: int) -> float:
        """Recompute the user's score over all of their task outcomes and persist it."""

        user = self.repo.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

        outcomes = OutcomeCounts.from_counts(self.repo.count_outcomes_for_user(user_id))
        user.efficiency = outcomes.efficiency_rate
        self.db.commit()
        return user.efficiency

    def recalculate_users(self, user_ids: Iterable[int]) -> dict[int, float]:
        """Recalculate each user on its own; a failing user is logged and skipped."""

        results: dict[int, float] = {}
        for user_id in dict.fromkeys(user_ids):
            try:
                results[user_id] = self.recalculate_user(user_id)
            except Exception:
                self.db.rollback()
                logger.exception("Efficiency recalculation failed for user %s", user_id)
        if results:
            logger.debug("Efficiency recalculated for users %s", sorted(results))
        return results


def run_efficiency_recalculation(session_factory: sessionmaker[Session], user_ids: list[int]) -> None:
    """Background entry point owning its own session."""

    session = session_factory()
    try:
        EfficiencyRecalculator(session).recalculate_users(user_ids)
    finally:
        session.close()


def dispatch_efficiency_recalculation(
    *,
    user_ids: list[int],
    mode: str,
    db: Session,
    session_factory: sessionmaker[Session],
    background_tasks: BackgroundTasks,
) -> None:
    """Schedule recalculation for users touched by an already committed task mutation."""

    if not user_ids:
        return
    if mode == "inline":
        EfficiencyRecalculator(db).recalculate_users(user_ids)
        return
    background_tasks.add_task(run_efficiency_recalculation, session_factory, list(user_ids))
