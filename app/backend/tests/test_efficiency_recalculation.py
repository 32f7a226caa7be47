from __future__ import annotations

import logging
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.entities import Task, TaskProgress, TaskResourceType, User, UserTask
from app.repositories.farm_repository import FarmRepository
from app.services.efficiency_recalculation import EfficiencyRecalculator
from factories import add_movement, create_resource, create_task, create_user


def _efficiency(db: Session, user: User) -> float:
    db.expire_all()
    return db.get(User, user.id).efficiency


def _seed_history(db: Session) -> tuple[User, User, Task]:
    """Two workers who share an open task; the first one also has a failed task."""

    anna = create_user(db, first_name="Anna", last_name="Nowak")
    bartek = create_user(db, first_name="Bartek", last_name="Kowal")
    create_task(db, name="Old failure", progress=TaskProgress.FAILED, end_date=datetime(2023, 5, 1), assignees=(anna,))
    open_task = create_task(db, name="Irrigate", progress=TaskProgress.NEAR_COMPLETION, end_date=None, assignees=(anna, bartek))
    return anna, bartek, open_task


def test_review_refreshes_assignee_efficiency_in_background(client: TestClient, db_session: Session) -> None:
    anna, bartek, task = _seed_history(db_session)

    response = client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "completed_accepted"})

    assert response.status_code == 200
    body = response.json()
    assert body["task_progress"] == "completed_accepted"
    assert body["end_date"] is not None
    assert _efficiency(db_session, anna) == pytest.approx(0.5)
    assert _efficiency(db_session, bartek) == pytest.approx(1.0)


@pytest.mark.usefixtures("inline_recalculation")
def test_review_refreshes_assignee_efficiency_inline(client: TestClient, db_session: Session) -> None:
    anna, bartek, task = _seed_history(db_session)

    response = client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "completed_terminated"})

    assert response.status_code == 200
    assert _efficiency(db_session, anna) == pytest.approx(0.5)
    assert _efficiency(db_session, bartek) == pytest.approx(1.0)


def test_review_keeps_existing_end_date(client: TestClient, db_session: Session) -> None:
    anna = create_user(db_session, first_name="Anna", last_name="Nowak")
    task = create_task(
        db_session,
        name="Prune",
        progress=TaskProgress.COMPLETED,
        end_date=datetime(2024, 2, 2, 14, 0),
        assignees=(anna,),
    )

    response = client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "completed_terminated"})

    assert response.status_code == 200
    assert response.json()["end_date"] == "2024-02-02T14:00:00"
    assert _efficiency(db_session, anna) == pytest.approx(1.0)


def test_review_rejects_non_terminal_progress(client: TestClient, db_session: Session) -> None:
    _, _, task = _seed_history(db_session)

    not_terminal = client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "midway"})
    unknown = client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "perfect"})

    assert not_terminal.status_code == 422
    assert unknown.status_code == 422


def test_patch_task_refreshes_efficiency(client: TestClient, db_session: Session) -> None:
    anna, bartek, task = _seed_history(db_session)

    response = client.patch(
        f"/api/v1/tasks/{task.id}",
        json={"task_progress": "completed_accepted", "end_date": "2024-03-01T12:00:00", "note": "done early"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["note"] == "done early"
    assert body["end_date"] == "2024-03-01T12:00:00"
    assert _efficiency(db_session, anna) == pytest.approx(0.5)
    assert _efficiency(db_session, bartek) == pytest.approx(1.0)


def test_patch_into_final_outcome_stamps_end_date(client: TestClient, db_session: Session) -> None:
    anna, _, task = _seed_history(db_session)

    response = client.patch(f"/api/v1/tasks/{task.id}", json={"task_progress": "completed_accepted"})

    assert response.status_code == 200
    assert response.json()["end_date"] is not None
    db_session.expire_all()
    assert db_session.get(Task, task.id).end_date is not None
    assert _efficiency(db_session, anna) == pytest.approx(0.5)


def test_patch_to_open_progress_leaves_end_date_empty(client: TestClient, db_session: Session) -> None:
    _, _, task = _seed_history(db_session)

    response = client.patch(f"/api/v1/tasks/{task.id}", json={"task_progress": "midway"})

    assert response.status_code == 200
    assert response.json()["end_date"] is None


def test_patch_task_leaves_omitted_fields(client: TestClient, db_session: Session) -> None:
    _, _, task = _seed_history(db_session)

    response = client.patch(f"/api/v1/tasks/{task.id}", json={"priority": "high"})

    assert response.status_code == 200
    assert response.json()["name"] == "Irrigate"
    assert response.json()["task_progress"] == "near_completion"
    assert response.json()["priority"] == "high"


def test_delete_task_refreshes_former_assignees(client: TestClient, db_session: Session) -> None:
    anna = create_user(db_session, first_name="Anna", last_name="Nowak")
    failed = create_task(db_session, name="Spill", progress=TaskProgress.FAILED, end_date=datetime(2024, 1, 2), assignees=(anna,))
    create_task(db_session, name="Mow", progress=TaskProgress.COMPLETED_ACCEPTED, end_date=datetime(2024, 1, 3), assignees=(anna,))
    resource = create_resource(db_session, name="Diesel")
    add_movement(db_session, task=failed, resource=resource, direction=TaskResourceType.ASSIGNED, quantity="3", at=datetime(2024, 1, 2))
    EfficiencyRecalculator(db_session).recalculate_users([anna.id])
    assert _efficiency(db_session, anna) == pytest.approx(0.5)
    failed_id = failed.id

    response = client.delete(f"/api/v1/tasks/{failed_id}")

    assert response.status_code == 204
    assert _efficiency(db_session, anna) == pytest.approx(1.0)
    assert db_session.get(Task, failed_id) is None
    assert db_session.query(UserTask).filter(UserTask.task_id == failed_id).count() == 0


def test_task_endpoints_return_404_for_missing_task(client: TestClient) -> None:
    assert client.patch("/api/v1/tasks/999", json={"name": "x"}).status_code == 404
    assert client.post("/api/v1/tasks/999/review", json={"task_progress": "failed"}).status_code == 404
    assert client.delete("/api/v1/tasks/999").status_code == 404


def test_recalculation_failure_for_one_user_does_not_block_others(
    db_session: Session,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    anna, bartek, task = _seed_history(db_session)
    task.task_progress = TaskProgress.COMPLETED_ACCEPTED
    task.end_date = datetime(2024, 1, 1)
    db_session.commit()
    broken_user_id = anna.id
    real_count = FarmRepository.count_outcomes_for_user

    def flaky_count(self: FarmRepository, user_id: int, **kwargs: object) -> dict[TaskProgress, int]:
        if user_id == broken_user_id:
            raise RuntimeError("database hiccup")
        return real_count(self, user_id, **kwargs)

    monkeypatch.setattr(FarmRepository, "count_outcomes_for_user", flaky_count)

    with caplog.at_level(logging.ERROR, logger="app.services.efficiency_recalculation"):
        results = EfficiencyRecalculator(db_session).recalculate_users([anna.id, bartek.id])

    assert results == {bartek.id: pytest.approx(1.0)}
    assert _efficiency(db_session, bartek) == pytest.approx(1.0)
    assert _efficiency(db_session, anna) == 0.0
    assert f"Efficiency recalculation failed for user {broken_user_id}" in caplog.text


def test_recalculation_skips_missing_users(db_session: Session, caplog: pytest.LogCaptureFixture) -> None:
    anna = create_user(db_session, first_name="Anna", last_name="Nowak")
    create_task(db_session, name="Mow", progress=TaskProgress.COMPLETED_ACCEPTED, end_date=datetime(2024, 1, 3), assignees=(anna,))

    with caplog.at_level(logging.ERROR, logger="app.services.efficiency_recalculation"):
        results = EfficiencyRecalculator(db_session).recalculate_users([4242, anna.id, anna.id])

    assert results == {anna.id: pytest.approx(1.0)}
    assert "user 4242" in caplog.text


def test_user_efficiency_endpoint(client: TestClient, db_session: Session) -> None:
    anna, _, task = _seed_history(db_session)
    client.post(f"/api/v1/tasks/{task.id}/review", json={"task_progress": "completed_accepted"})

    response = client.get(f"/api/v1/users/{anna.id}/efficiency")
    missing = client.get("/api/v1/users/999/efficiency")

    assert response.status_code == 200
    assert response.json()["full_name"] == "Anna Nowak"
    assert response.json()["role"] == "worker"
    assert response.json()["efficiency"] == pytest.approx(0.5)
    assert missing.status_code == 404
