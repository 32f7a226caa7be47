"""initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM("worker", "manager", "owner", name="user_role", create_type=False)
user_status = postgresql.ENUM(
    "active", "inactive", "suspended", "on_leave", "deleted", name="user_status", create_type=False
)
task_progress = postgresql.ENUM(
    "not_started",
    "early_progress",
    "midway",
    "past_half",
    "near_completion",
    "completed",
    "completed_accepted",
    "completed_terminated",
    "cancelled",
    "failed",
    name="task_progress",
    create_type=False,
)
task_resource_type = postgresql.ENUM("assigned", "returned", name="task_resource_type", create_type=False)
resource_type = postgresql.ENUM("for_use", "for_sell", name="resource_type", create_type=False)


def upgrade() -> None:
    user_role.create(op.get_bind(), checkfirst=True)
    user_status.create(op.get_bind(), checkfirst=True)
    task_progress.create(op.get_bind(), checkfirst=True)
    task_resource_type.create(op.get_bind(), checkfirst=True)
    resource_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("hired_at", sa.DateTime(), nullable=True),
        sa.Column("efficiency", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("efficiency >= 0 AND efficiency <= 1", name="ck_users_efficiency_ratio"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("leader_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_teams_leader_id", "teams", ["leader_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_team_members_user_id", "team_members", ["user_id"])
    op.create_unique_constraint("uq_team_members_team_user", "team_members", ["team_id", "user_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("note", sa.String(length=2000), nullable=True),
        sa.Column("priority", sa.String(length=32), nullable=True),
        sa.Column("task_progress", task_progress, nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_tasks_team_id", "tasks", ["team_id"])
    op.create_index("ix_tasks_progress_end_date", "tasks", ["task_progress", "end_date"])

    op.create_table(
        "user_tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_tasks_user_id", "user_tasks", ["user_id"])
    op.create_unique_constraint("uq_user_tasks_task_user", "user_tasks", ["task_id", "user_id"])

    op.create_table(
        "resources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 2), nullable=True),
        sa.Column("resource_type", resource_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "task_resources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id"), nullable=False),
        sa.Column("resource_id", sa.Integer(), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("task_resource_type", task_resource_type, nullable=False),
        sa.Column("quantity", sa.Numeric(14, 2), nullable=False, server_default="0.00"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_task_resources_quantity_non_negative"),
    )
    op.create_index("ix_task_resources_created_at", "task_resources", ["created_at"])
    op.create_index("ix_task_resources_task_id", "task_resources", ["task_id"])


def downgrade() -> None:
    op.drop_index("ix_task_resources_task_id", table_name="task_resources")
    op.drop_index("ix_task_resources_created_at", table_name="task_resources")
    op.drop_table("task_resources")
    op.drop_table("resources")

    op.drop_constraint("uq_user_tasks_task_user", "user_tasks", type_="unique")
    op.drop_index("ix_user_tasks_user_id", table_name="user_tasks")
    op.drop_table("user_tasks")

    op.drop_index("ix_tasks_progress_end_date", table_name="tasks")
    op.drop_index("ix_tasks_team_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_constraint("uq_team_members_team_user", "team_members", type_="unique")
    op.drop_index("ix_team_members_user_id", table_name="team_members")
    op.drop_table("team_members")

    op.drop_index("ix_teams_leader_id", table_name="teams")
    op.drop_table("teams")

    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")

    resource_type.drop(op.get_bind(), checkfirst=True)
    task_resource_type.drop(op.get_bind(), checkfirst=True)
    task_progress.drop(op.get_bind(), checkfirst=True)
    user_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
