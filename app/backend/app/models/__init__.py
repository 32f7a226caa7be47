"""ORM model package."""

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
    UserStatus,
    UserTask,
)

__all__ = [
    "TERMINAL_OUTCOMES",
    "Resource",
    "ResourceType",
    "Task",
    "TaskProgress",
    "TaskResource",
    "TaskResourceType",
    "Team",
    "TeamMember",
    "User",
    "UserRole",
    "UserStatus",
    "UserTask",
]
