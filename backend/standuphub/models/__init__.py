"""SQLAlchemy models package."""

from standuphub.models.user import User
from standuphub.models.task import Task
from standuphub.models.report import StandupReport

__all__ = [
    "User",
    "Task",
    "StandupReport",
]
