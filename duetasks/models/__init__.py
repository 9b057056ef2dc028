"""Model modules."""
from duetasks.models.user import User
from duetasks.models.task import Task

__all__ = [
    "User",
    "Task",
]
