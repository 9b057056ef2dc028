"""Task source: persistence-backed operations on one user's task list."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from duetasks.core.exceptions import BadRequestError, NotFoundError, PersistenceError
from duetasks.crud.task import task as task_crud
from duetasks.localization.helpers import get_translation
from duetasks.middleware.metrics import task_conflicts_total, tasks_created_total
from duetasks.models.task import Task
from duetasks.models.user import User
from duetasks.schemas.task import SeedRequest, TaskCreate, TaskUpdate
from duetasks.services.conflict_service import conflict_service

logger = logging.getLogger(__name__)


def coerce_attachments(raw: Any) -> List[dict]:
    """Stored attachment lists may be malformed; keep only real entries."""
    if not isinstance(raw, list):
        return []
    return [item for item in raw if item]


@asynccontextmanager
async def persisting(db: AsyncSession, action: str):
    """Roll back and surface a PersistenceError when the record store fails."""
    try:
        yield
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Persistence failure during %s: %s", action, exc)
        raise PersistenceError(detail=get_translation("errors.persistence_failed", detail=str(exc))) from exc


class TaskService:
    """High-level operations backing the task API."""

    @staticmethod
    async def list_tasks(db: AsyncSession, *, owner: User) -> Tuple[List[Task], Optional[UUID]]:
        """All tasks ordered by due value plus the in-progress marker."""
        async with persisting(db, "load"):
            tasks = await task_crud.list_for_user(db, user_id=owner.id)
        in_progress_id = next((t.id for t in tasks if t.in_progress), None)
        return tasks, in_progress_id

    @staticmethod
    async def get_owned(db: AsyncSession, *, owner: User, task_id: UUID) -> Task:
        async with persisting(db, "get"):
            task_obj = await task_crud.get_for_user(db, user_id=owner.id, id=task_id)
        if task_obj is None:
            raise NotFoundError(get_translation("errors.task_not_found"))
        return task_obj

    async def create_task(
        self,
        db: AsyncSession,
        *,
        owner: User,
        task_in: TaskCreate,
    ) -> Tuple[Task, int]:
        """Create a task; the returned conflict count is advisory only."""
        async with persisting(db, "create"):
            existing = await task_crud.list_for_user(db, user_id=owner.id)
            conflicts = conflict_service.find_conflicts(existing, task_in.due_at)
            new_task = await task_crud.create(
                db,
                obj_in={
                    "user_id": owner.id,
                    "title": task_in.title,
                    "description": task_in.description,
                    "due_at": task_in.due_at,
                    "completed": False,
                    "in_progress": False,
                    "attachments": [],
                },
            )
        tasks_created_total.inc()
        if conflicts:
            task_conflicts_total.inc()
            logger.warning(
                "Task %s shares due time %s with %d task(s)",
                new_task.id, task_in.due_at, len(conflicts),
            )
        logger.info("Created task %s due %s", new_task.id, new_task.due_at)
        return new_task, len(conflicts)

    async def update_task(
        self,
        db: AsyncSession,
        *,
        owner: User,
        task_id: UUID,
        patch: TaskUpdate,
    ) -> Task:
        values = patch.model_dump(exclude_unset=True)
        if values.get("title", "") is None or values.get("due_at", "") is None:
            raise BadRequestError()
        if values.get("completed") is None:
            values.pop("completed", None)
        if values.get("completed"):
            # a completed task can never hold the in-progress marker
            values["in_progress"] = False

        task_obj = await self.get_owned(db, owner=owner, task_id=task_id)
        if not values:
            return task_obj
        async with persisting(db, "update"):
            updated = await task_crud.update(db, db_obj=task_obj, obj_in=values)
        logger.info("Updated task %s fields %s", task_id, sorted(values))
        return updated

    async def delete_task(self, db: AsyncSession, *, owner: User, task_id: UUID) -> None:
        async with persisting(db, "delete"):
            deleted = await task_crud.delete_for_user(db, user_id=owner.id, id=task_id)
        if not deleted:
            raise NotFoundError(get_translation("errors.task_not_found"))
        logger.info("Deleted task %s", task_id)

    @staticmethod
    async def clear_completed(db: AsyncSession, *, owner: User) -> int:
        async with persisting(db, "clear-completed"):
            deleted = await task_crud.delete_completed(db, user_id=owner.id)
        logger.info("Cleared %d completed task(s) for user %s", deleted, owner.id)
        return deleted

    async def set_in_progress(
        self,
        db: AsyncSession,
        *,
        owner: User,
        task_id: Optional[UUID],
    ) -> Optional[UUID]:
        """Clear the marker, then set it on task_id.

        The two steps commit separately: a failure in between leaves no task
        marked, never two.
        """
        if task_id is not None:
            target = await self.get_owned(db, owner=owner, task_id=task_id)
            if target.completed:
                raise BadRequestError()

        async with persisting(db, "clear in-progress"):
            await task_crud.clear_in_progress(db, user_id=owner.id)
        if task_id is None:
            logger.info("Cleared in-progress marker for user %s", owner.id)
            return None

        async with persisting(db, "set in-progress"):
            marked = await task_crud.mark_in_progress(db, user_id=owner.id, id=task_id)
        if not marked:
            # completed (or removed) after the ownership check
            logger.info("Task %s was not marked in progress for user %s", task_id, owner.id)
            return None
        logger.info("Task %s is now in progress", task_id)
        return task_id

    @staticmethod
    async def seed_tasks(db: AsyncSession, *, owner: User, seed: SeedRequest) -> List[Task]:
        """Insert demo tasks into an empty list."""
        async with persisting(db, "seed"):
            if await task_crud.count_for_user(db, user_id=owner.id) > 0:
                raise BadRequestError(get_translation("errors.seed_not_empty"))
            created = await task_crud.create_many(
                db,
                rows=[
                    {
                        "user_id": owner.id,
                        "title": item.title,
                        "description": item.description,
                        "due_at": item.due_at,
                        "completed": item.completed,
                        "in_progress": False,
                        "attachments": [],
                    }
                    for item in seed.tasks
                ],
            )
        logger.info("Seeded %d demo task(s) for user %s", len(created), owner.id)
        return created

    @staticmethod
    async def replace_attachments(db: AsyncSession, *, task_obj: Task, attachments: List[dict]) -> Task:
        async with persisting(db, "attachments"):
            return await task_crud.update(db, db_obj=task_obj, obj_in={"attachments": attachments})


task_service = TaskService()
