"""Task CRUD operations, always scoped to the owning user."""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from duetasks.crud.base import CRUDBase
from duetasks.models.task import Task
from duetasks.schemas.task import TaskCreate, TaskUpdate


class CRUDTask(CRUDBase[Task, TaskCreate, TaskUpdate]):
    """CRUD operations for Task."""

    async def list_for_user(self, db: AsyncSession, *, user_id: UUID) -> List[Task]:
        result = await db.execute(
            select(Task).where(Task.user_id == user_id).order_by(Task.due_at.asc())
        )
        return list(result.scalars().all())

    async def get_for_user(self, db: AsyncSession, *, user_id: UUID, id: UUID) -> Optional[Task]:
        result = await db.execute(
            select(Task).where(Task.id == id, Task.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def count_for_user(self, db: AsyncSession, *, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Task.id)).where(Task.user_id == user_id)
        )
        return result.scalar_one()

    async def create_many(self, db: AsyncSession, *, rows: List[Dict[str, Any]]) -> List[Task]:
        objs = [Task(**row) for row in rows]
        db.add_all(objs)
        await db.commit()
        for obj in objs:
            await db.refresh(obj)
        return objs

    async def delete_for_user(self, db: AsyncSession, *, user_id: UUID, id: UUID) -> int:
        result = await db.execute(delete(Task).where(Task.id == id, Task.user_id == user_id))
        await db.commit()
        return result.rowcount

    async def delete_completed(self, db: AsyncSession, *, user_id: UUID) -> int:
        result = await db.execute(
            delete(Task).where(Task.user_id == user_id, Task.completed.is_(True))
        )
        await db.commit()
        return result.rowcount

    async def clear_in_progress(self, db: AsyncSession, *, user_id: UUID) -> int:
        result = await db.execute(
            update(Task)
            .where(Task.user_id == user_id, Task.in_progress.is_(True))
            .values(in_progress=False)
        )
        await db.commit()
        return result.rowcount

    async def mark_in_progress(self, db: AsyncSession, *, user_id: UUID, id: UUID) -> int:
        result = await db.execute(
            update(Task)
            .where(Task.id == id, Task.user_id == user_id, Task.completed.is_(False))
            .values(in_progress=True)
        )
        await db.commit()
        return result.rowcount


task = CRUDTask(Task)
