"""Service-level tests for the two-step in-progress update."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from duetasks.core.exceptions import PersistenceError
from duetasks.crud.task import task as task_crud
from duetasks.models.task import Task
from duetasks.schemas.task import TaskCreate
from duetasks.services.task_service import task_service


async def marked_count(db, user_id):
    result = await db.execute(
        select(func.count()).select_from(Task).where(Task.user_id == user_id, Task.in_progress.is_(True))
    )
    return result.scalar_one()


async def create(db, owner, title, due_at):
    task, _ = await task_service.create_task(db, owner=owner, task_in=TaskCreate(title=title, due_at=due_at))
    return task.id


@pytest.mark.asyncio
async def test_failure_between_steps_leaves_no_task_marked(db_session, test_user, monkeypatch):
    user_id = test_user.id
    first = await create(db_session, test_user, "first", "2024-01-01T09:00")
    second = await create(db_session, test_user, "second", "2024-01-01T10:00")

    await task_service.set_in_progress(db_session, owner=test_user, task_id=first)
    assert await marked_count(db_session, user_id) == 1

    async def failing_mark(db, *, user_id, id):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(task_crud, "mark_in_progress", failing_mark)

    with pytest.raises(PersistenceError):
        await task_service.set_in_progress(db_session, owner=test_user, task_id=second)

    assert await marked_count(db_session, user_id) == 0


@pytest.mark.asyncio
async def test_completed_task_is_never_marked(db_session, test_user):
    user_id = test_user.id
    task_id = await create(db_session, test_user, "done", "2024-01-01T09:00")
    task = await task_crud.get_for_user(db_session, user_id=user_id, id=task_id)
    await task_crud.update(db_session, db_obj=task, obj_in={"completed": True})

    marked = await task_crud.mark_in_progress(db_session, user_id=user_id, id=task_id)

    assert marked == 0
    assert await marked_count(db_session, user_id) == 0
