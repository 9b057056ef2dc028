"""Tasks API endpoints."""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from duetasks.database import get_db
from duetasks.dependencies import get_clock, get_current_active_user
from duetasks.models.user import User
from duetasks.schemas.task import (
    AttachmentDeleteRequest,
    InProgressRequest,
    InProgressResponse,
    OkResponse,
    SeedRequest,
    SeedResponse,
    TaskCreate,
    TaskCreatedResponse,
    TaskEnvelope,
    TaskListResponse,
    TaskUpdate,
)
from duetasks.services.attachment_service import IncomingFile, attachment_service
from duetasks.services.board_service import board_sessions
from duetasks.services.task_service import task_service
from duetasks.utils.clock import Clock

router = APIRouter()


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """All of the current user's tasks, ordered by due value."""
    tasks, in_progress_id = await task_service.list_tasks(db, owner=current_user)
    return TaskListResponse(tasks=tasks, in_progress_task_id=in_progress_id)


@router.post("", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    clock: Clock = Depends(get_clock),
):
    """Create a task. A shared due time is reported, never rejected."""
    new_task, conflict_count = await task_service.create_task(db, owner=current_user, task_in=task_in)
    if conflict_count:
        board_sessions.get(current_user.id).conflicts.signal(new_task.due_at, conflict_count, clock.now)
    return TaskCreatedResponse(task=new_task, conflict_count=conflict_count)


@router.post("/clear-completed", response_model=OkResponse)
async def clear_completed(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    deleted = await task_service.clear_completed(db, owner=current_user)
    return OkResponse(deleted=deleted)


@router.post("/in-progress", response_model=InProgressResponse)
async def set_in_progress(
    request: InProgressRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Move the in-progress marker to a task, or clear it with `null`."""
    task_id = await task_service.set_in_progress(db, owner=current_user, task_id=request.id)
    return InProgressResponse(in_progress_task_id=task_id)


@router.post("/seed", response_model=SeedResponse, status_code=status.HTTP_201_CREATED)
async def seed_tasks(
    seed: SeedRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Load demo tasks into an empty list."""
    created = await task_service.seed_tasks(db, owner=current_user, seed=seed)
    return SeedResponse(tasks=created)


@router.patch("/{task_id}", response_model=OkResponse)
async def update_task(
    task_id: UUID,
    patch: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    await task_service.update_task(db, owner=current_user, task_id=task_id, patch=patch)
    return OkResponse()


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    await task_service.delete_task(db, owner=current_user, task_id=task_id)
    return OkResponse()


@router.post("/{task_id}/attachments", response_model=TaskEnvelope)
async def upload_attachments(
    task_id: UUID,
    files: List[UploadFile] = File(default=[]),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Upload one or more files and append them to the task."""
    incoming = [
        IncomingFile(
            name=upload.filename or "file",
            content_type=upload.content_type or "",
            size=upload.size or 0,
            stream=upload.file,
        )
        for upload in files
    ]
    updated = await attachment_service.upload(db, owner=current_user, task_id=task_id, files=incoming)
    return TaskEnvelope(task=updated)


@router.post("/{task_id}/attachments/delete", response_model=TaskEnvelope)
async def delete_attachment(
    task_id: UUID,
    request: AttachmentDeleteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    updated = await attachment_service.remove(
        db, owner=current_user, task_id=task_id, attachment_id=request.attachment_id
    )
    return TaskEnvelope(task=updated)
