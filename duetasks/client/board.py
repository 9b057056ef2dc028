"""Optimistic task board controller.

Mutations are applied to local state first, recorded as pending ops, then
sent to the task source. Confirmation drops the op. Failure drops the op too,
keeps the local change and appends a notification; call ``reload()`` to
reconcile with the source.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple
from uuid import UUID

from duetasks.client import state as reducers
from duetasks.client.api_client import ApiError
from duetasks.client.state import BoardState, Notification, OpKind, PendingOp
from duetasks.localization.helpers import get_translation
from duetasks.schemas.board import BoardResponse, FilterState, PageState
from duetasks.schemas.task import SeedRequest, TaskCreate, TaskResponse, TaskUpdate
from duetasks.services.attachment_service import IncomingFile
from duetasks.services.board_service import board_service
from duetasks.services.conflict_service import ConflictTracker, conflict_service
from duetasks.services.reminder_service import ReminderTracker, reminder_service
from duetasks.utils.clock import Clock
from duetasks.utils.datetimes import format_local_datetime

logger = logging.getLogger(__name__)


class TaskSource(Protocol):
    async def list_tasks(self) -> Tuple[List[TaskResponse], Optional[UUID]]: ...

    async def create_task(self, task_in: TaskCreate) -> Tuple[TaskResponse, int]: ...

    async def update_task(self, task_id: UUID, patch: TaskUpdate) -> None: ...

    async def delete_task(self, task_id: UUID) -> None: ...

    async def clear_completed(self) -> int: ...

    async def set_in_progress(self, task_id: Optional[UUID]) -> Optional[UUID]: ...

    async def seed_tasks(self, seed: SeedRequest) -> List[TaskResponse]: ...


class AttachmentSource(Protocol):
    async def upload_attachments(self, task_id: UUID, files: Sequence[IncomingFile]) -> TaskResponse: ...

    async def delete_attachment(self, task_id: UUID, attachment_id: str) -> TaskResponse: ...

    async def signed_url(self, bucket: str, path: str) -> str: ...


class TaskBoard:
    """Single-loop board over a task source; all analytics are recomputed from state."""

    def __init__(
        self,
        tasks: TaskSource,
        attachments: Optional[AttachmentSource] = None,
        *,
        clock: Optional[Clock] = None,
        locale: str = "en",
    ):
        self.tasks = tasks
        self.attachments = attachments
        self.clock = clock or Clock()
        self.locale = locale
        self.state = BoardState()
        self.filter_state = FilterState()
        self.page_state = PageState()
        self.conflicts = ConflictTracker()
        self.reminders = ReminderTracker()

    # Plumbing

    def _dispatch(self, reducer, *args) -> None:
        self.state = reducer(self.state, *args)

    def _notify(self, title_key: str, description: str = "", variant: str = "error") -> None:
        title = get_translation(title_key, self.locale)
        self._dispatch(reducers.notified, Notification(title=title, description=description, variant=variant))

    def _begin(self, kind: str, task_id: Optional[UUID] = None) -> PendingOp:
        op = reducers.new_op(kind, task_id)
        self._dispatch(reducers.op_started, op)
        return op

    def _failed(self, op: PendingOp, title_key: str, exc: ApiError) -> None:
        logger.warning("%s failed for task %s: %s", op.kind, op.task_id, exc)
        self._dispatch(reducers.op_finished, op)
        self._notify(title_key, str(exc))

    # Loading

    async def reload(self) -> BoardState:
        """Replace local state with the source's view; errors propagate."""
        tasks, in_progress_id = await self.tasks.list_tasks()
        self._dispatch(reducers.loaded, tasks, in_progress_id)
        return self.state

    # Mutations

    async def add_task(self, task_in: TaskCreate) -> TaskResponse:
        """Create a task; a shared due time switches the view to that slot.

        Creation is awaited rather than applied optimistically and source
        errors propagate to the caller.
        """
        now = self.clock.now
        conflict = conflict_service.check(self.state.tasks, task_in.due_at, now, self.conflicts)
        if conflict is not None:
            self.filter_state = conflict_service.exact_filter_for(conflict.due_at)
            self.page_state = self.page_state.model_copy(update={"page": 1})
            self._notify(
                "conflict.title",
                get_translation(
                    "conflict.description",
                    self.locale,
                    count=conflict.count,
                    when=format_local_datetime(conflict.due_at),
                ),
            )

        op = self._begin(OpKind.CREATE)
        try:
            created, _ = await self.tasks.create_task(task_in)
        finally:
            self._dispatch(reducers.op_finished, op)
        self._dispatch(reducers.task_added, created)
        return created

    async def set_completed(self, task_id: UUID, completed: bool) -> None:
        await self.edit_task(task_id, TaskUpdate(completed=completed))

    async def edit_task(self, task_id: UUID, patch: TaskUpdate) -> None:
        fields = patch.model_dump(exclude_unset=True)
        if not fields:
            return
        self._dispatch(reducers.task_patched, task_id, fields)
        op = self._begin(OpKind.UPDATE, task_id)
        try:
            await self.tasks.update_task(task_id, patch)
        except ApiError as exc:
            self._failed(op, "notify.update_failed", exc)
            return
        self._dispatch(reducers.op_finished, op)

    async def delete_task(self, task_id: UUID) -> None:
        self._dispatch(reducers.task_removed, task_id)
        op = self._begin(OpKind.DELETE, task_id)
        try:
            await self.tasks.delete_task(task_id)
        except ApiError as exc:
            self._failed(op, "notify.delete_failed", exc)
            return
        self._dispatch(reducers.op_finished, op)

    async def clear_completed(self) -> None:
        if not any(t.completed for t in self.state.tasks):
            return
        self._dispatch(reducers.completed_cleared)
        op = self._begin(OpKind.CLEAR_COMPLETED)
        try:
            await self.tasks.clear_completed()
        except ApiError as exc:
            self._failed(op, "notify.clear_failed", exc)
            return
        self._dispatch(reducers.op_finished, op)

    async def set_in_progress(self, task_id: Optional[UUID]) -> None:
        """Move the marker; the id confirmed by the source wins."""
        self._dispatch(reducers.in_progress_set, task_id)
        op = self._begin(OpKind.IN_PROGRESS, task_id)
        try:
            confirmed = await self.tasks.set_in_progress(task_id)
        except ApiError as exc:
            self._failed(op, "notify.in_progress_failed", exc)
            return
        self._dispatch(reducers.in_progress_set, confirmed)
        self._dispatch(reducers.op_finished, op)

    async def toggle_in_progress(self, task_id: UUID) -> None:
        await self.set_in_progress(None if self.state.in_progress_id == task_id else task_id)

    async def seed_demo(self, seed: SeedRequest) -> None:
        """Seed only an empty board."""
        if self.state.tasks:
            return
        op = self._begin(OpKind.SEED)
        try:
            created = await self.tasks.seed_tasks(seed)
        finally:
            self._dispatch(reducers.op_finished, op)
        self._dispatch(reducers.loaded, created, None)

    # Attachments

    async def upload_attachments(self, task_id: UUID, files: Sequence[IncomingFile]) -> None:
        if self.attachments is None or not files:
            return
        op = self._begin(OpKind.UPLOAD, task_id)
        try:
            updated = await self.attachments.upload_attachments(task_id, files)
        except ApiError as exc:
            self._failed(op, "notify.upload_failed", exc)
            return
        self._dispatch(reducers.task_replaced, updated)
        self._dispatch(reducers.op_finished, op)

    async def remove_attachment(self, task_id: UUID, attachment_id: str) -> None:
        if self.attachments is None:
            return
        current = self.state.get(task_id)
        if current is not None:
            remaining = [a for a in current.attachments if a.id != attachment_id]
            self._dispatch(reducers.task_patched, task_id, {"attachments": remaining})
        op = self._begin(OpKind.REMOVE_ATTACHMENT, task_id)
        try:
            updated = await self.attachments.delete_attachment(task_id, attachment_id)
        except ApiError as exc:
            self._failed(op, "notify.attachment_remove_failed", exc)
            return
        self._dispatch(reducers.task_replaced, updated)
        self._dispatch(reducers.op_finished, op)

    async def download_url(self, task_id: UUID, attachment_id: str) -> Optional[str]:
        task = self.state.get(task_id)
        if self.attachments is None or task is None:
            return None
        attachment = next((a for a in task.attachments if a.id == attachment_id), None)
        if attachment is None:
            return None
        return await self.attachments.signed_url(attachment.bucket, attachment.path)

    # View state

    def set_filter(self, filter_state: FilterState) -> None:
        self.filter_state = filter_state
        self.page_state = self.page_state.model_copy(update={"page": 1})

    def set_page(self, page: int) -> None:
        self.page_state = self.page_state.model_copy(update={"page": page})

    def set_page_size(self, page_size: int) -> None:
        self.page_state = PageState(page=1, page_size=page_size)

    def clear_notifications(self) -> None:
        self._dispatch(reducers.notifications_cleared)

    def dismiss_reminder(self) -> None:
        upcoming = reminder_service.next_upcoming(self.state.tasks, self.clock.now)
        if upcoming is not None:
            self.reminders.dismiss(upcoming.task.id)

    def tick(self) -> BoardResponse:
        self.clock.tick()
        return self.view()

    def view(self) -> BoardResponse:
        """Recompute everything from the current state and one clock reading."""
        now = self.clock.now
        self.reminders.refresh(reminder_service.next_upcoming(self.state.tasks, now))
        board = board_service.build_board(
            self.state.tasks,
            now=now,
            in_progress_id=self.state.in_progress_id,
            filter_state=self.filter_state,
            page_state=self.page_state,
            dismissed_reminder_id=self.reminders.dismissed_task_id,
            conflict=self.conflicts.active(now),
            locale=self.locale,
        )
        # keep navigation in range after deletions shrink the list
        if board.page.page != self.page_state.page:
            self.page_state = self.page_state.model_copy(update={"page": board.page.page})
        return board
