"""Client-side board state and the reducer functions that transform it.

Every function returns a new ``BoardState``; none performs I/O. The board
controller applies these before (optimistic) and after (confirmation) calling
the task source.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence, Tuple
from uuid import UUID

from duetasks.schemas.task import TaskResponse

_op_ids = itertools.count(1)


class OpKind:
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CLEAR_COMPLETED = "clear_completed"
    IN_PROGRESS = "in_progress"
    UPLOAD = "upload"
    REMOVE_ATTACHMENT = "remove_attachment"
    SEED = "seed"


@dataclass(frozen=True)
class PendingOp:
    """A mutation already applied locally and not yet confirmed by the source."""

    id: int
    kind: str
    task_id: Optional[UUID] = None


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = "error"


@dataclass(frozen=True)
class BoardState:
    tasks: Tuple[TaskResponse, ...] = ()
    in_progress_id: Optional[UUID] = None
    pending_ops: Tuple[PendingOp, ...] = ()
    notifications: Tuple[Notification, ...] = ()

    def get(self, task_id: UUID) -> Optional[TaskResponse]:
        return next((t for t in self.tasks if t.id == task_id), None)


def new_op(kind: str, task_id: Optional[UUID] = None) -> PendingOp:
    return PendingOp(id=next(_op_ids), kind=kind, task_id=task_id)


def loaded(state: BoardState, tasks: Sequence[TaskResponse], in_progress_id: Optional[UUID]) -> BoardState:
    """Replace the cache wholesale with what the source returned."""
    return replace(state, tasks=tuple(tasks), in_progress_id=in_progress_id)


def task_added(state: BoardState, task: TaskResponse) -> BoardState:
    return replace(state, tasks=(task,) + state.tasks)


def task_replaced(state: BoardState, task: TaskResponse) -> BoardState:
    return replace(state, tasks=tuple(task if t.id == task.id else t for t in state.tasks))


def task_patched(state: BoardState, task_id: UUID, fields: Dict[str, Any]) -> BoardState:
    tasks = tuple(t.model_copy(update=fields) if t.id == task_id else t for t in state.tasks)
    in_progress_id = state.in_progress_id
    if fields.get("completed") and in_progress_id == task_id:
        in_progress_id = None
    return replace(state, tasks=tasks, in_progress_id=in_progress_id)


def task_removed(state: BoardState, task_id: UUID) -> BoardState:
    return replace(
        state,
        tasks=tuple(t for t in state.tasks if t.id != task_id),
        in_progress_id=None if state.in_progress_id == task_id else state.in_progress_id,
    )


def completed_cleared(state: BoardState) -> BoardState:
    return replace(state, tasks=tuple(t for t in state.tasks if not t.completed))


def in_progress_set(state: BoardState, task_id: Optional[UUID]) -> BoardState:
    return replace(state, in_progress_id=task_id)


def op_started(state: BoardState, op: PendingOp) -> BoardState:
    return replace(state, pending_ops=state.pending_ops + (op,))


def op_finished(state: BoardState, op: PendingOp) -> BoardState:
    """Drop the op whether it was confirmed or failed."""
    return replace(state, pending_ops=tuple(o for o in state.pending_ops if o.id != op.id))


def notified(state: BoardState, notification: Notification) -> BoardState:
    return replace(state, notifications=state.notifications + (notification,))


def notifications_cleared(state: BoardState) -> BoardState:
    return replace(state, notifications=())
