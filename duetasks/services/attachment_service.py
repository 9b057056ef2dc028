"""Attachment upload, removal and signed download URLs."""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from duetasks.config import settings
from duetasks.core.exceptions import BadRequestError, NotFoundError
from duetasks.localization.helpers import get_translation
from duetasks.models.task import Task
from duetasks.models.user import User
from duetasks.services.storage_service import storage_service
from duetasks.services.task_service import coerce_attachments, task_service

logger = logging.getLogger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^\w.\-]+", re.ASCII)

SPREADSHEET_EXTENSIONS = {"xls", "xlsx", "csv"}
DOCUMENT_EXTENSIONS = {"doc", "docx"}
TEXT_EXTENSIONS = {"txt", "md", "rtf"}


@dataclass
class IncomingFile:
    """Upload payload independent of the transport."""

    name: str
    content_type: str
    size: int
    stream: BinaryIO


def sanitize_path_segment(name: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("_", name)


def get_attachment_kind(name: str, content_type: Optional[str]) -> str:
    """MIME family first, then file extension."""
    mime = (content_type or "").lower()
    lowered = name.lower()
    ext = lowered.rsplit(".", 1)[-1] if "." in lowered else ""

    if mime.startswith("image/"):
        return "image"
    if mime.startswith("audio/"):
        return "audio"
    if mime.startswith("video/"):
        return "video"

    if ext == "pdf":
        return "pdf"
    if ext in SPREADSHEET_EXTENSIONS:
        return "spreadsheet"
    if ext in DOCUMENT_EXTENSIONS:
        return "document"
    if ext in TEXT_EXTENSIONS:
        return "text"
    return "file"


class AttachmentService:
    """Binary storage goes through storage_service; metadata lives on the task row."""

    def __init__(self, storage=None, bucket: Optional[str] = None):
        self._storage = storage
        self.bucket = bucket or settings.S3_BUCKET_NAME

    @property
    def storage(self):
        return self._storage or storage_service

    async def upload(
        self,
        db: AsyncSession,
        *,
        owner: User,
        task_id: UUID,
        files: Sequence[IncomingFile],
    ) -> Task:
        if not files:
            raise BadRequestError(get_translation("errors.no_files"))

        task_obj = await task_service.get_owned(db, owner=owner, task_id=task_id)

        uploaded: List[dict] = []
        for incoming in files:
            path = f"{owner.id}/{task_id}/{uuid.uuid4()}-{sanitize_path_segment(incoming.name)}"
            self.storage.upload_fileobj(
                incoming.stream,
                path,
                content_type=incoming.content_type,
                bucket=self.bucket,
            )
            uploaded.append(
                {
                    "id": str(uuid.uuid4()),
                    "name": incoming.name,
                    "type": incoming.content_type or "",
                    "size": incoming.size,
                    "bucket": self.bucket,
                    "path": path,
                    "kind": get_attachment_kind(incoming.name, incoming.content_type),
                }
            )

        attachments = coerce_attachments(task_obj.attachments) + uploaded
        updated = await task_service.replace_attachments(db, task_obj=task_obj, attachments=attachments)
        logger.info("Attached %d file(s) to task %s", len(uploaded), task_id)
        return updated

    async def remove(
        self,
        db: AsyncSession,
        *,
        owner: User,
        task_id: UUID,
        attachment_id: str,
    ) -> Task:
        task_obj = await task_service.get_owned(db, owner=owner, task_id=task_id)
        current = coerce_attachments(task_obj.attachments)
        target = next((a for a in current if a.get("id") == attachment_id), None)
        if target is None:
            raise NotFoundError(get_translation("errors.attachment_not_found"))

        # storage first: a failure here leaves the metadata intact
        self.storage.delete_file(target["path"], bucket=target["bucket"])

        remaining = [a for a in current if a.get("id") != attachment_id]
        updated = await task_service.replace_attachments(db, task_obj=task_obj, attachments=remaining)
        logger.info("Removed attachment %s from task %s", attachment_id, task_id)
        return updated

    def signed_url(self, *, owner: User, bucket: str, path: str) -> str:
        """Short-lived download URL for an object under the owner's prefix."""
        if bucket != self.bucket or not path.startswith(f"{owner.id}/"):
            raise NotFoundError(get_translation("errors.attachment_not_found"))
        return self.storage.generate_download_url(
            path,
            expires_in=settings.SIGNED_URL_TTL_SECONDS,
            bucket=bucket,
        )


attachment_service = AttachmentService()
