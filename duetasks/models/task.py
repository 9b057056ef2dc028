"""Task model."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from duetasks.database import Base
from duetasks.db.types import GUID, AttachmentList


class Task(Base):
    """A to-do item due at a naive local date-time."""

    __tablename__ = "tasks"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(80), nullable=False)
    description = Column(Text, nullable=True)
    due_at = Column(String(16), nullable=False, index=True)  # YYYY-MM-DDTHH:mm, local time
    completed = Column(Boolean, default=False, nullable=False, index=True)
    in_progress = Column(Boolean, default=False, nullable=False)
    attachments = Column(AttachmentList(), nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="tasks")
