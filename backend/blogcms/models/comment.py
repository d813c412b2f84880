from __future__ import annotations
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, Uuid, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from blogcms.db.base import Base

class CommentStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        CheckConstraint("status IN ('PENDING', 'APPROVED', 'REJECTED')", name="ck_comments_status"),
        Index("ix_comments_post_status", "post_id", "status"),
        Index("ix_comments_email_status", "author_email", "status"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(Uuid(), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)

    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_email: Mapped[str] = mapped_column(String(254), nullable=False)  # lower-cased, trust key

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=CommentStatus.PENDING.value)  # PENDING|APPROVED|REJECTED
    approved_by: Mapped[str | None] = mapped_column(String(254), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
