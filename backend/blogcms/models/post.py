from __future__ import annotations
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from blogcms.db.base import Base

class PostStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"

class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("status IN ('DRAFT', 'PUBLISHED', 'ARCHIVED')", name="ck_posts_status"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=PostStatus.DRAFT.value)  # DRAFT|PUBLISHED|ARCHIVED

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value
