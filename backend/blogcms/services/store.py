from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID, uuid4

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blogcms.core.errors import NotFoundError, PersistenceError
from blogcms.core.logging import log_event
from blogcms.models import Comment, CommentStatus, Post


@dataclass(frozen=True)
class NewComment:
    post_id: UUID
    content: str
    author_name: str
    author_email: str
    status: CommentStatus
    approved_by: str | None = None
    rejection_reason: str | None = None


@dataclass
class CommentStats:
    total: int
    approved: int
    pending: int
    rejected: int
    unique_commenters: int
    most_commented_post: dict[str, Any] | None


class PostLookup(Protocol):
    async def find_post(self, post_id: UUID) -> Post | None: ...


class CommentStore(Protocol):
    async def insert_comment(self, new: NewComment) -> Comment: ...

    async def update_comment_status(
        self, comment_id: UUID, status: CommentStatus, approved_by: str | None = None
    ) -> Comment: ...

    async def find_approved_comment_by_email(self, email: str) -> Comment | None: ...

    async def delete_comment(self, comment_id: UUID) -> None: ...


class SqlPostLookup:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_post(self, post_id: UUID) -> Post | None:
        return await self.db.get(Post, post_id)


class SqlCommentStore:
    """CommentStore over an AsyncSession. Every write commits on its own."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, op: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            log_event("store.write_failed", level=logging.ERROR, op=op, error=str(exc))
            raise PersistenceError(f"could not persist comment ({op})") from exc

    async def insert_comment(self, new: NewComment) -> Comment:
        comment = Comment(
            id=uuid4(),
            post_id=new.post_id,
            content=new.content,
            author_name=new.author_name,
            author_email=new.author_email,
            status=new.status.value,
            approved_by=new.approved_by,
            rejection_reason=new.rejection_reason,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(comment)
        await self._commit("insert")
        return comment

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        return await self.db.get(Comment, comment_id)

    async def update_comment_status(
        self, comment_id: UUID, status: CommentStatus, approved_by: str | None = None
    ) -> Comment:
        comment = await self.get_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado")
        comment.status = status.value
        if approved_by is not None:
            comment.approved_by = approved_by
        await self._commit("update_status")
        return comment

    async def find_approved_comment_by_email(self, email: str) -> Comment | None:
        res = await self.db.execute(
            select(Comment)
            .where(Comment.author_email == email, Comment.status == CommentStatus.APPROVED.value)
            .limit(1)
        )
        return res.scalars().first()

    async def delete_comment(self, comment_id: UUID) -> None:
        comment = await self.get_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado")
        await self.db.delete(comment)
        await self._commit("delete")

    async def list_approved_for_post(self, post_id: UUID) -> list[Comment]:
        res = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id, Comment.status == CommentStatus.APPROVED.value)
            .order_by(desc(Comment.created_at))
        )
        return list(res.scalars().all())

    async def list_comments(
        self,
        status: CommentStatus | None = None,
        post_id: UUID | None = None,
        author_email: str | None = None,
        limit: int = 200,
    ) -> list[tuple[Comment, str]]:
        """Admin listing, newest first, paired with the post title."""
        q = select(Comment, Post.title).join(Post, Post.id == Comment.post_id)
        if status is not None:
            q = q.where(Comment.status == status.value)
        if post_id is not None:
            q = q.where(Comment.post_id == post_id)
        if author_email:
            q = q.where(Comment.author_email == author_email.strip().lower())
        res = await self.db.execute(q.order_by(desc(Comment.created_at)).limit(limit))
        return [(c, title) for c, title in res.all()]

    async def list_pending(self) -> list[tuple[Comment, str]]:
        return await self.list_comments(status=CommentStatus.PENDING)

    async def recent_approved(self, limit: int = 5) -> list[tuple[Comment, str]]:
        return await self.list_comments(status=CommentStatus.APPROVED, limit=limit)

    async def count_pending(self) -> int:
        res = await self.db.execute(
            select(func.count(Comment.id)).where(Comment.status == CommentStatus.PENDING.value)
        )
        return int(res.scalar_one())

    async def stats(self) -> CommentStats:
        rows = (await self.db.execute(select(Comment.status, func.count(Comment.id)).group_by(Comment.status))).all()
        by_status = {status: int(n) for status, n in rows}
        unique = (await self.db.execute(select(func.count(func.distinct(Comment.author_email))))).scalar_one()

        n = func.count(Comment.id).label("n")
        top = (
            await self.db.execute(
                select(Post.id, Post.title, n)
                .join(Comment, Comment.post_id == Post.id)
                .where(Comment.status == CommentStatus.APPROVED.value)
                .group_by(Post.id, Post.title)
                .order_by(desc(n))
                .limit(1)
            )
        ).first()

        return CommentStats(
            total=sum(by_status.values()),
            approved=by_status.get(CommentStatus.APPROVED.value, 0),
            pending=by_status.get(CommentStatus.PENDING.value, 0),
            rejected=by_status.get(CommentStatus.REJECTED.value, 0),
            unique_commenters=int(unique),
            most_commented_post=(
                {"id": str(top.id), "title": top.title, "comments": int(top.n)} if top else None
            ),
        )
