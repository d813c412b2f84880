from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from blogcms.api.deps import Moderator, get_classifier, get_comment_store, require_moderator, require_superadmin
from blogcms.api.schemas import (
    AdminCommentOut,
    BulkDeleteIn,
    BulkModerateIn,
    BulkOut,
    ModerateIn,
    SentimentOut,
    StatsOut,
)
from blogcms.models import Comment, CommentStatus
from blogcms.services import manual
from blogcms.services.attribution import source_of
from blogcms.services.classifier import AIClassifier
from blogcms.services.spam import is_suspicious_email
from blogcms.services.store import SqlCommentStore

router = APIRouter(prefix="/admin/comments", tags=["moderation"])


def _admin_view(comment: Comment, post_title: str) -> AdminCommentOut:
    return AdminCommentOut(
        id=comment.id,
        post_id=comment.post_id,
        post_title=post_title,
        content=comment.content,
        author_name=comment.author_name,
        author_email=comment.author_email,
        suspicious_email=is_suspicious_email(comment.author_email),
        status=CommentStatus(comment.status),
        approved_by=comment.approved_by,
        attribution=source_of(comment.approved_by),
        rejection_reason=comment.rejection_reason,
        created_at=comment.created_at,
    )


@router.get("", response_model=list[AdminCommentOut])
async def list_comments(
    status: CommentStatus | None = None,
    post_id: UUID | None = None,
    author_email: str | None = None,
    _: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    rows = await store.list_comments(status=status, post_id=post_id, author_email=author_email)
    return [_admin_view(c, title) for c, title in rows]


@router.get("/stats", response_model=StatsOut)
async def stats(_: Moderator = Depends(require_moderator), store: SqlCommentStore = Depends(get_comment_store)):
    s = await store.stats()
    return StatsOut(
        total=s.total,
        approved=s.approved,
        pending=s.pending,
        rejected=s.rejected,
        unique_commenters=s.unique_commenters,
        most_commented_post=s.most_commented_post,
    )


@router.get("/pending/count")
async def pending_count(_: Moderator = Depends(require_moderator), store: SqlCommentStore = Depends(get_comment_store)):
    return {"count": await store.count_pending()}


@router.get("/recent", response_model=list[AdminCommentOut])
async def recent(
    limit: int = 5,
    _: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    rows = await store.recent_approved(limit=max(1, min(limit, 50)))
    return [_admin_view(c, title) for c, title in rows]


async def _set_status(store: SqlCommentStore, comment_id: UUID, status: CommentStatus, moderator: Moderator) -> dict:
    comment = await manual.moderate_comment(store, comment_id, status, moderator.email)
    return {"ok": True, "id": str(comment.id), "status": comment.status, "approved_by": comment.approved_by}


@router.post("/{comment_id}/approve")
async def approve(
    comment_id: UUID,
    moderator: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    return await _set_status(store, comment_id, CommentStatus.APPROVED, moderator)


@router.post("/{comment_id}/reject")
async def reject(
    comment_id: UUID,
    moderator: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    return await _set_status(store, comment_id, CommentStatus.REJECTED, moderator)


@router.post("/{comment_id}/moderate")
async def moderate(
    comment_id: UUID,
    data: ModerateIn,
    moderator: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    return await _set_status(store, comment_id, data.status, moderator)


@router.post("/bulk", response_model=BulkOut)
async def bulk(
    data: BulkModerateIn,
    moderator: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
):
    result = await manual.bulk_moderate(store, data.ids, data.status, moderator.email)
    return BulkOut(success=result.success, message=result.message, succeeded=result.succeeded, failed=result.failed)


@router.delete("/{comment_id}")
async def delete(
    comment_id: UUID,
    _: Moderator = Depends(require_superadmin),
    store: SqlCommentStore = Depends(get_comment_store),
):
    await manual.delete_comment(store, comment_id)
    return {"ok": True}


@router.post("/bulk-delete", response_model=BulkOut)
async def bulk_delete(
    data: BulkDeleteIn,
    _: Moderator = Depends(require_superadmin),
    store: SqlCommentStore = Depends(get_comment_store),
):
    result = await manual.bulk_delete(store, data.ids)
    return BulkOut(success=result.success, message=result.message, succeeded=result.succeeded, failed=result.failed)


@router.get("/{comment_id}/sentiment", response_model=SentimentOut)
async def sentiment(
    comment_id: UUID,
    _: Moderator = Depends(require_moderator),
    store: SqlCommentStore = Depends(get_comment_store),
    classifier: AIClassifier = Depends(get_classifier),
):
    comment = await store.get_comment(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="not found")
    return SentimentOut(comment_id=comment.id, sentiment=await classifier.analyze_sentiment(comment.content))
