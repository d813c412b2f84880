from uuid import UUID

from fastapi import APIRouter, Depends, Request

from blogcms.api.deps import get_comment_store, get_engine
from blogcms.api.schemas import CommentOut, CommentSubmitIn, SubmitOut
from blogcms.core.limits import limiter
from blogcms.core.settings import settings
from blogcms.models import CommentStatus
from blogcms.services.moderation import CommentModerationEngine
from blogcms.services.store import SqlCommentStore

router = APIRouter(prefix="/posts", tags=["comments"])

# The submitter only learns the outcome, never which check produced it.
SUBMIT_MESSAGES = {
    CommentStatus.APPROVED: "Tu comentario ha sido publicado",
    CommentStatus.REJECTED: "Tu comentario fue rechazado por el filtro anti-spam",
    CommentStatus.PENDING: "Tu comentario está pendiente de moderación",
}


@router.post("/{post_id}/comments", response_model=SubmitOut, status_code=201)
@limiter.limit(settings.comment_rate_limit)
async def submit_comment(
    post_id: UUID,
    data: CommentSubmitIn,
    request: Request,
    engine: CommentModerationEngine = Depends(get_engine),
):
    comment = await engine.submit({**data.model_dump(), "post_id": post_id})
    status = CommentStatus(comment.status)
    return SubmitOut(
        success=status is not CommentStatus.REJECTED,
        status=status,
        message=SUBMIT_MESSAGES[status],
        comment=CommentOut.model_validate(comment) if status is CommentStatus.APPROVED else None,
    )


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def approved_comments(post_id: UUID, store: SqlCommentStore = Depends(get_comment_store)):
    return await store.list_approved_for_post(post_id)
