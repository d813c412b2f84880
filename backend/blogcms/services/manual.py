from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable
from uuid import UUID

from blogcms.core.logging import log_event
from blogcms.models import Comment, CommentStatus
from blogcms.services.attribution import Attribution
from blogcms.services.store import CommentStore

STATUS_WORDS = {
    CommentStatus.APPROVED: "aprobados",
    CommentStatus.REJECTED: "rechazados",
    CommentStatus.PENDING: "marcados como pendientes",
}


@dataclass(frozen=True)
class BulkResult:
    success: bool
    message: str
    succeeded: int
    failed: int


async def moderate_comment(
    store: CommentStore,
    comment_id: UUID,
    status: CommentStatus,
    moderator_email: str | None = None,
) -> Comment:
    """Set a comment's status by hand.

    Approvals record who approved. The rejection reason is left as it was,
    so a manual rejection never carries one of its own.
    """
    approved_by = Attribution.moderator(moderator_email).label if status is CommentStatus.APPROVED else None
    comment = await store.update_comment_status(comment_id, status, approved_by)
    log_event("comment.moderated", comment_id=str(comment_id), status=status.value, moderator=moderator_email)
    return comment


async def delete_comment(store: CommentStore, comment_id: UUID) -> None:
    await store.delete_comment(comment_id)
    log_event("comment.deleted", comment_id=str(comment_id))


async def _run_each(ids: Iterable[UUID], op: Callable[[UUID], Awaitable[object]], event: str) -> tuple[int, int]:
    # items share one session, so they run one after another
    ok = failed = 0
    for comment_id in ids:
        try:
            await op(comment_id)
        except Exception as exc:
            failed += 1
            log_event(event, level=logging.WARNING, comment_id=str(comment_id), error=str(exc))
        else:
            ok += 1
    return ok, failed


async def bulk_moderate(
    store: CommentStore,
    ids: Iterable[UUID],
    status: CommentStatus,
    moderator_email: str | None = None,
) -> BulkResult:
    ok, failed = await _run_each(
        ids,
        lambda cid: moderate_comment(store, cid, status, moderator_email),
        "bulk_moderate.item_failed",
    )
    if failed:
        return BulkResult(False, f"{ok} comentarios moderados, {failed} fallaron", ok, failed)
    return BulkResult(True, f"{ok} comentarios {STATUS_WORDS[status]} exitosamente", ok, failed)


async def bulk_delete(store: CommentStore, ids: Iterable[UUID]) -> BulkResult:
    ok, failed = await _run_each(ids, lambda cid: delete_comment(store, cid), "bulk_delete.item_failed")
    if failed:
        return BulkResult(False, f"{ok} comentarios eliminados, {failed} fallaron", ok, failed)
    return BulkResult(True, f"{ok} comentarios eliminados permanentemente", ok, failed)
