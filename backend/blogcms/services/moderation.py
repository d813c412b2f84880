"""Comment moderation decision engine.

Every submitted comment gets exactly one of three statuses. The sources are
consulted in a fixed order:

1. the AI classifier; its verdict is final when it gives one,
2. the spam heuristic, only when the classifier gave no verdict,
3. the author's approval history, only when the heuristic found nothing.

Anything left over waits in PENDING for a human.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from blogcms.core.errors import CommentValidationError, InvalidStateError, NotFoundError
from blogcms.core.logging import log_event
from blogcms.models import Comment, CommentStatus
from blogcms.services.attribution import Attribution
from blogcms.services.classifier import AIClassifier, ClassificationRequest, Verdict
from blogcms.services.notifier import Notifier, RejectionNotice
from blogcms.services.spam import is_spam
from blogcms.services.store import CommentStore, NewComment, PostLookup
from blogcms.services.trust import TrustStore
from blogcms.services.validation import CommentInput, Invalid, ModerationVerdict, parse_comment_input

SPAM_FILTER_REASON = "detected as spam by basic filter"
AI_FALLBACK_REASON = "rejected by AI moderation"


@dataclass(frozen=True)
class ModerationDecision:
    status: CommentStatus
    path: str  # ai|spam_filter|trusted_history|manual_review
    attribution: Attribution | None = None
    rejection_reason: str | None = None
    notify: bool = False


def decision_from_verdict(verdict: ModerationVerdict) -> ModerationDecision:
    if verdict.is_appropriate:
        return ModerationDecision(CommentStatus.APPROVED, "ai", attribution=Attribution.ai_agent())
    return ModerationDecision(
        CommentStatus.REJECTED,
        "ai",
        attribution=Attribution.ai_agent(),
        rejection_reason=verdict.reason or AI_FALLBACK_REASON,
        notify=True,
    )


class CommentModerationEngine:
    def __init__(
        self,
        posts: PostLookup,
        comments: CommentStore,
        classifier: AIClassifier,
        notifier: Notifier,
    ):
        self.posts = posts
        self.comments = comments
        self.classifier = classifier
        self.notifier = notifier
        self.trust = TrustStore(comments)

    async def submit(self, payload: Mapping[str, Any]) -> Comment:
        parsed = parse_comment_input(dict(payload))
        if isinstance(parsed, Invalid):
            raise CommentValidationError(parsed.reasons)
        data = parsed.value

        post = await self.posts.find_post(data.post_id)
        if post is None:
            raise NotFoundError("Post no encontrado")
        if not post.is_published:
            raise InvalidStateError("No se pueden agregar comentarios a posts no publicados")

        decision = await self.decide(data, post.title)
        comment = await self.comments.insert_comment(
            NewComment(
                post_id=data.post_id,
                content=data.content,
                author_name=data.author_name,
                author_email=data.author_email,
                status=decision.status,
                approved_by=decision.attribution.label if decision.attribution else None,
                rejection_reason=decision.rejection_reason,
            )
        )
        log_event(
            "comment.created",
            comment_id=str(comment.id),
            post_id=str(data.post_id),
            status=decision.status.value,
            path=decision.path,
        )

        if decision.notify:
            await self._notify_rejection(comment, post.title)
        return comment

    async def decide(self, data: CommentInput, post_title: str) -> ModerationDecision:
        result = await self.classifier.classify(
            ClassificationRequest(
                content=data.content,
                post_title=post_title,
                author_name=data.author_name,
                author_email=data.author_email,
            )
        )
        if isinstance(result, Verdict):
            return decision_from_verdict(result.verdict)

        if is_spam(data.content):
            return ModerationDecision(CommentStatus.REJECTED, "spam_filter", rejection_reason=SPAM_FILTER_REASON)
        if await self.trust.has_approved_history(data.author_email):
            return ModerationDecision(
                CommentStatus.APPROVED, "trusted_history", attribution=Attribution.trusted_history()
            )
        return ModerationDecision(CommentStatus.PENDING, "manual_review")

    async def _notify_rejection(self, comment: Comment, post_title: str) -> None:
        notice = RejectionNotice(
            comment_content=comment.content,
            post_title=post_title,
            author_name=comment.author_name,
            author_email=comment.author_email,
            rejection_reason=comment.rejection_reason or AI_FALLBACK_REASON,
            comment_date=comment.created_at,
        )
        # the comment is already stored; a failed notice never changes its status
        try:
            result = await self.notifier.send_rejection_notice(notice)
        except Exception as exc:
            log_event("notification.failed", level=logging.ERROR, comment_id=str(comment.id), error=str(exc))
            return
        if not result.success:
            log_event("notification.failed", level=logging.ERROR, comment_id=str(comment.id), error=result.error)
