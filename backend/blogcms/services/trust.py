from __future__ import annotations

from blogcms.services.store import CommentStore


class TrustStore:
    """Authors with at least one approved comment are trusted.

    There is no time window or count threshold: a single approval, however
    old, is enough.
    """

    def __init__(self, comments: CommentStore):
        self.comments = comments

    async def has_approved_history(self, email: str) -> bool:
        found = await self.comments.find_approved_comment_by_email(email.strip().lower())
        return found is not None
