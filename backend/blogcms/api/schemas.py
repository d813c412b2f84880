from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from uuid import UUID
from datetime import datetime

from blogcms.models import CommentStatus
from blogcms.services.attribution import AttributionSource

class CommentSubmitIn(BaseModel):
    # checked by the moderation engine, which reports every problem at once
    author_name: str = ""
    author_email: str = ""
    content: str = ""

class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_name: str
    content: str
    created_at: datetime

class SubmitOut(BaseModel):
    success: bool
    status: CommentStatus
    message: str
    comment: Optional[CommentOut] = None

class AdminCommentOut(BaseModel):
    id: UUID
    post_id: UUID
    post_title: str
    content: str
    author_name: str
    author_email: str
    suspicious_email: bool
    status: CommentStatus
    approved_by: Optional[str] = None
    attribution: Optional[AttributionSource] = None
    rejection_reason: Optional[str] = None
    created_at: datetime

class ModerateIn(BaseModel):
    status: CommentStatus

class BulkModerateIn(BaseModel):
    ids: list[UUID] = Field(min_length=1, max_length=500)
    status: CommentStatus

class BulkDeleteIn(BaseModel):
    ids: list[UUID] = Field(min_length=1, max_length=500)

class BulkOut(BaseModel):
    success: bool
    message: str
    succeeded: int
    failed: int

class MostCommentedPost(BaseModel):
    id: UUID
    title: str
    comments: int

class StatsOut(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int
    unique_commenters: int
    most_commented_post: Optional[MostCommentedPost] = None

class SentimentOut(BaseModel):
    comment_id: UUID
    sentiment: Optional[Literal["positive", "neutral", "negative"]] = None
