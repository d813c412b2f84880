"""Validation at the trust boundaries: submitted comments and AI replies.

Parsers return a tagged ``Valid | Invalid`` value instead of raising, so the
caller decides what an invalid payload means (a 422 for a submission, "no
verdict" for the classifier).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Generic, Literal, Optional, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

VerdictCategory = Literal["spam", "offensive", "off-topic", "low-quality", "appropriate"]
Sentiment = Literal["positive", "neutral", "negative"]


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    reasons: tuple[str, ...]


Validated = Union[Valid[T], Invalid]


class CommentInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    post_id: UUID
    content: str = Field(min_length=1, max_length=1000)
    author_name: str = Field(min_length=1, max_length=100)
    author_email: str = Field(min_length=3, max_length=254)

    @field_validator("author_email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("invalid email address")
        return v


class ModerationVerdict(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True)

    is_appropriate: bool = Field(alias="isAppropriate")
    reason: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)
    category: VerdictCategory


class SentimentVerdict(BaseModel):
    model_config = ConfigDict(strict=True)

    sentiment: Sentiment


def _reasons(exc: ValidationError) -> tuple[str, ...]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        out.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return tuple(out)


def _parse(model: type[M], payload: Any) -> Validated[M]:
    if not isinstance(payload, dict):
        return Invalid((f"expected an object, got {type(payload).__name__}",))
    try:
        return Valid(model.model_validate(payload))
    except ValidationError as exc:
        return Invalid(_reasons(exc))


def parse_comment_input(payload: Any) -> Validated[CommentInput]:
    return _parse(CommentInput, payload)


def parse_verdict(payload: Any) -> Validated[ModerationVerdict]:
    return _parse(ModerationVerdict, payload)


def parse_sentiment(payload: Any) -> Validated[SentimentVerdict]:
    return _parse(SentimentVerdict, payload)
