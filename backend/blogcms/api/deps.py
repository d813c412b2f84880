from __future__ import annotations
from dataclasses import dataclass
from typing import Literal

import httpx
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blogcms.core.settings import settings
from blogcms.db.session import get_db
from blogcms.services.classifier import AIClassifier, build_classifier
from blogcms.services.moderation import CommentModerationEngine
from blogcms.services.notifier import Notifier, build_notifier
from blogcms.services.store import SqlCommentStore, SqlPostLookup

Role = Literal["superadmin", "colaborador"]

@dataclass(frozen=True)
class Moderator:
    role: Role
    email: str | None = None

def require_moderator(
    x_admin_token: str | None = Header(default=None),
    x_moderator_email: str | None = Header(default=None),
) -> Moderator:
    email = x_moderator_email.strip().lower() if x_moderator_email and x_moderator_email.strip() else None
    if x_admin_token and x_admin_token == settings.superadmin_token:
        return Moderator("superadmin", email)
    if x_admin_token and x_admin_token == settings.colaborador_token:
        return Moderator("colaborador", email)
    raise HTTPException(status_code=403, detail="Forbidden")

def require_superadmin(moderator: Moderator = Depends(require_moderator)) -> Moderator:
    if moderator.role != "superadmin":
        raise HTTPException(status_code=403, detail="Solo el superadmin puede eliminar comentarios")
    return moderator

def get_http(request: Request) -> httpx.AsyncClient:
    return request.app.state.http

def get_classifier(http: httpx.AsyncClient = Depends(get_http)) -> AIClassifier:
    return build_classifier(settings, http)

def get_notifier(http: httpx.AsyncClient = Depends(get_http)) -> Notifier:
    return build_notifier(settings, http)

def get_comment_store(db: AsyncSession = Depends(get_db)) -> SqlCommentStore:
    return SqlCommentStore(db)

def get_engine(
    db: AsyncSession = Depends(get_db),
    classifier: AIClassifier = Depends(get_classifier),
    notifier: Notifier = Depends(get_notifier),
) -> CommentModerationEngine:
    return CommentModerationEngine(SqlPostLookup(db), SqlCommentStore(db), classifier, notifier)
