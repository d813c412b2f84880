from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Protocol

import httpx

from blogcms.core.logging import log_event
from blogcms.core.settings import Settings


@dataclass(frozen=True)
class RejectionNotice:
    comment_content: str
    post_title: str
    author_name: str
    author_email: str
    rejection_reason: str
    comment_date: datetime


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class Notifier(Protocol):
    async def send_rejection_notice(self, notice: RejectionNotice) -> NotificationResult: ...


def render_rejection_email(notice: RejectionNotice, admin_url: str) -> tuple[str, str, str]:
    """Return (subject, html, text) for a rejection notice."""
    subject = f"Comentario rechazado automáticamente en \"{notice.post_title}\""
    date = notice.comment_date.strftime("%d/%m/%Y %H:%M")
    text = (
        "Un comentario fue rechazado por el agente de moderación.\n\n"
        f"Motivo: {notice.rejection_reason}\n"
        f"Post: {notice.post_title}\n"
        f"Autor: {notice.author_name} <{notice.author_email}>\n"
        f"Fecha: {date}\n\n"
        f"Comentario:\n{notice.comment_content}\n\n"
        f"Revisar comentarios: {admin_url}\n"
    )
    html = (
        "<h2>Comentario rechazado automáticamente</h2>"
        f"<p><strong>Motivo:</strong> {escape(notice.rejection_reason)}</p>"
        f"<p><strong>Post:</strong> {escape(notice.post_title)}</p>"
        f"<p><strong>Autor:</strong> {escape(notice.author_name)} &lt;{escape(notice.author_email)}&gt;</p>"
        f"<p><strong>Fecha:</strong> {date}</p>"
        f"<blockquote>{escape(notice.comment_content)}</blockquote>"
        f"<p><a href=\"{escape(admin_url)}\">Revisar comentarios</a></p>"
    )
    return subject, html, text


class EmailNotifier:
    """Sends rejection notices through the Resend HTTP API.

    Outside production nothing is sent: the notice is logged and a synthetic
    success is returned. Delivery failures are reported in the result.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None,
        api_url: str,
        sender: str,
        to: str,
        cc: str,
        admin_url: str,
        production: bool = False,
    ):
        self.http = http
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.sender = sender
        self.to = to
        self.cc = cc
        self.admin_url = admin_url
        self.production = production

    async def send_rejection_notice(self, notice: RejectionNotice) -> NotificationResult:
        subject, html, text = render_rejection_email(notice, self.admin_url)

        if not self.production:
            log_event(
                "notification.dev",
                to=self.to,
                cc=self.cc,
                subject=subject,
                author_email=notice.author_email,
                rejection_reason=notice.rejection_reason,
            )
            return NotificationResult(success=True, message_id="dev-mode")

        if not self.api_key:
            return self._failed("missing_credentials")

        try:
            resp = await self.http.post(
                f"{self.api_url}/emails",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": [self.to],
                    "cc": [self.cc],
                    "subject": subject,
                    "html": html,
                    "text": text,
                },
            )
        except httpx.HTTPError as exc:
            return self._failed(f"transport error: {exc}")

        if resp.status_code >= 300:
            return self._failed(f"http_{resp.status_code}: {resp.text[:200]}")

        try:
            body = resp.json()
        except ValueError:
            body = None
        message_id = body.get("id") if isinstance(body, dict) else None
        log_event("notification.sent", to=self.to, message_id=message_id)
        return NotificationResult(success=True, message_id=message_id)

    def _failed(self, error: str) -> NotificationResult:
        log_event("notification.failed", level=logging.ERROR, to=self.to, error=error)
        return NotificationResult(success=False, error=error)


def build_notifier(settings: Settings, http: httpx.AsyncClient) -> EmailNotifier:
    return EmailNotifier(
        http,
        api_key=settings.resend_api_key,
        api_url=settings.resend_api_url,
        sender=f"{settings.app_name} <{settings.mail_from}>",
        to=settings.rejection_notice_to,
        cc=settings.rejection_notice_cc,
        admin_url=settings.admin_comments_url,
        production=settings.is_production,
    )
