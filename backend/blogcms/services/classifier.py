"""AI classifier gateway.

Talks to an OpenAI-compatible chat-completions endpoint. Nothing here raises
for a dependency failure: missing credentials, timeouts, transport errors,
non-200 answers and replies that do not match the verdict schema all come
back as ``Unavailable(cause)`` and the caller falls back to the heuristics.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol, Union

import httpx

from blogcms.core.logging import log_event
from blogcms.core.settings import Settings
from blogcms.services.validation import (
    Invalid,
    ModerationVerdict,
    Sentiment,
    parse_sentiment,
    parse_verdict,
)

MODERATION_SYSTEM_PROMPT = """Eres el moderador de comentarios de un blog sobre vinos y gastronomía.
Evalúa cada comentario con criterio amable pero firme.

Aprueba los comentarios que:
- aportan opiniones, preguntas o experiencias relacionadas con el artículo
- son críticas respetuosas, aunque sean negativas
- son breves agradecimientos o felicitaciones genuinas

Rechaza los comentarios que:
- son spam, publicidad o enlaces promocionales
- contienen insultos, acoso, discriminación o lenguaje ofensivo
- no tienen relación alguna con el artículo ni con el blog
- no tienen contenido (caracteres al azar, texto repetido)

Responde SOLO con un objeto JSON, sin markdown:
{"isAppropriate": true|false, "reason": "explicación breve en español", "confidence": 0.0-1.0,
 "category": "spam"|"offensive"|"off-topic"|"low-quality"|"appropriate"}"""

SENTIMENT_SYSTEM_PROMPT = """Clasifica el sentimiento del comentario de un lector.
Responde SOLO con un objeto JSON, sin markdown: {"sentiment": "positive"|"neutral"|"negative"}"""

FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
FENCE_CLOSE_RE = re.compile(r"\s*```$")


@dataclass(frozen=True)
class ClassificationRequest:
    content: str
    post_title: str
    author_name: str
    author_email: str


@dataclass(frozen=True)
class Verdict:
    verdict: ModerationVerdict


@dataclass(frozen=True)
class Unavailable:
    cause: str


ClassifierResult = Union[Verdict, Unavailable]


class AIClassifier(Protocol):
    async def classify(self, request: ClassificationRequest) -> ClassifierResult: ...

    async def analyze_sentiment(self, content: str) -> Sentiment | None: ...


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = FENCE_OPEN_RE.sub("", text)
        text = FENCE_CLOSE_RE.sub("", text)
    return text


class GatewayClassifier:
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None,
        base_url: str,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout: float = 15.0,
        log_verdicts: bool = False,
    ):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.log_verdicts = log_verdicts

    async def classify(self, request: ClassificationRequest) -> ClassifierResult:
        if not self.api_key:
            return self._unavailable("missing_credentials")

        prompt = (
            "Analiza este comentario del blog de vinos y gastronomía:\n\n"
            f"Post: {request.post_title}\n"
            f"Autor: {request.author_name} <{request.author_email}>\n"
            f"Comentario: {request.content}"
        )
        reply = await self._complete(MODERATION_SYSTEM_PROMPT, prompt)
        if isinstance(reply, Unavailable):
            return reply

        parsed = parse_verdict(reply)
        if isinstance(parsed, Invalid):
            return self._unavailable("schema_violation", reasons=list(parsed.reasons))

        verdict = parsed.value
        if self.log_verdicts:
            log_event(
                "moderation.ai_verdict",
                is_appropriate=verdict.is_appropriate,
                category=verdict.category,
                confidence=verdict.confidence,
                reason=verdict.reason,
            )
        return Verdict(verdict)

    async def analyze_sentiment(self, content: str) -> Sentiment | None:
        if not self.api_key:
            return None
        reply = await self._complete(SENTIMENT_SYSTEM_PROMPT, f"Comentario: {content}")
        if isinstance(reply, Unavailable):
            return None
        parsed = parse_sentiment(reply)
        if isinstance(parsed, Invalid):
            return None
        return parsed.value.sentiment

    async def _complete(self, system: str, user: str) -> Any:
        """POST one chat completion and decode the JSON the model wrote."""
        try:
            resp = await self.http.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                    "response_format": {"type": "json_object"},
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                },
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            return self._unavailable("timeout")
        except httpx.HTTPError as exc:
            return self._unavailable("network", error=str(exc))

        if resp.status_code != 200:
            return self._unavailable(f"http_{resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
            return json.loads(strip_code_fences(content))
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            return self._unavailable("malformed_response", error=str(exc))

    def _unavailable(self, cause: str, **fields: Any) -> Unavailable:
        log_event("moderation.ai_unavailable", level=logging.WARNING, cause=cause, **fields)
        return Unavailable(cause)


def build_classifier(settings: Settings, http: httpx.AsyncClient) -> GatewayClassifier:
    return GatewayClassifier(
        http,
        api_key=settings.ai_gateway_api_key,
        base_url=settings.ai_gateway_url,
        model=settings.ai_moderation_model,
        temperature=settings.ai_moderation_temperature,
        max_tokens=settings.ai_max_tokens,
        timeout=settings.ai_timeout_seconds,
        log_verdicts=not settings.is_production,
    )
