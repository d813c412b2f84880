from __future__ import annotations

import enum
from dataclasses import dataclass


class AttributionSource(str, enum.Enum):
    AI_AGENT = "ai_agent"
    TRUSTED_HISTORY = "trusted_history"
    MODERATOR = "moderator"


LABELS = {
    AttributionSource.AI_AGENT: "Agente IA",
    AttributionSource.TRUSTED_HISTORY: "Auto-aprobado por historial",
    AttributionSource.MODERATOR: "Moderador manual",
}


@dataclass(frozen=True)
class Attribution:
    source: AttributionSource
    moderator_email: str | None = None

    @classmethod
    def ai_agent(cls) -> "Attribution":
        return cls(AttributionSource.AI_AGENT)

    @classmethod
    def trusted_history(cls) -> "Attribution":
        return cls(AttributionSource.TRUSTED_HISTORY)

    @classmethod
    def moderator(cls, email: str | None = None) -> "Attribution":
        return cls(AttributionSource.MODERATOR, email or None)

    @property
    def label(self) -> str:
        # manual approvals show who approved when we know it
        if self.source is AttributionSource.MODERATOR and self.moderator_email:
            return self.moderator_email
        return LABELS[self.source]


def source_of(label: str | None) -> AttributionSource | None:
    """Map a stored ``approved_by`` label back to its source, for admin listings."""
    if not label:
        return None
    for source, text in LABELS.items():
        if label == text:
            return source
    return AttributionSource.MODERATOR
