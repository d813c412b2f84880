from __future__ import annotations

from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    env: str = "dev"
    database_url: str
    redis_url: str = ""
    log_level: str = "INFO"

    # X-Admin-Token values. Superadmin may delete, colaborador may only moderate.
    superadmin_token: str
    colaborador_token: str

    ai_gateway_api_key: str | None = None
    ai_gateway_url: str = "https://ai-gateway.vercel.sh/v1"
    ai_moderation_model: str = "openai/gpt-5"
    ai_moderation_temperature: float = 0.3
    ai_max_tokens: int = 500
    ai_timeout_seconds: float = 15.0

    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com"
    mail_from: str = "notificaciones@gabizimmer.com"
    app_name: str = "gabizimmer.com"
    rejection_notice_to: str = "gabi@gabizimmer.com"
    rejection_notice_cc: str = "admin@gabizimmer.com"
    admin_comments_url: str = "https://gabizimmer.com/admin/comments"

    comment_rate_limit: str = "5/minute"
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
