from __future__ import annotations

import redis
from blogcms.core.settings import settings

LATENCY_KEY = "metrics:latency_ms:last500"
COUNTS_KEY = "metrics:counts"
STATUS_KEY = "metrics:status"


def get_redis() -> redis.Redis | None:
    # metrics are optional; no URL means no redis
    if not settings.redis_url:
        return None
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
