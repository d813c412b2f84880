from __future__ import annotations

from fastapi import APIRouter, Depends
import redis
import statistics

from blogcms.api.deps import Moderator, get_comment_store, require_moderator
from blogcms.core.redis import COUNTS_KEY, LATENCY_KEY, STATUS_KEY, get_redis
from blogcms.services.store import SqlCommentStore

router = APIRouter(prefix="/admin", tags=["admin"])

def latency_metrics() -> dict | None:
    r = get_redis()
    if r is None:
        return None
    try:
        samples = r.lrange(LATENCY_KEY, 0, 499) or []
        counts = r.hgetall(COUNTS_KEY) or {}
        status = r.hgetall(STATUS_KEY) or {}
    except redis.RedisError:
        # stats are still served when metrics are down
        return None
    vals = [float(x) for x in samples if x]
    p50 = statistics.median(vals) if vals else None
    p95 = statistics.quantiles(vals, n=20)[-1] if len(vals) >= 40 else (max(vals) if vals else None)
    return {
        "latency_ms_p50": p50,
        "latency_ms_p95": p95,
        "requests_total": int(counts.get("requests", 0)),
        "status_counts": {k: int(v) for k, v in status.items()},
    }

@router.get("/overview")
async def overview(_: Moderator = Depends(require_moderator), store: SqlCommentStore = Depends(get_comment_store)):
    s = await store.stats()
    pending = await store.list_pending()
    return {
        "metrics": latency_metrics(),
        "comments": {
            "total": s.total,
            "approved": s.approved,
            "pending": s.pending,
            "rejected": s.rejected,
            "unique_commenters": s.unique_commenters,
            "most_commented_post": s.most_commented_post,
        },
        "pending": [
            {"id": str(c.id), "post_title": title, "author_name": c.author_name, "created_at": c.created_at}
            for c, title in pending[:50]
        ],
    }
