from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from blogcms.core.settings import settings

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "event": getattr(record, "event", "log"),
            "logger": record.name,
            "msg": record.getMessage(),
            "env": settings.env,
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["err"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


log = logging.getLogger("blogcms")


def configure_logging() -> logging.Logger:
    if getattr(log, "_blogcms_configured", False):
        return log
    log.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    log.addHandler(handler)
    log.propagate = False
    log._blogcms_configured = True  # type: ignore[attr-defined]
    return log


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    extra = {"event": event}
    extra.update(fields)
    log.log(level, event, extra=extra)
