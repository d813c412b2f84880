from __future__ import annotations
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.responses import JSONResponse
from starlette.requests import Request

from blogcms.core.settings import settings
from blogcms.core.errors import BlogError, CommentValidationError
from blogcms.core.limits import limiter
from blogcms.core.logging import configure_logging, log
from blogcms.core.middleware import SecurityHeadersMiddleware, MetricsMiddleware
from blogcms.api import admin, comments, moderation

configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # one pooled client shared by the AI gateway and the email sink
    async with httpx.AsyncClient(timeout=settings.ai_timeout_seconds) as http:
        app.state.http = http
        log.info("startup", extra={"event": "startup"})
        yield

app = FastAPI(title="blogcms API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse({"detail": "rate limit exceeded"}, status_code=429)

@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    body: dict = {"detail": exc.message}
    if isinstance(exc, CommentValidationError):
        body["reasons"] = exc.reasons
    elif exc.status_code >= 500:
        log.error("request failed", extra={"event": "request.failed", "path": request.url.path, "error": exc.message})
        body["detail"] = "Error al procesar el comentario"
    return JSONResponse(body, status_code=exc.status_code)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(comments.router)
app.include_router(moderation.router)
app.include_router(admin.router)

@app.get("/health")
@limiter.limit("30/minute")
async def health(request: Request):
    return {"ok": True}
