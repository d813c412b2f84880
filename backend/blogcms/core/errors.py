"""Domain exceptions for the comment pipeline.

Dependency failures (AI gateway, email provider) are never raised; they come
back as result values. What is raised here is converted to an HTTP response
in ``blogcms.main``.
"""

from __future__ import annotations

from typing import Sequence


class BlogError(Exception):
    """Base class for errors raised by blogcms services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CommentValidationError(BlogError):
    """Submitted comment failed input validation."""

    status_code = 422

    def __init__(self, reasons: Sequence[str]):
        super().__init__("; ".join(reasons) or "invalid input")
        self.reasons = list(reasons)


class NotFoundError(BlogError):
    status_code = 404


class InvalidStateError(BlogError):
    """Target exists but is not in a state that allows the operation."""

    status_code = 409


class PersistenceError(BlogError):
    status_code = 500
