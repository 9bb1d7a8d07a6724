"""Error taxonomy for the actions and the guard that enforces it.

Typed errors are Werkzeug HTTP exceptions carrying the user-facing message
as their description, so the application's JSON error handlers render them
as ``{"error": ...}`` without further mapping. Anything else raised inside an
action is an unexpected failure and is reported with a generic message.
"""

from __future__ import annotations

import functools
from typing import Callable, TypeVar

from flask import current_app
from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden,
    HTTPException,
    InternalServerError,
    NotFound,
)
from werkzeug.exceptions import Unauthorized as _Unauthorized

from models import db

F = TypeVar("F", bound=Callable)


class Unauthorized(_Unauthorized):
    description = "Unauthorized"


class AdminRequired(Forbidden):
    description = "Unauthorized"


class InvalidFields(BadRequest):
    """Schema rejection. ``details`` lists the offending fields."""

    description = "Invalid fields!"

    def __init__(self, details: list[dict] | None = None):
        super().__init__()
        self.details = details or []


class EmailInUse(Conflict):
    description = "Email already in use!"


class UserNotFound(NotFound):
    description = "User not found!"


class EmailNotFound(NotFound):
    description = "Email does not exist!"


class InvalidCredentials(_Unauthorized):
    description = "Invalid credentials!"


class InvalidOrExpiredToken(BadRequest):
    description = "Invalid or expired token!"


class AlreadyVerified(Conflict):
    description = "Email already verified!"


class SelfDeleteForbidden(BadRequest):
    description = "You cannot delete your own account!"


class IncorrectPassword(BadRequest):
    description = "Current password is incorrect!"


class InvalidAmount(BadRequest):
    description = "Amount must be greater than zero!"


class FreeTierExhausted(HTTPException):
    code = 402
    description = (
        "You've reached your free tier limit. Please upgrade your account to continue."
    )


class ActionFailed(InternalServerError):
    """Catch-all for unexpected data-store, mail, or API errors."""


def guarded(message: str) -> Callable[[F], F]:
    """Convert unexpected exceptions raised by an action into ``ActionFailed``.

    Typed HTTP errors pass through untouched. Everything else rolls back the
    database session, is logged with its traceback, and surfaces as
    ``message``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as exc:
                db.session.rollback()
                current_app.logger.exception("%s failed", func.__name__, exc_info=exc)
                raise ActionFailed(description=message) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
