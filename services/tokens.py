"""Issue and consume single-use verification and password reset tokens."""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import TypeVar

from flask import current_app
from sqlalchemy import delete

from models import db
from models.tokens import PasswordResetToken, VerificationToken
from utils.clock import utcnow

DEFAULT_TOKEN_TTL_SECONDS = 3600

TokenT = TypeVar("TokenT", VerificationToken, PasswordResetToken)


def _token_ttl() -> timedelta:
    seconds = int(current_app.config.get("TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS))
    return timedelta(seconds=seconds)


def _new_token_value() -> str:
    return str(uuid.uuid4())


def issue_verification_token(email: str) -> VerificationToken:
    """Replace any verification token for ``email`` with a fresh one."""

    db.session.execute(delete(VerificationToken).where(VerificationToken.identifier == email))
    token = VerificationToken(
        identifier=email,
        token=_new_token_value(),
        expires=utcnow() + _token_ttl(),
    )
    db.session.add(token)
    db.session.commit()
    return token


def issue_password_reset_token(email: str) -> PasswordResetToken:
    """Replace any password reset token for ``email`` with a fresh one."""

    db.session.execute(delete(PasswordResetToken).where(PasswordResetToken.email == email))
    token = PasswordResetToken(
        email=email,
        token=_new_token_value(),
        expires=utcnow() + _token_ttl(),
    )
    db.session.add(token)
    db.session.commit()
    return token


def _claim(model: type[TokenT], value: str) -> TokenT | None:
    row = db.session.execute(
        db.select(model).where(model.token == value)
    ).scalar_one_or_none()
    if row is None:
        return None

    now = utcnow()
    if row.is_expired(now):
        db.session.delete(row)
        db.session.commit()
        return None

    # The conditional delete is the claim: of two concurrent consumers only
    # one removes the row. It stays uncommitted so the caller's effect and the
    # deletion land in the same transaction.
    result = db.session.execute(
        delete(model)
        .where(model.id == row.id, model.expires >= now)
        .execution_options(synchronize_session=False)
    )
    db.session.expunge(row)
    if result.rowcount != 1:
        return None
    return row


def consume_verification_token(token: str) -> VerificationToken | None:
    """Claim a live verification token, or return ``None``.

    Unknown tokens yield ``None``. Expired tokens are deleted and yield
    ``None``. A live token is deleted within the current transaction and
    returned detached; the caller commits.
    """

    return _claim(VerificationToken, token)


def consume_password_reset_token(token: str) -> PasswordResetToken | None:
    """Claim a live password reset token, or return ``None``."""

    return _claim(PasswordResetToken, token)
