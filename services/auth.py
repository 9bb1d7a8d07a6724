"""Registration, login, email verification and password reset actions."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func, select

from models import db
from models.user import User
from schemas import (
    ForgotPasswordSchema,
    LoginSchema,
    RegisterSchema,
    ResendVerificationSchema,
    ResetPasswordSchema,
    VerifyEmailSchema,
)
from utils.request_validation import validate_payload

from . import mail, tokens
from .errors import (
    AlreadyVerified,
    EmailInUse,
    EmailNotFound,
    InvalidCredentials,
    InvalidOrExpiredToken,
    UserNotFound,
    guarded,
)

FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive a password reset link."


def get_user_by_email(email: str) -> User | None:
    """Case-insensitive lookup of a user by email."""

    return db.session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()


def _login_redirect(user: User, callback_url: str | None) -> str:
    # Only local paths are honored so the login form cannot become an open redirect.
    if callback_url and callback_url.startswith("/") and not callback_url.startswith("//"):
        return callback_url
    if user.is_admin:
        return current_app.config.get("ADMIN_LOGIN_REDIRECT", "/admin/dashboard")
    return current_app.config.get("DEFAULT_LOGIN_REDIRECT", "/dashboard")


@guarded("Failed to register.")
def register(values: dict) -> dict:
    """Create an unverified account and email a verification link.

    No session is created; the user must verify and then log in.
    """

    data = validate_payload(RegisterSchema, values)

    if get_user_by_email(data.email) is not None:
        raise EmailInUse()

    user = User(name=data.name, email=data.email)
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Registered user %s", user.id)

    verification_token = tokens.issue_verification_token(data.email)
    mail.send_verification_email(data.email, verification_token.token)

    return {"success": "Verification email sent! Please check your inbox."}


@guarded("An unexpected error occurred")
def login(values: dict, callback_url: str | None = None) -> tuple[dict, User | None]:
    """Vouch for a user's credentials.

    Returns the action result and, on success, the authenticated user so the
    caller can issue a session. Unverified accounts get a fresh verification
    email instead, and their password is never compared.
    """

    data = validate_payload(LoginSchema, values)

    user = get_user_by_email(data.email)
    if user is None or not user.email or not user.password_hash:
        raise EmailNotFound()

    if not user.is_verified:
        verification_token = tokens.issue_verification_token(user.email)
        mail.send_verification_email(user.email, verification_token.token)
        return (
            {
                "email_verification": True,
                "message": "Email verification link sent. Please check your email.",
            },
            None,
        )

    if not user.check_password(data.password):
        raise InvalidCredentials()

    return (
        {"success": "Login successful!", "redirect": _login_redirect(user, callback_url)},
        user,
    )


@guarded("Failed to verify email.")
def verify_email(token: str) -> dict:
    data = validate_payload(VerifyEmailSchema, {"token": token})

    verification_token = tokens.consume_verification_token(data.token)
    if verification_token is None:
        raise InvalidOrExpiredToken()

    user = get_user_by_email(verification_token.identifier)
    if user is None:
        # The claimed token is useless without its account; drop it.
        db.session.commit()
        raise UserNotFound()

    user.mark_verified()
    db.session.commit()
    current_app.logger.info("Verified email for user %s", user.id)
    return {"success": "Email verified successfully!"}


@guarded("Failed to send password reset email.")
def forgot_password(values: dict) -> dict:
    """Email a reset link if the account exists.

    The response is identical either way so callers cannot probe for
    registered addresses.
    """

    data = validate_payload(ForgotPasswordSchema, values)

    user = get_user_by_email(data.email)
    if user is not None:
        reset_token = tokens.issue_password_reset_token(user.email)
        mail.send_password_reset_email(user.email, reset_token.token)

    return {"success": FORGOT_PASSWORD_MESSAGE}


@guarded("Failed to reset password.")
def reset_password(values: dict, token: str | None) -> dict:
    data = validate_payload(ResetPasswordSchema, values)

    reset_token = tokens.consume_password_reset_token(token) if token else None
    if reset_token is None:
        raise InvalidOrExpiredToken()

    user = get_user_by_email(reset_token.email)
    if user is None:
        db.session.commit()
        raise UserNotFound()

    user.set_password(data.password)
    db.session.commit()
    current_app.logger.info("Password reset for user %s", user.id)
    return {"success": "Password reset successfully!"}


@guarded("Failed to send verification email.")
def resend_verification_email(values: dict) -> dict:
    data = validate_payload(ResendVerificationSchema, values)

    user = get_user_by_email(data.email)
    if user is None:
        raise UserNotFound()
    if user.is_verified:
        raise AlreadyVerified()

    verification_token = tokens.issue_verification_token(user.email)
    mail.send_verification_email(user.email, verification_token.token)
    return {"success": "Verification email sent!"}
