"""JWT-backed sessions whose claims are refreshed from the user record.

The access token carries ``role``, ``wallet_balance`` and ``email_verified``
for display only. Every session read overwrites them with the current
database values; authorization always goes through the loaded ``User``.
"""

from __future__ import annotations

from flask import jsonify
from flask_jwt_extended import JWTManager, create_access_token, get_jwt_identity

from models import db
from models.user import User

from .errors import Unauthorized

REFRESHED_CLAIMS = ("role", "wallet_balance", "email_verified")


def session_claims(user: User) -> dict:
    return {
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "wallet_balance": float(user.wallet_balance or 0),
        "email_verified": user.email_verified.isoformat() if user.email_verified else None,
    }


def issue_session(user: User) -> str:
    """Return a signed access token for ``user``."""

    return create_access_token(identity=user.id, additional_claims=session_claims(user))


def refresh_session_claims(claims: dict) -> tuple[dict, User | None]:
    """Overwrite the volatile claims with the user's current values.

    A subject that no longer maps to a user leaves the claims untouched.
    """

    subject = claims.get("sub")
    user = db.session.get(User, subject) if subject else None
    if user is None:
        return dict(claims), None

    refreshed = dict(claims)
    current = session_claims(user)
    for key in REFRESHED_CLAIMS:
        refreshed[key] = current[key]
    return refreshed, user


def get_current_user() -> User | None:
    """Return the user behind the verified JWT of the current request."""

    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None
    if identity is None:
        return None
    return db.session.get(User, str(identity))


def require_user() -> User:
    user = get_current_user()
    if user is None:
        raise Unauthorized()
    return user


def register_session_callbacks(jwt: JWTManager) -> None:
    """Render JWT failures in the application's JSON error shape."""

    def _unauthorized(*_args):
        return jsonify({"error": "Unauthorized", "code": "Unauthorized"}), 401

    jwt.unauthorized_loader(_unauthorized)
    jwt.invalid_token_loader(_unauthorized)
    jwt.expired_token_loader(_unauthorized)
    jwt.revoked_token_loader(_unauthorized)
