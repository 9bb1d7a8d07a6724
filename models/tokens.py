"""Single-use email verification and password reset tokens."""

from datetime import datetime

from . import db


class VerificationToken(db.Model):
    """Proof of email ownership; at most one live row per identifier."""

    __tablename__ = "verification_tokens"

    id = db.Column(db.Integer, primary_key=True)
    identifier = db.Column(db.String(255), nullable=False, index=True)
    token = db.Column(db.String(64), nullable=False, unique=True)
    expires = db.Column(db.DateTime, nullable=False)

    def is_expired(self, now: datetime) -> bool:
        return self.expires < now

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<VerificationToken {self.identifier}>"


class PasswordResetToken(db.Model):
    """Password reset capability, kept apart from verification tokens."""

    __tablename__ = "password_reset_tokens"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    token = db.Column(db.String(64), nullable=False, unique=True)
    expires = db.Column(db.DateTime, nullable=False)

    def is_expired(self, now: datetime) -> bool:
        return self.expires < now

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<PasswordResetToken {self.email}>"
