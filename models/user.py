"""User model definition."""

import uuid
from decimal import Decimal

from werkzeug.security import check_password_hash, generate_password_hash

from utils.clock import utcnow

from . import db


ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_ADMIN)


def _new_id() -> str:
    return str(uuid.uuid4())


class User(db.Model):
    """Represents a farmer or administrator account."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(
        db.Enum(*ROLES, name="user_role"),
        nullable=False,
        default=ROLE_USER,
        server_default=db.text("'USER'"),
    )
    image = db.Column(db.String(512), nullable=True)
    wallet_balance = db.Column(
        db.Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        server_default=db.text("0"),
    )
    email_verified = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    prompts = db.relationship(
        "Prompt",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    top_ups = db.relationship(
        "WalletTopUp",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_verified(self) -> bool:
        return self.email_verified is not None

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def mark_verified(self) -> None:
        """Record that the user proved ownership of their email address."""

        self.email_verified = utcnow()

    def to_dict(self) -> dict:
        """Serialize the user for API responses."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "image": self.image,
            "wallet_balance": float(self.wallet_balance or 0),
            "email_verified": self.email_verified.isoformat() if self.email_verified else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
