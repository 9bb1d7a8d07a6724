"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .tokens import PasswordResetToken, VerificationToken  # noqa: E402,F401
from .prompt import Prompt  # noqa: E402,F401
from .wallet_top_up import WalletTopUp  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "VerificationToken",
    "PasswordResetToken",
    "Prompt",
    "WalletTopUp",
]
