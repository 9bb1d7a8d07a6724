"""Wallet top-up ledger."""

from utils.clock import utcnow

from . import db


TOP_UP_SOURCES = ("manual", "stripe")


class WalletTopUp(db.Model):
    """Append-only record of a credit applied to a user's wallet."""

    __tablename__ = "wallet_top_ups"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    source = db.Column(
        db.Enum(*TOP_UP_SOURCES, name="wallet_top_up_source"),
        nullable=False,
        default="manual",
    )
    # Stripe checkout session id; unique so replayed webhooks credit once.
    reference = db.Column(db.String(255), nullable=True, unique=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="top_ups")
