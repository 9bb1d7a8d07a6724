"""Profile, password and wallet actions for the signed-in user."""

from __future__ import annotations

from decimal import Decimal

from flask import current_app
from sqlalchemy import update

from models import db
from models.user import User
from models.wallet_top_up import WalletTopUp
from schemas import (
    AddFundsSchema,
    UpdatePasswordSchema,
    UpdateProfileImageSchema,
    UpdateProfileSchema,
)
from utils.request_validation import validate_payload

from .errors import IncorrectPassword, InvalidAmount, UserNotFound, guarded


def format_naira(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"₦{int(amount)}"
    return f"₦{amount:.2f}"


@guarded("Failed to update profile.")
def update_profile(user: User, values: dict) -> dict:
    data = validate_payload(UpdateProfileSchema, values)
    user.name = data.name
    db.session.commit()
    return {"success": "Profile updated successfully!"}


@guarded("Failed to update password.")
def update_password(user: User, values: dict) -> dict:
    data = validate_payload(UpdatePasswordSchema, values)

    if not user.password_hash:
        raise UserNotFound()
    if not user.check_password(data.current_password):
        raise IncorrectPassword()

    user.set_password(data.new_password)
    db.session.commit()
    return {"success": "Password updated successfully!"}


@guarded("Failed to update profile image.")
def update_profile_image(user: User, values: dict) -> dict:
    data = validate_payload(UpdateProfileImageSchema, values)
    user.image = str(data.image_url)
    db.session.commit()
    return {"success": "Profile image updated successfully!", "image": user.image}


def credit_wallet(
    user_id: str,
    amount: Decimal,
    *,
    source: str = "manual",
    reference: str | None = None,
) -> bool:
    """Atomically add ``amount`` to a wallet and record it in the ledger.

    The increment is a single ``UPDATE`` so concurrent top-ups cannot lose
    each other. Returns False when the user does not exist. The caller
    commits.
    """

    result = db.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(wallet_balance=User.wallet_balance + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    db.session.add(
        WalletTopUp(user_id=user_id, amount=amount, source=source, reference=reference)
    )
    return True


@guarded("Failed to add funds to wallet.")
def add_funds_to_wallet(user_id: str, values: dict) -> dict:
    data = validate_payload(AddFundsSchema, values)
    if data.amount <= 0:
        raise InvalidAmount()

    if not credit_wallet(user_id, data.amount):
        db.session.rollback()
        raise UserNotFound()
    db.session.commit()

    user = db.session.get(User, user_id)
    current_app.logger.info("Credited %s to wallet of user %s", data.amount, user_id)
    return {
        "success": f"{format_naira(data.amount)} added to your wallet successfully!",
        "wallet_balance": float(user.wallet_balance),
    }
