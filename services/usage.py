"""Free-tier usage gate for the AI features.

A user may run an AI request when they are an admin, have stored fewer than
``FREE_TIER_PROMPT_LIMIT`` prompts over the account's lifetime, or hold a
positive wallet balance. The balance only gates; it is never debited.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func, select

from models import db
from models.prompt import Prompt
from models.user import User

DEFAULT_FREE_TIER_PROMPT_LIMIT = 3


def free_tier_limit() -> int:
    return int(current_app.config.get("FREE_TIER_PROMPT_LIMIT", DEFAULT_FREE_TIER_PROMPT_LIMIT))


def prompt_count(user_id: str) -> int:
    return db.session.execute(
        select(func.count(Prompt.id)).where(Prompt.user_id == user_id)
    ).scalar_one()


def is_allowed(user: User, count: int) -> bool:
    if user.is_admin:
        return True
    if count < free_tier_limit():
        return True
    return (user.wallet_balance or 0) > 0


def can_use_ai_feature(user_id: str) -> bool:
    user = db.session.get(User, user_id)
    if user is None:
        return False
    return is_allowed(user, prompt_count(user_id))


def lock_user(user_id: str) -> User | None:
    """Load the user with a row lock held until the transaction ends."""

    statement = (
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.session.execute(statement).scalar_one_or_none()


def usage_summary(user: User) -> dict:
    count = prompt_count(user.id)
    limit = free_tier_limit()
    return {
        "prompt_count": count,
        "free_tier_limit": limit,
        "free_prompts_remaining": max(limit - count, 0),
        "wallet_balance": float(user.wallet_balance or 0),
        "can_use_ai": is_allowed(user, count),
    }
