"""Administrator user management and dashboard statistics.

Every action re-checks the caller's role on the loaded ``User``.
"""

from __future__ import annotations

from sqlalchemy import func, select

from models import db
from models.prompt import Prompt
from models.user import User
from models.wallet_top_up import WalletTopUp
from schemas import CreateUserSchema, UpdateUserSchema
from utils.request_validation import validate_payload

from .auth import get_user_by_email
from .errors import AdminRequired, EmailInUse, SelfDeleteForbidden, UserNotFound, guarded


def require_admin(user: User | None) -> User:
    if user is None or not user.is_admin:
        raise AdminRequired()
    return user


@guarded("Failed to fetch users.")
def list_users(actor: User | None) -> dict:
    require_admin(actor)

    counts = (
        select(Prompt.user_id, func.count(Prompt.id).label("prompts_used"))
        .group_by(Prompt.user_id)
        .subquery()
    )
    rows = db.session.execute(
        select(User, func.coalesce(counts.c.prompts_used, 0))
        .outerjoin(counts, counts.c.user_id == User.id)
        .order_by(User.created_at.desc())
    ).all()

    users = []
    for user, prompts_used in rows:
        payload = user.to_dict()
        payload["prompts_used"] = prompts_used
        users.append(payload)
    return {"users": users}


@guarded("Failed to create user.")
def create_user(actor: User | None, values: dict) -> dict:
    require_admin(actor)
    data = validate_payload(CreateUserSchema, values)

    if get_user_by_email(data.email) is not None:
        raise EmailInUse()

    user = User(name=data.name, email=data.email, role=data.role)
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()
    return {"success": "User created successfully!", "user": user.to_dict()}


@guarded("Failed to update user.")
def update_user(actor: User | None, user_id: str, values: dict) -> dict:
    require_admin(actor)
    data = validate_payload(UpdateUserSchema, values)

    user = db.session.get(User, user_id)
    if user is None:
        raise UserNotFound()

    if data.email != user.email:
        other = get_user_by_email(data.email)
        if other is not None and other.id != user.id:
            raise EmailInUse()

    user.name = data.name
    user.email = data.email
    user.role = data.role
    db.session.commit()
    return {"success": "User updated successfully!", "user": user.to_dict()}


@guarded("Failed to delete user.")
def delete_user(actor: User | None, user_id: str) -> dict:
    admin = require_admin(actor)

    user = db.session.get(User, user_id)
    if user is None:
        raise UserNotFound()
    if user.id == admin.id:
        raise SelfDeleteForbidden()

    db.session.delete(user)
    db.session.commit()
    return {"success": "User deleted successfully!"}


@guarded("Failed to fetch stats.")
def get_stats(actor: User | None) -> dict:
    require_admin(actor)

    total_users = db.session.execute(select(func.count(User.id))).scalar_one()
    total_prompts = db.session.execute(select(func.count(Prompt.id))).scalar_one()
    total_revenue = db.session.execute(
        select(func.coalesce(func.sum(WalletTopUp.amount), 0))
    ).scalar_one()
    funded_users = db.session.execute(
        select(func.count(User.id)).where(User.wallet_balance > 0)
    ).scalar_one()

    return {
        "total_users": total_users,
        "total_prompts": total_prompts,
        "total_revenue": float(total_revenue or 0),
        "funded_users": funded_users,
    }
