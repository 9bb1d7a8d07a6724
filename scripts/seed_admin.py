"""Create or promote the administrator account."""

import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from models.user import ROLE_ADMIN, User  # noqa: E402
from services.auth import get_user_by_email  # noqa: E402

DEFAULT_ADMIN_EMAIL = "admin@ccsafarmai.com"
DEFAULT_ADMIN_NAME = "CCSA Admin"


def seed_admin(email: str, password: str, name: str = DEFAULT_ADMIN_NAME) -> str:
    """Ensure a verified ADMIN account exists for ``email``; return what happened."""

    email = email.strip().lower()
    admin = get_user_by_email(email)
    if admin is None:
        admin = User(email=email, name=name)
        db.session.add(admin)
        action = "created"
    else:
        action = "updated"

    admin.role = ROLE_ADMIN
    if admin.email_verified is None:
        admin.mark_verified()
    admin.set_password(password)
    db.session.commit()
    return action


def main() -> None:
    email = os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        raise SystemExit("ADMIN_PASSWORD must be set.")

    app = create_app()
    with app.app_context():
        db.create_all()
        action = seed_admin(email, password)
        app.logger.info("Admin user %s: %s", action, email)
        print(f"Admin user {action}: {email}")


if __name__ == "__main__":
    main()
