"""Flag accounts from the command line.

    python scripts/manage_accounts.py reset someone@example.com
    python scripts/manage_accounts.py deactivate someone@example.com
"""

import argparse
import sys
import os

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.exceptions import AppError
from app.domain.models.user import User
from app.infrastructure.database import Base, SessionLocal, engine
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

import app.domain.models.address  # noqa: F401
import app.domain.models.account_flags  # noqa: F401

ACTIONS = {
    "reset": ("mark_password_reset", "must reset their password at next login"),
    "deactivate": ("mark_inactive", "is deactivated"),
    "reactivate": ("reactivate", "is active again"),
    "grant-admin": ("grant_admin", "is now an admin"),
}


def run(action: str, email: str, db=None) -> int:
    method, outcome = ACTIONS[action]
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        users = SQLAlchemyUserRepository(db, User)
        user = users.get_by_email(email)
        if user is None:
            print(f"No account registered for {email}.")
            return 1

        getattr(users, method)(user.id)
        print(f"{email} {outcome}.")
        return 0
    except AppError as e:
        print(f"{action} failed: {e.message}")
        return 1
    finally:
        if own_session:
            db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage account flags.")
    parser.add_argument("action", choices=sorted(ACTIONS))
    parser.add_argument("email")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)
    return run(args.action, args.email)


if __name__ == "__main__":
    sys.exit(main())
