"""
Create a user (e.g. first admin). Run from project root:
  python -m notekeeper.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m notekeeper.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from notekeeper.core.config import get_settings
from notekeeper.core.database import SessionLocal
from notekeeper.core.errors import ConflictError
from notekeeper.core.security import PASSWORD_MIN_LEN, hash_password
from notekeeper.models import Role
from notekeeper.schemas.auth import normalize_email, normalize_username
from notekeeper.services import users


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Notekeeper user.")
    parser.add_argument("username", help="Username (min 3 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password (min {PASSWORD_MIN_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    try:
        username = normalize_username(args.username)
        email = normalize_email(args.email)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN:
        print(f"Password must be at least {PASSWORD_MIN_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        if users.find_by_username_or_email(db, username, email) is not None:
            print(f"User '{username}' or '{email}' already exists.", file=sys.stderr)
            return 1
        users.create(
            db,
            username=username,
            email=email,
            password_hash=hash_password(args.password, rounds=settings.BCRYPT_ROUNDS),
            role=Role(args.role),
        )
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    except ConflictError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
