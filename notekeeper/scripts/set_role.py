"""
Change the role of an existing user, looked up by email. Used for initial admin setup:
  python -m notekeeper.scripts.set_role admin@example.com admin
"""
import argparse
import sys

from notekeeper.core.database import SessionLocal
from notekeeper.models import Role
from notekeeper.services import users


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Set a Notekeeper user's role.")
    parser.add_argument("email", help="Email of the user to update")
    parser.add_argument("role", choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = users.find_by_email(db, args.email)
        if user is None:
            print(f"No user with email '{args.email}'.", file=sys.stderr)
            return 1
        users.set_role(db, user.id, Role(args.role))
        print(f"Set role of '{user.email}' to '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
