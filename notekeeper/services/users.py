"""Credential store: user lookups and writes that enforce the uniqueness rules."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notekeeper.core.errors import ConflictError, NotFoundError, UnexpectedError
from notekeeper.models import Role, User

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User already exists"


def find_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def find_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def find_by_username_or_email(db: Session, username: str, email: str) -> User | None:
    return (
        db.query(User)
        .filter(or_(User.email == email.strip().lower(), User.username == username))
        .first()
    )


def save(db: Session, user: User) -> User:
    """
    Commit a new or modified user and refresh it.

    A uniqueness violation at the storage layer (e.g. a concurrent signup or
    OAuth callback) is rolled back and raised as ConflictError.
    Any other storage failure is rolled back and raised as UnexpectedError.
    """
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(
            "User write rejected by uniqueness constraint",
            extra={"error": str(e.orig)[:200]},
        )
        raise ConflictError(USER_EXISTS_MESSAGE) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise UnexpectedError(e) from e
    db.refresh(user)
    return user


def create(
    db: Session,
    *,
    username: str,
    email: str,
    password_hash: str,
    role: Role = Role.USER,
    google_id: str | None = None,
) -> User:
    user = User(
        username=username,
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role.value,
        google_id=google_id,
    )
    return save(db, user)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at, User.id).all()


def set_role(db: Session, user_id: str, role: Role) -> User:
    """Change a user's role. Raises NotFoundError for an unknown id."""
    user = find_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.role = role.value
    return save(db, user)
