"""
Identity resolution for local and federated logins, plus signup and reset grants.

Both login paths go through resolve_identity(), which takes one of two
credential variants and returns the local User the caller is acting as.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from notekeeper.core.config import Settings
from notekeeper.core.errors import AuthenticationError, ConflictError, ValidationError
from notekeeper.core.security import (
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    generate_reset_token,
    hash_password,
    unusable_password_hash,
    verify_password,
)
from notekeeper.models import Role, User
from notekeeper.services import users

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class LocalCredentials:
    """Email + password submitted to the login endpoint (email already normalized)."""

    email: str
    password: str


@dataclass(frozen=True)
class FederatedProfile:
    """Profile resolved by an external identity provider."""

    provider_id: str
    display_name: str
    emails: list[str] = field(default_factory=list)

    @property
    def primary_email(self) -> str | None:
        return self.emails[0].strip().lower() if self.emails else None


Credentials = LocalCredentials | FederatedProfile


def derive_username(display_name: str) -> str:
    """Username for an account created from a provider profile: whitespace removed, lower-cased."""
    return _WHITESPACE.sub("", display_name or "").lower()


def signup(db: Session, username: str, email: str, password: str, settings: Settings) -> User:
    """Create a standard-role account. Raises ConflictError if email or username is taken."""
    if users.find_by_username_or_email(db, username, email) is not None:
        raise ConflictError(users.USER_EXISTS_MESSAGE)
    user = users.create(
        db,
        username=username,
        email=email,
        password_hash=hash_password(password, rounds=settings.BCRYPT_ROUNDS),
    )
    logger.info("User signed up", extra={"user_id": user.id})
    return user


def resolve_identity(db: Session, credentials: Credentials, settings: Settings) -> User:
    """Return the user the credentials identify, linking or creating for federated profiles."""
    if isinstance(credentials, LocalCredentials):
        return _resolve_local(db, credentials)
    if isinstance(credentials, FederatedProfile):
        return _resolve_federated(db, credentials, settings)
    raise TypeError(f"Unsupported credentials: {type(credentials).__name__}")


def _resolve_local(db: Session, credentials: LocalCredentials) -> User:
    user = users.find_by_email(db, credentials.email)
    if user is None or not verify_password(credentials.password, user.password_hash):
        # Same error either way; do not reveal which half was wrong.
        logger.info("Local login failed")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
    logger.info("Local login succeeded", extra={"user_id": user.id})
    return user


def _resolve_federated(db: Session, profile: FederatedProfile, settings: Settings) -> User:
    email = profile.primary_email
    if not email:
        raise ValidationError.for_field("email", "Identity provider returned no verified email")
    if not profile.provider_id:
        raise ValidationError.for_field("provider_id", "Identity provider returned no account id")

    user = users.find_by_email(db, email)
    if user is not None:
        if user.google_id is None:
            user.google_id = profile.provider_id
            user = users.save(db, user)
            logger.info("Linked Google account to existing user", extra={"user_id": user.id})
            return user
        if user.google_id != profile.provider_id:
            logger.warning(
                "Google account does not match the one linked to this email",
                extra={"user_id": user.id},
            )
            raise ConflictError("Account is linked to a different Google identity")
        return user

    username = derive_username(profile.display_name)
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise ValidationError.for_field(
            "username",
            f"Derived username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters long",
        )
    if users.find_by_username(db, username) is not None:
        raise ConflictError("Username already taken")

    user = users.create(
        db,
        username=username,
        email=email,
        password_hash=unusable_password_hash(rounds=settings.BCRYPT_ROUNDS),
        role=Role.USER,
        google_id=profile.provider_id,
    )
    logger.info("Created user from Google profile", extra={"user_id": user.id})
    return user


def request_password_reset(
    db: Session, email: str, settings: Settings, now: datetime | None = None
) -> str | None:
    """
    Store a fresh reset grant for the account with this email, if there is one.

    Returns the token (for delivery through an external channel) or None when
    no account exists. Callers must answer the same way in both cases.
    """
    user = users.find_by_email(db, email)
    if user is None:
        return None
    issued_at = now or datetime.now(UTC)
    token = generate_reset_token()
    user.reset_token = token
    user.reset_token_expiry = issued_at + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    users.save(db, user)
    logger.info("Password reset grant issued", extra={"user_id": user.id})
    return token
