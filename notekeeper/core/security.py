"""Password hashing, session token issue/verify, and reset-token generation."""

import base64
import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from notekeeper.core.config import Settings

logger = logging.getLogger(__name__)

# Bcrypt cost when no settings are at hand (scripts); the app uses BCRYPT_ROUNDS.
BCRYPT_ROUNDS = 10

# Min lengths for signup validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 6

RESET_TOKEN_BYTES = 32
OAUTH_STATE_EXPIRE_MINUTES = 10
OAUTH_STATE_PURPOSE = "oauth_state"


def _prehash(plain_password: str) -> bytes:
    # bcrypt reads at most 72 bytes; a fixed-size digest keeps every character significant.
    digest = hashlib.sha256(plain_password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    return bcrypt.hashpw(_prehash(plain_password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    try:
        return bcrypt.checkpw(_prehash(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def unusable_password_hash(rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash of a random secret nobody knows; used for accounts created through OAuth."""
    return hash_password(secrets.token_urlsafe(32), rounds=rounds)


def create_access_token(user_id: str, settings: Settings, now: datetime | None = None) -> str:
    """Create a signed session token with sub (user id), iat and exp."""
    issued_at = now or datetime.now(UTC)
    expire = issued_at + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def _decode(token: str, settings: Settings, required: list[str]) -> dict[str, Any] | None:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": required},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Token rejected", extra={"reason": "expired"})
    except jwt.InvalidSignatureError:
        logger.info("Token rejected", extra={"reason": "bad_signature"})
    except jwt.PyJWTError as e:
        logger.info("Token rejected", extra={"reason": type(e).__name__})
    return None


def verify_access_token(token: str, settings: Settings) -> str | None:
    """
    Return the user id a session token was issued for, or None when it is invalid.

    Signature and expiry failures are not distinguished for the caller.
    """
    payload = _decode(token, settings, ["sub", "iat", "exp"])
    if payload is None:
        return None
    if payload.get("purpose"):
        logger.info("Token rejected", extra={"reason": "wrong_purpose"})
        return None
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        logger.info("Token rejected", extra={"reason": "bad_subject"})
        return None
    return sub


def create_oauth_state(settings: Settings) -> str:
    """Short-lived signed value sent as the OAuth `state` parameter (CSRF guard)."""
    now = datetime.now(UTC)
    payload = {
        "purpose": OAUTH_STATE_PURPOSE,
        "nonce": secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + timedelta(minutes=OAUTH_STATE_EXPIRE_MINUTES),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_oauth_state(state: str | None, settings: Settings) -> bool:
    if not state:
        return False
    payload = _decode(state, settings, ["purpose", "exp"])
    return payload is not None and payload.get("purpose") == OAUTH_STATE_PURPOSE


def generate_reset_token() -> str:
    """Cryptographically random 32-byte token, hex-encoded."""
    return secrets.token_hex(RESET_TOKEN_BYTES)
