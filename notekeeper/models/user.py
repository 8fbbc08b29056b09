"""ORM model for application users (credentials, OAuth linkage and RBAC)."""

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from notekeeper.models.base import Base, utcnow


class Role(str, enum.Enum):
    """Roles a user can hold. 'user' is the standard role."""

    USER = "user"
    ADMIN = "admin"


ROLE_VALUES = tuple(r.value for r in Role)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. google_id is set once the account is linked to Google.
    reset_token / reset_token_expiry form the pending password reset grant.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    google_id = Column(String(255), nullable=True, unique=True, index=True)
    reset_token = Column(String(128), nullable=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    notes = relationship("Note", back_populates="user", cascade="all, delete-orphan")

    def has_valid_reset_grant(self, now: datetime | None = None) -> bool:
        """True when a reset token is present and its expiry is still in the future."""
        if not self.reset_token or self.reset_token_expiry is None:
            return False
        expiry = self.reset_token_expiry
        # SQLite hands back naive datetimes; values are always written in UTC.
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return expiry > (now or datetime.now(UTC))

    @property
    def google_linked(self) -> bool:
        return self.google_id is not None
