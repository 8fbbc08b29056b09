"""Data retention: clear password reset grants whose expiry has passed."""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from notekeeper.models import User

if TYPE_CHECKING:
    from notekeeper.core.config import Settings

logger = logging.getLogger(__name__)


def run_retention(session: Session, settings: "Settings", now: datetime | None = None) -> int:
    """
    Null out reset_token/reset_token_expiry where the grant has expired.

    Returns the number of users cleared. Idempotent: safe to run repeatedly.
    """
    if not settings.RETENTION_ENABLED:
        logger.info("Retention is disabled (RETENTION_ENABLED=false); skipping.")
        return 0

    cutoff = now or datetime.now(timezone.utc)
    cleared_count = (
        session.query(User)
        .filter(User.reset_token_expiry.is_not(None), User.reset_token_expiry < cutoff)
        .update(
            {User.reset_token: None, User.reset_token_expiry: None},
            synchronize_session=False,
        )
    )
    session.commit()

    if cleared_count > 0:
        logger.info(
            "Retention run: cutoff=%s, reset_grants_cleared=%s",
            cutoff.isoformat(),
            cleared_count,
        )
    return cleared_count
