"""
CLI entrypoint for the reset-grant retention job. Run from cron, e.g.:

  python -m notekeeper.retention

Or hourly: 0 * * * * cd /path/to/notekeeper && .venv/bin/python -m notekeeper.retention
"""

import logging
import sys

from notekeeper.core.config import get_settings
from notekeeper.core.database import SessionLocal
from notekeeper.core.logging_config import configure_logging
from notekeeper.services.retention import run_retention

logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: clear expired password reset grants."""
    settings = get_settings()
    configure_logging(settings)
    db = SessionLocal()
    try:
        cleared = run_retention(db, settings)
        logger.info("Retention completed: reset_grants_cleared=%s", cleared)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
