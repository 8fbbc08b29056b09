"""Core app configuration, database, security and errors."""

from notekeeper.core.config import Settings, get_settings
from notekeeper.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
