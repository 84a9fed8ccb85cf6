"""
Core package containing configuration, database, security, logging
and timestamp helpers.
"""
from backoffice.core.config import settings
from backoffice.core.database import Base, DbSession, get_db_session
from backoffice.core.logging import configure_logging, get_logger
from backoffice.core.security import (
    Identity,
    create_access_token,
    decode_access_token,
    identity_from_token,
)
from backoffice.core.timestamps import normalize_timestamps, to_display_time

__all__ = [
    "settings",
    "Base",
    "DbSession",
    "get_db_session",
    "configure_logging",
    "get_logger",
    "Identity",
    "create_access_token",
    "decode_access_token",
    "identity_from_token",
    "to_display_time",
    "normalize_timestamps",
]
