"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    DATABASE_URL,
    DB_RESET,
    DEFAULT_NICKNAME,
    LOG_LEVEL,
    RANKING_LIMIT,
    UNSET_NICKNAME_LABEL,
)
from .database import engine, get_session
from .logging import configure_logging
from .time import utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "DATABASE_URL",
    "DB_RESET",
    "DEFAULT_NICKNAME",
    "LOG_LEVEL",
    "RANKING_LIMIT",
    "UNSET_NICKNAME_LABEL",
    "configure_logging",
    "engine",
    "get_session",
    "utcnow",
]
