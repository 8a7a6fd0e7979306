"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    DATABASE_URL,
    DB_RESET,
    LOG_LEVEL,
    RANKING_POLICY,
)
from .database import build_engine, engine, get_session
from .logging import configure_logging

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "DATABASE_URL",
    "DB_RESET",
    "LOG_LEVEL",
    "RANKING_POLICY",
    "build_engine",
    "configure_logging",
    "engine",
    "get_session",
]
