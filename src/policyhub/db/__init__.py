"""Database layer: models, repositories and session management."""

from policyhub.db.config import (
    atomic,
    close_db,
    configure_database,
    get_db,
    get_engine,
    get_sessionmaker,
    init_db,
)

__all__ = [
    "atomic",
    "close_db",
    "configure_database",
    "get_db",
    "get_engine",
    "get_sessionmaker",
    "init_db",
]
