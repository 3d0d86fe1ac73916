"""Database module for the link shortener service."""
from link_shortener.db.base import (
    DatabaseHealthCheck,
    async_session_factory,
    engine,
    get_engine,
    init_models,
)
from link_shortener.db.session import SessionManager, db_transaction, get_db

__all__ = [
    "engine",
    "get_engine",
    "async_session_factory",
    "init_models",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
    "SessionManager",
]
