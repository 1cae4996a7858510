"""Database engine and sessions."""

from src.schoolops.core.db.engine import dispose_engine, get_engine, get_session_factory
from src.schoolops.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
]
