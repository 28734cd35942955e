"""
Database ORM models, sessions and collaborator directories for Trip Share.

Importing this package registers all models on Base.metadata,
which Alembic needs for autogenerate.
"""

from tripshare.db.directory import ItemDirectory, SqlItemDirectory, SqlUserDirectory, UserDirectory
from tripshare.db.engine import get_engine, get_session_factory, session_scope
from tripshare.db.schemas.attendee import Attendee
from tripshare.db.schemas.base import Base
from tripshare.db.schemas.companion import Companion
from tripshare.db.session import atomic

__all__ = [
    "Attendee",
    "Base",
    "Companion",
    "ItemDirectory",
    "SqlItemDirectory",
    "SqlUserDirectory",
    "UserDirectory",
    "atomic",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
