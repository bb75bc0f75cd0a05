"""Database layer - engine, base classes and statements."""

from returns_kernel.db.base import UUID, AuthoredBase, Base, UUIDString
from returns_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "AuthoredBase",
    "UUIDString",
    "UUID",
]
