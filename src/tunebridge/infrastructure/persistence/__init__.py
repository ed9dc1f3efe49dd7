"""Persistence layer: async SQLAlchemy database, ORM models and repositories."""

from tunebridge.infrastructure.persistence.database import Database
from tunebridge.infrastructure.persistence.models import (
    Base,
    LinkedAccountModel,
    SessionModel,
)
from tunebridge.infrastructure.persistence.repositories import (
    DatabaseSessionStore,
    LinkedAccountRepository,
)

__all__ = [
    "Base",
    "Database",
    "DatabaseSessionStore",
    "LinkedAccountModel",
    "LinkedAccountRepository",
    "SessionModel",
]
