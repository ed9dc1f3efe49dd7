"""SQLAlchemy ORM models for TuneBridge."""

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Hey future me, utc_now() ensures ALL timestamps are UTC! Never use datetime.now() without
# timezone - naive datetimes break comparisons as soon as servers run in different timezones.
def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, LinkedAccountModel is the DURABLE side of auth! One row per (provider, external
# account). Sessions come and go; these rows are what hydration reads to repair a session that
# is missing a provider, and what refreshed tokens are written back to.
# expires_at is EPOCH SECONDS (what OAuth sign-in layers hand us), not a DateTime.
class LinkedAccountModel(Base):
    """A provider account linked to a local user."""

    __tablename__ = "linked_accounts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    provider_account_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # OAuth tokens (SENSITIVE - consider encrypting in production)
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "provider", "provider_account_id", name="uq_linked_accounts_provider_account"
        ),
        Index("ix_linked_accounts_user_id", "user_id"),
    )


# Yo, the payload is SessionTokenState.to_dict() as-is. The shape is owned by the domain entity,
# this table just stores the blob (opaque to everything except SessionTokenState.from_dict).
class SessionModel(Base):
    """Server-side session keyed by the opaque id the browser holds."""

    __tablename__ = "sessions"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_sessions_last_accessed", "last_accessed_at"),)
