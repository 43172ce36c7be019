"""User ORM — local record reconciled from an externally verified identity.

Invariants:
    - id is a server-assigned UUID, stable for the life of the account
    - email is unique (normalized lower-case) and is the sync key
    - display_name / avatar_ref mirror the latest sync, never edited elsewhere
    - Rows are never deleted by the core

Design Decisions:
    - external_subject stored but not unique: the email is the join key the
      rest of the system relies on
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from goingout.db.base import Base


class User(Base):
    """Application user."""
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False,
    )
    external_subject: Mapped[str | None] = mapped_column(
        String(255), nullable=True,
    )
    display_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True,
    )
    avatar_ref: Mapped[str | None] = mapped_column(
        String(2048), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
