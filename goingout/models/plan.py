"""Plan ORM — a user's single active "going out tonight" choice within a city.

Invariants:
    - scope is the venue's city captured at write time
    - UNIQUE (user_id, scope): at most one active plan per user per scope
    - Superseded plans are deleted, not archived
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from goingout.db.base import Base


class Plan(Base):
    """Active plan of one user at one venue."""
    __tablename__ = "plans"
    __table_args__ = (
        UniqueConstraint("user_id", "scope", name="uq_plans_user_scope"),
        Index("ix_plans_scope_created_at", "scope", "created_at"),
        Index("ix_plans_venue_id", "venue_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    venue_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("venues.id", ondelete="CASCADE"),
        nullable=False,
    )
    scope: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
