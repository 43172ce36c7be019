"""Friendship ORM — directed request edge with a status, unique per unordered pair.

Invariants:
    - (user_low_id, user_high_id) is the canonical ordering of the two participants
    - UNIQUE (user_low_id, user_high_id): at most one row per pair, any direction, any status
    - CHECK user_low_id < user_high_id: the ordering cannot be written wrong
    - requester_id / addressee_id keep the direction of the original request
    - status is one of FriendshipStatus values

Design Decisions:
    - Canonical columns alongside requester/addressee: the constraint enforces
      symmetry, direction is still available for the accept rule
    - accepted_at nullable: set once on the pending -> accepted transition
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from goingout.core.domain_types import FriendshipStatus
from goingout.db.base import Base


class Friendship(Base):
    """Friend request / friendship between two users."""
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint(
            "user_low_id", "user_high_id", name="uq_friendships_pair",
        ),
        CheckConstraint(
            "user_low_id < user_high_id", name="ck_friendships_canonical_order",
        ),
        Index("ix_friendships_requester_status", "requester_id", "status"),
        Index("ix_friendships_addressee_status", "addressee_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    addressee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_low_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    user_high_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FriendshipStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
