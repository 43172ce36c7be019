"""Initial schema — users, venues, friendships, plans.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Constraints carrying the core invariants:
    - users.email unique (identity sync key)
    - friendships (user_low_id, user_high_id) unique + canonical order check
    - plans (user_id, scope) unique
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("external_subject", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("avatar_ref", sa.String(2048), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "venues",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("lat", sa.Float, nullable=True),
        sa.Column("lng", sa.Float, nullable=True),
    )
    op.create_index("ix_venues_city", "venues", ["city"])

    op.create_table(
        "friendships",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("requester_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("addressee_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_low_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_high_id", UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        sa.CheckConstraint("user_low_id < user_high_id", name="ck_friendships_canonical_order"),
    )
    op.create_index("ix_friendships_requester_status", "friendships", ["requester_id", "status"])
    op.create_index("ix_friendships_addressee_status", "friendships", ["addressee_id", "status"])

    op.create_table(
        "plans",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("venue_id", UUID(as_uuid=True), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("scope", sa.String(120), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "scope", name="uq_plans_user_scope"),
    )
    op.create_index("ix_plans_scope_created_at", "plans", ["scope", "created_at"])
    op.create_index("ix_plans_venue_id", "plans", ["venue_id"])


def downgrade() -> None:
    op.drop_table("plans")
    op.drop_table("friendships")
    op.drop_table("venues")
    op.drop_table("users")
