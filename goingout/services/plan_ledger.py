"""Plan Ledger — one active plan per user per city, replaced atomically.

Invariants:
    - For every (user_id, scope) the plans table holds 0 or 1 rows
    - set_plan deletes the prior plan and inserts the new one in ONE transaction,
      under a lock keyed by (user_id, scope): concurrent readers see the old plan
      or the new one, never zero or two
    - Different users never contend for the same lock key
    - A failed or cancelled set_plan leaves the previous plan untouched
    - Plans are only created or removed by their owner (user_id is always the caller's)

Design Decisions:
    - Scope derived from the venue directory at call time, not trusted from the client
    - Unique (user_id, scope) stays as a storage backstop; a violation surfaces
      as ConcurrencyError so the caller retries instead of losing the write
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import PlanId, UserId, VenueId
from goingout.core.enforce_plan import normalize_scope, plan_lock_key, resolve_scope
from goingout.core.errors import ConcurrencyError, ErrorContext, ResourceNotFoundError
from goingout.core.repository_protocols import VenueDirectory
from goingout.infrastructure.database import acquire_key_lock, transaction
from goingout.infrastructure.venue_directory import SqlVenueDirectory
from goingout.models.plan import Plan
from goingout.models.user import User
from goingout.models.venue import Venue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanView:
    """A plan joined with its user and venue."""
    plan_id: PlanId
    user_id: UserId
    user_name: str | None
    venue_id: VenueId
    venue_name: str
    city: str
    created_at: datetime


def _plan_views() -> Select:
    return (
        select(
            Plan.id, Plan.user_id, User.display_name,
            Plan.venue_id, Venue.name, Plan.scope, Plan.created_at,
        )
        .join(User, User.id == Plan.user_id)
        .join(Venue, Venue.id == Plan.venue_id)
    )


def _to_view(row) -> PlanView:
    plan_id, user_id, user_name, venue_id, venue_name, scope, created_at = row
    return PlanView(
        plan_id=PlanId(plan_id),
        user_id=UserId(user_id),
        user_name=user_name,
        venue_id=VenueId(venue_id),
        venue_name=venue_name,
        city=scope,
        created_at=created_at,
    )


class PlanLedger:
    """Owns the plans table."""

    def __init__(self, db: AsyncSession, venues: VenueDirectory | None = None):
        self.db = db
        self.venues = venues if venues is not None else SqlVenueDirectory(db)

    async def set_plan(
        self, user_id: UserId, venue_id: VenueId, requested_city: str | None = None,
    ) -> PlanView:
        """Make `venue_id` the user's only plan in the venue's city."""
        venue = await self.venues.get(venue_id)
        if venue is None:
            raise ResourceNotFoundError(
                "Venue", str(venue_id),
                context=ErrorContext(user_id=str(user_id), venue_id=str(venue_id)),
            )
        scope = resolve_scope(venue, requested_city)
        plan_id = PlanId(uuid.uuid4())

        async with transaction(self.db):
            await acquire_key_lock(self.db, plan_lock_key(user_id, scope))
            await self.db.execute(
                delete(Plan)
                .where(Plan.user_id == user_id, Plan.scope == scope)
                .execution_options(synchronize_session=False),
            )
            self.db.add(Plan(
                id=plan_id, user_id=user_id, venue_id=venue.id, scope=scope,
            ))
            try:
                await self.db.flush()
            except IntegrityError as e:
                raise ConcurrencyError(
                    "Another plan update for this user and city won the race",
                    context=ErrorContext(user_id=str(user_id), scope=scope),
                ) from e

        logger.info(
            "Plan set",
            extra={
                "user_id": user_id, "venue_id": venue.id,
                "scope": scope, "plan_id": plan_id,
            },
        )
        view = await self._view_by_id(plan_id)
        if view is None:
            # Replaced by a concurrent set_plan after our commit.
            raise ConcurrencyError(
                "Plan was replaced before it could be read back",
                context=ErrorContext(user_id=str(user_id), scope=scope),
            )
        return view

    async def clear_plan(self, user_id: UserId, scope: str | None) -> bool:
        """Remove the user's plan in `scope`; returns whether one existed."""
        scope = normalize_scope(scope)
        async with transaction(self.db):
            await acquire_key_lock(self.db, plan_lock_key(user_id, scope))
            result = await self.db.execute(
                delete(Plan)
                .where(Plan.user_id == user_id, Plan.scope == scope)
                .execution_options(synchronize_session=False),
            )
        removed = (result.rowcount or 0) > 0
        logger.info(
            "Plan cleared" if removed else "No plan to clear",
            extra={"user_id": user_id, "scope": scope},
        )
        return removed

    async def list_plans(self, scope: str | None) -> list[PlanView]:
        """All plans in `scope`, newest first."""
        scope = normalize_scope(scope)
        result = await self.db.execute(
            _plan_views()
            .where(Plan.scope == scope)
            .order_by(Plan.created_at.desc(), Plan.id),
        )
        return [_to_view(row) for row in result.all()]

    async def get_plan(self, user_id: UserId, scope: str | None) -> PlanView | None:
        scope = normalize_scope(scope)
        result = await self.db.execute(
            _plan_views().where(Plan.user_id == user_id, Plan.scope == scope),
        )
        row = result.first()
        return _to_view(row) if row else None

    async def _view_by_id(self, plan_id: PlanId) -> PlanView | None:
        result = await self.db.execute(_plan_views().where(Plan.id == plan_id))
        row = result.first()
        return _to_view(row) if row else None
