"""Attendance Aggregator — per-venue total and friends-only attendance for a city.

Invariants:
    - Pure read: no writes, no locks, no side effects
    - Both counts come from ONE statement, hence one snapshot: friends_going <= total_going
    - Every venue of the city is present, zero counts included (left joins)
    - Ordered by venue name, then venue id
    - Counts are of DISTINCT users

Design Decisions:
    - Friends resolved by embedding accepted_friend_ids() as a subquery instead of
      a second round trip, which would open a window between the two counts
"""

import logging
from dataclasses import dataclass

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import UserId, VenueRecord
from goingout.core.enforce_plan import normalize_scope
from goingout.infrastructure.venue_directory import to_record
from goingout.models.plan import Plan
from goingout.models.venue import Venue
from goingout.services.friendship_graph import accepted_friend_ids

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueAttendance:
    venue: VenueRecord
    total_going: int
    friends_going: int


class AttendanceAggregator:
    """Viewer-parameterized attendance read."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def attendance(self, scope: str | None, viewer_id: UserId) -> list[VenueAttendance]:
        scope = normalize_scope(scope)

        total = (
            select(
                Plan.venue_id.label("venue_id"),
                func.count(distinct(Plan.user_id)).label("total_going"),
            )
            .group_by(Plan.venue_id)
            .subquery("total")
        )
        friends = (
            select(
                Plan.venue_id.label("venue_id"),
                func.count(distinct(Plan.user_id)).label("friends_going"),
            )
            .where(Plan.user_id.in_(accepted_friend_ids(viewer_id)))
            .group_by(Plan.venue_id)
            .subquery("friends")
        )
        stmt = (
            select(
                Venue,
                func.coalesce(total.c.total_going, 0),
                func.coalesce(friends.c.friends_going, 0),
            )
            .outerjoin(total, total.c.venue_id == Venue.id)
            .outerjoin(friends, friends.c.venue_id == Venue.id)
            .where(Venue.city == scope)
            .order_by(Venue.name.asc(), Venue.id.asc())
        )

        result = await self.db.execute(stmt)
        rows = [
            VenueAttendance(
                venue=to_record(venue),
                total_going=int(total_going),
                friends_going=int(friends_going),
            )
            for venue, total_going, friends_going in result.all()
        ]
        logger.debug(
            f"Attendance computed for {len(rows)} venues",
            extra={"scope": scope, "user_id": viewer_id},
        )
        return rows
