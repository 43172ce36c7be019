"""SQL Venue Directory — VenueDirectory implementation over the venues table.

Invariants:
    - Read-only: never inserts, updates or deletes venues
    - Returns VenueRecord values, never ORM instances
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import VenueId, VenueRecord
from goingout.models.venue import Venue


def to_record(venue: Venue) -> VenueRecord:
    return VenueRecord(
        id=VenueId(venue.id), name=venue.name, city=venue.city,
        lat=venue.lat, lng=venue.lng,
    )


class SqlVenueDirectory:
    """Looks venues up in the local reference table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, venue_id: VenueId) -> VenueRecord | None:
        result = await self.db.execute(select(Venue).where(Venue.id == venue_id))
        venue = result.scalar_one_or_none()
        return to_record(venue) if venue else None
