"""Venue Route — venues of a city with total and friends-only attendance.

Invariants:
    - Counts are computed for the authenticated viewer only
    - Every venue of the city is listed, zero counts included
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.api.deps import get_viewer
from goingout.core.domain_types import Viewer
from goingout.infrastructure.database import get_db
from goingout.schemas.venue import AttendanceListResponse, VenueAttendanceResponse
from goingout.services.attendance import AttendanceAggregator

router = APIRouter(prefix="/api/v1/venues", tags=["venues"])


@router.get("", response_model=AttendanceListResponse)
async def list_venue_attendance(
    city: str | None = Query(None),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    rows = await AttendanceAggregator(db).attendance(city, viewer.user_id)
    return AttendanceListResponse(
        city=city.strip(),
        venues=[
            VenueAttendanceResponse(
                id=row.venue.id,
                name=row.venue.name,
                city=row.venue.city,
                lat=row.venue.lat,
                lng=row.venue.lng,
                total_going=row.total_going,
                friends_going=row.friends_going,
            )
            for row in rows
        ],
    )
