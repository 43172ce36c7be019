"""Venue Schemas — venues of a city with attendance counts for the viewer."""

from uuid import UUID

from pydantic import BaseModel, Field


class VenueAttendanceResponse(BaseModel):
    id: UUID
    name: str
    city: str
    lat: float | None = None
    lng: float | None = None
    total_going: int = Field(ge=0)
    friends_going: int = Field(ge=0)


class AttendanceListResponse(BaseModel):
    city: str
    venues: list[VenueAttendanceResponse]
