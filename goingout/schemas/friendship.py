"""Friendship Schemas — request/accept payloads and friend listings."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from goingout.core.domain_types import FriendshipStatus


class FriendRequestCreate(BaseModel):
    addressee_id: UUID


class FriendshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    requester_id: UUID
    addressee_id: UUID
    status: FriendshipStatus
    created_at: datetime
    accepted_at: datetime | None = None


class FriendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str | None = None
    avatar_ref: str | None = None


class FriendListResponse(BaseModel):
    friends: list[FriendResponse]


class IncomingRequestsResponse(BaseModel):
    requests: list[FriendshipResponse]
