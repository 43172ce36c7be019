"""Friendship Routes — request, accept, and list friends / incoming requests.

Invariants:
    - The requester / acting user is always the authenticated viewer
    - Duplicate pair -> 409 DUPLICATE_REQUEST; self-request -> 400 INVALID_REQUEST
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.api.deps import get_viewer
from goingout.core.domain_types import FriendshipId, UserId, Viewer
from goingout.infrastructure.database import get_db
from goingout.schemas.friendship import (
    FriendListResponse, FriendRequestCreate, FriendResponse,
    FriendshipResponse, IncomingRequestsResponse,
)
from goingout.services.friendship_graph import FriendshipGraph

router = APIRouter(prefix="/api/v1/friendships", tags=["friendships"])


@router.post(
    "", response_model=FriendshipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_friendship(
    body: FriendRequestCreate,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    friendship = await FriendshipGraph(db).request(
        viewer.user_id, UserId(body.addressee_id),
    )
    return FriendshipResponse.model_validate(friendship)


@router.post("/{friendship_id}/accept", response_model=FriendshipResponse)
async def accept_friendship(
    friendship_id: UUID,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    friendship = await FriendshipGraph(db).accept(
        FriendshipId(friendship_id), viewer.user_id,
    )
    return FriendshipResponse.model_validate(friendship)


@router.get("/friends", response_model=FriendListResponse)
async def list_friends(
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    friends = await FriendshipGraph(db).list_friends(viewer.user_id)
    return FriendListResponse(
        friends=[FriendResponse.model_validate(f) for f in friends],
    )


@router.get("/incoming", response_model=IncomingRequestsResponse)
async def list_incoming_requests(
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    requests = await FriendshipGraph(db).list_incoming(viewer.user_id)
    return IncomingRequestsResponse(
        requests=[FriendshipResponse.model_validate(r) for r in requests],
    )
