"""Friendship Graph — request/accept protocol and accepted-friend resolution.

Invariants:
    - At most one friendships row per unordered pair (unique canonical pair)
    - request() is atomic against concurrent requests for the same pair
    - accept() moves pending -> accepted only for the addressee, under a row lock
    - friends_of() is symmetric: direction of the original request is irrelevant
    - No Friendship state is cached between calls

Design Decisions:
    - ON CONFLICT DO NOTHING RETURNING id: an empty result *is* the duplicate
      signal, no storage error codes are inspected
    - accepted_friend_ids() returns a SELECT so the aggregator can embed it in
      its single-statement read
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import FriendshipId, FriendshipStatus, UserId
from goingout.core.enforce_friendship import (
    canonical_pair, check_accept, check_friend_request,
)
from goingout.core.errors import (
    DuplicateRequestError, ErrorContext, ResourceNotFoundError,
)
from goingout.infrastructure.database import dialect_insert, transaction
from goingout.models.friendship import Friendship
from goingout.models.user import User

logger = logging.getLogger(__name__)


def accepted_friend_ids(user_id: UserId) -> Select:
    """SELECT of the ids connected to `user_id` by an accepted friendship."""
    return select(
        case(
            (Friendship.requester_id == user_id, Friendship.addressee_id),
            else_=Friendship.requester_id,
        ).label("friend_id"),
    ).where(
        Friendship.status == FriendshipStatus.ACCEPTED.value,
        or_(
            Friendship.requester_id == user_id,
            Friendship.addressee_id == user_id,
        ),
    )


class FriendshipGraph:
    """Reads and writes the friendships table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def request(self, requester_id: UserId, addressee_id: UserId) -> Friendship:
        """Create a pending request; DuplicateRequestError if the pair already has a row."""
        check_friend_request(requester_id, addressee_id)
        low, high = canonical_pair(requester_id, addressee_id)

        async with transaction(self.db):
            if await self.db.get(User, addressee_id) is None:
                raise ResourceNotFoundError("User", str(addressee_id))
            stmt = (
                dialect_insert(self.db, Friendship)
                .values(
                    id=uuid.uuid4(),
                    requester_id=requester_id,
                    addressee_id=addressee_id,
                    user_low_id=low,
                    user_high_id=high,
                    status=FriendshipStatus.PENDING.value,
                    created_at=datetime.now(timezone.utc),
                )
                .on_conflict_do_nothing(
                    index_elements=["user_low_id", "user_high_id"],
                )
                .returning(Friendship.id)
            )
            friendship_id = (await self.db.execute(stmt)).scalar_one_or_none()
            if friendship_id is None:
                raise DuplicateRequestError(
                    context=ErrorContext(user_id=str(requester_id)),
                )

        logger.info(
            "Friend request created",
            extra={"user_id": requester_id, "friendship_id": friendship_id},
        )
        return await self._load(FriendshipId(friendship_id))

    async def accept(self, friendship_id: FriendshipId, acting_user_id: UserId) -> Friendship:
        """Accept a pending request on behalf of its addressee."""
        async with transaction(self.db):
            result = await self.db.execute(
                select(Friendship)
                .where(Friendship.id == friendship_id)
                .with_for_update()
                .execution_options(populate_existing=True),
            )
            friendship = result.scalar_one_or_none()
            if friendship is None:
                raise ResourceNotFoundError("Friendship", str(friendship_id))
            check_accept(
                friendship.id, friendship.addressee_id,
                FriendshipStatus(friendship.status), acting_user_id,
            )
            friendship.status = FriendshipStatus.ACCEPTED.value
            friendship.accepted_at = datetime.now(timezone.utc)

        logger.info(
            "Friend request accepted",
            extra={"user_id": acting_user_id, "friendship_id": friendship_id},
        )
        return friendship

    async def friends_of(self, user_id: UserId) -> set[UserId]:
        result = await self.db.execute(accepted_friend_ids(user_id))
        return {UserId(friend_id) for friend_id in result.scalars().all()}

    async def list_friends(self, user_id: UserId) -> list[User]:
        """Profiles of accepted friends, ordered by name."""
        result = await self.db.execute(
            select(User)
            .where(User.id.in_(accepted_friend_ids(user_id)))
            .order_by(
                func.lower(func.coalesce(User.display_name, User.email)),
                User.id,
            ),
        )
        return list(result.scalars().all())

    async def list_incoming(self, user_id: UserId) -> list[Friendship]:
        """Pending requests addressed to `user_id`, newest first."""
        result = await self.db.execute(
            select(Friendship)
            .where(
                Friendship.addressee_id == user_id,
                Friendship.status == FriendshipStatus.PENDING.value,
            )
            .order_by(Friendship.created_at.desc(), Friendship.id),
        )
        return list(result.scalars().all())

    async def _load(self, friendship_id: FriendshipId) -> Friendship:
        result = await self.db.execute(
            select(Friendship)
            .where(Friendship.id == friendship_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one()
