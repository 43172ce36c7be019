"""Friendship Rules — canonical pair ordering and the request/accept protocol.

Invariants:
    - canonical_pair(a, b) == canonical_pair(b, a); smaller UUID always first
    - A user can never befriend themselves
    - Only transitions listed in ALLOWED_TRANSITIONS are legal
    - Only the addressee may accept a pending request
    - Pure: functions raise typed errors or return values, never touch storage

Design Decisions:
    - The (low, high) ordering is what the storage unique constraint is keyed on,
      so symmetry is enforced by the constraint itself
    - Transition table instead of if-chains: reject/unfriend become new entries
"""

from uuid import UUID

from goingout.core.domain_types import FriendshipStatus, UserId
from goingout.core.errors import (
    ErrorContext, InvalidRequestError, InvalidStateError, NotAuthorizedError,
)


ALLOWED_TRANSITIONS: dict[FriendshipStatus, frozenset[FriendshipStatus]] = {
    FriendshipStatus.PENDING: frozenset({FriendshipStatus.ACCEPTED}),
    FriendshipStatus.ACCEPTED: frozenset(),
}


def canonical_pair(user_a: UUID, user_b: UUID) -> tuple[UUID, UUID]:
    """Order a pair of user ids so the smaller one comes first."""
    if user_a.int <= user_b.int:
        return user_a, user_b
    return user_b, user_a


def check_friend_request(requester_id: UserId, addressee_id: UserId) -> None:
    """Reject requests that can never be valid, regardless of stored state."""
    if requester_id == addressee_id:
        raise InvalidRequestError(
            "Cannot send a friend request to yourself",
            field="addressee_id",
            context=ErrorContext(user_id=str(requester_id)),
        )


def check_transition(
    current: FriendshipStatus, target: FriendshipStatus, friendship_id: UUID,
) -> None:
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidStateError(
            f"Friendship cannot move from {current.value} to {target.value}",
            context=ErrorContext(friendship_id=str(friendship_id)),
        )


def check_accept(
    friendship_id: UUID,
    addressee_id: UUID,
    status: FriendshipStatus,
    acting_user_id: UserId,
) -> None:
    """Validate an accept action: addressee only, pending only."""
    if acting_user_id != addressee_id:
        raise NotAuthorizedError(
            "Only the addressee can accept this friend request",
            context=ErrorContext(
                user_id=str(acting_user_id), friendship_id=str(friendship_id),
            ),
        )
    check_transition(status, FriendshipStatus.ACCEPTED, friendship_id)
