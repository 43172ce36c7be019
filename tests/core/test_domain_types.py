"""Domain Types — verifies identity wrappers, enums and context records."""

import dataclasses
from uuid import uuid4

import pytest

from goingout.core.domain_types import (
    FriendshipId, FriendshipStatus, PlanId, Scope, UserId, VenueId, Viewer,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert UserId(uid) == uid
    assert FriendshipId(uid) == uid
    assert PlanId(uid) == uid
    assert VenueId(uid) == uid


def test_scope_wraps_str():
    assert Scope("athens-ga") == "athens-ga"


def test_friendship_status_has_two_states():
    assert set(FriendshipStatus) == {
        FriendshipStatus.PENDING, FriendshipStatus.ACCEPTED,
    }
    assert FriendshipStatus("accepted") is FriendshipStatus.ACCEPTED


def test_viewer_is_immutable():
    viewer = Viewer(user_id=UserId(uuid4()))
    with pytest.raises(dataclasses.FrozenInstanceError):
        viewer.user_id = UserId(uuid4())
