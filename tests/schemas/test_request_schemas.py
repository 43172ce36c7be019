"""Request Schemas — boundary validation for identity and plan payloads.

Invariants:
    - Identity email normalized and must contain "@"
    - PlanCreate tolerates missing venue_id (route reports MISSING_FIELD)
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from goingout.schemas.identity import IdentitySyncRequest
from goingout.schemas.plan import PlanCreate
from goingout.schemas.venue import VenueAttendanceResponse


def test_identity_email_is_normalized():
    req = IdentitySyncRequest(subject="g|1", email="  Ana@Example.com ")
    assert req.email == "ana@example.com"


def test_identity_email_requires_at_sign():
    with pytest.raises(ValidationError):
        IdentitySyncRequest(subject="g|1", email="not-an-email")


def test_identity_profile_is_optional():
    req = IdentitySyncRequest(subject="g|1", email="a@b.co")
    assert req.display_name is None
    assert req.avatar_ref is None


def test_identity_subject_is_optional():
    req = IdentitySyncRequest(email="a@b.co", display_name="Ana")
    assert req.subject is None


def test_plan_create_allows_missing_fields():
    body = PlanCreate()
    assert body.venue_id is None
    assert body.city is None


def test_plan_create_parses_uuid():
    vid = uuid4()
    assert PlanCreate(venue_id=str(vid)).venue_id == vid


def test_attendance_counts_cannot_be_negative():
    with pytest.raises(ValidationError):
        VenueAttendanceResponse(
            id=uuid4(), name="x", city="c", total_going=-1, friends_going=0,
        )
