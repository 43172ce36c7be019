"""Friendship, Plan & Venue Routes — HTTP status codes and payload shapes.

Invariants:
    - Friend request 201, duplicate 409, self 400, unknown addressee 404
    - Only the addressee may accept (403 otherwise, 409 when already accepted)
    - POST /plans without venue_id -> 400 MISSING_FIELD
    - GET /venues reports total and friends-only counts for the viewer
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from goingout.core.errors import ConcurrencyError
from goingout.services.plan_ledger import PlanLedger


def _as(user) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
async def pair(make_user):
    return await make_user("ana"), await make_user("bo")


# ─── Friendships ─────────────────────────────────────────────────

async def test_request_created(client, pair):
    ana, bo = pair
    res = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(bo.id)}, headers=_as(ana),
    )
    assert res.status_code == 201
    data = res.json()
    assert data["status"] == "pending"
    assert data["requester_id"] == str(ana.id)
    assert data["accepted_at"] is None


async def test_duplicate_request_is_409(client, pair):
    ana, bo = pair
    await client.post(
        "/api/v1/friendships", json={"addressee_id": str(bo.id)}, headers=_as(ana),
    )
    res = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(ana.id)}, headers=_as(bo),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_REQUEST"


async def test_self_request_is_400(client, pair):
    ana, _ = pair
    res = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(ana.id)}, headers=_as(ana),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_REQUEST"


async def test_request_to_unknown_user_is_404(client, pair):
    ana, _ = pair
    res = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(uuid4())}, headers=_as(ana),
    )
    assert res.status_code == 404


async def test_accept_flow(client, pair):
    ana, bo = pair
    created = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(bo.id)}, headers=_as(ana),
    )
    fid = created.json()["id"]

    incoming = await client.get("/api/v1/friendships/incoming", headers=_as(bo))
    assert [r["id"] for r in incoming.json()["requests"]] == [fid]

    forbidden = await client.post(f"/api/v1/friendships/{fid}/accept", headers=_as(ana))
    assert forbidden.status_code == 403

    accepted = await client.post(f"/api/v1/friendships/{fid}/accept", headers=_as(bo))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    again = await client.post(f"/api/v1/friendships/{fid}/accept", headers=_as(bo))
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_STATE"

    friends = await client.get("/api/v1/friendships/friends", headers=_as(ana))
    assert [f["id"] for f in friends.json()["friends"]] == [str(bo.id)]
    assert (await client.get("/api/v1/friendships/incoming", headers=_as(bo))).json() == {
        "requests": [],
    }


async def test_accept_unknown_friendship_is_404(client, pair):
    _, bo = pair
    res = await client.post(f"/api/v1/friendships/{uuid4()}/accept", headers=_as(bo))
    assert res.status_code == 404


# ─── Plans ───────────────────────────────────────────────────────

async def test_set_plan_and_read_back(client, pair, make_venue):
    ana, _ = pair
    venue = await make_venue("Georgia Theatre")

    res = await client.post(
        "/api/v1/plans", json={"venue_id": str(venue.id)}, headers=_as(ana),
    )
    assert res.status_code == 200
    plan = res.json()["plan"]
    assert plan["venue_name"] == "Georgia Theatre"
    assert plan["city"] == "athens-ga"
    assert plan["user_name"] == "ana"

    mine = await client.get(
        "/api/v1/plans/mine", params={"city": "athens-ga"}, headers=_as(ana),
    )
    assert mine.json()["plan"]["plan_id"] == plan["plan_id"]


async def test_set_plan_replaces_previous(client, pair, make_venue):
    ana, _ = pair
    v1, v2 = await make_venue("One"), await make_venue("Two")
    for venue in (v1, v2):
        await client.post(
            "/api/v1/plans", json={"venue_id": str(venue.id)}, headers=_as(ana),
        )

    res = await client.get(
        "/api/v1/plans", params={"city": "athens-ga"}, headers=_as(ana),
    )
    assert res.status_code == 200
    data = res.json()
    assert data["city"] == "athens-ga"
    assert [p["venue_id"] for p in data["plans"]] == [str(v2.id)]


async def test_set_plan_without_venue_is_missing_field(client, pair):
    ana, _ = pair
    res = await client.post("/api/v1/plans", json={}, headers=_as(ana))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "MISSING_FIELD"


async def test_set_plan_unknown_venue_is_404(client, pair):
    ana, _ = pair
    res = await client.post(
        "/api/v1/plans", json={"venue_id": str(uuid4())}, headers=_as(ana),
    )
    assert res.status_code == 404


async def test_set_plan_city_mismatch_is_400(client, pair, make_venue):
    ana, _ = pair
    venue = await make_venue("Away", city="atlanta-ga")
    res = await client.post(
        "/api/v1/plans",
        json={"venue_id": str(venue.id), "city": "athens-ga"},
        headers=_as(ana),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_REQUEST"


async def test_set_plan_blank_city_is_ignored(client, pair, make_venue):
    ana, _ = pair
    venue = await make_venue("Bar")
    res = await client.post(
        "/api/v1/plans",
        json={"venue_id": str(venue.id), "city": ""},
        headers=_as(ana),
    )
    assert res.status_code == 200
    assert res.json()["plan"]["city"] == "athens-ga"


async def test_list_plans_without_city_is_missing_field(client, pair):
    ana, _ = pair
    res = await client.get("/api/v1/plans", headers=_as(ana))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "MISSING_FIELD"


async def test_clear_plan_is_idempotent(client, pair, make_venue):
    ana, _ = pair
    venue = await make_venue("Bar")
    await client.post("/api/v1/plans", json={"venue_id": str(venue.id)}, headers=_as(ana))

    first = await client.delete(
        "/api/v1/plans", params={"city": "athens-ga"}, headers=_as(ana),
    )
    second = await client.delete(
        "/api/v1/plans", params={"city": "athens-ga"}, headers=_as(ana),
    )
    assert first.json() == {"cleared": True, "removed": True}
    assert second.json() == {"cleared": True, "removed": False}

    mine = await client.get(
        "/api/v1/plans/mine", params={"city": "athens-ga"}, headers=_as(ana),
    )
    assert mine.json() == {"plan": None}


async def test_clear_plan_without_city_is_missing_field(client, pair):
    ana, _ = pair
    res = await client.delete("/api/v1/plans", headers=_as(ana))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "MISSING_FIELD"


# ─── Venues ──────────────────────────────────────────────────────

async def test_venue_attendance_for_viewer(client, make_user, make_venue):
    viewer, friend, stranger = (
        await make_user("viewer"), await make_user("friend"), await make_user("stranger"),
    )
    bar, club = await make_venue("Bar"), await make_venue("Club")

    created = await client.post(
        "/api/v1/friendships", json={"addressee_id": str(friend.id)}, headers=_as(viewer),
    )
    await client.post(
        f"/api/v1/friendships/{created.json()['id']}/accept", headers=_as(friend),
    )
    for user in (friend, stranger):
        await client.post(
            "/api/v1/plans", json={"venue_id": str(bar.id)}, headers=_as(user),
        )

    res = await client.get(
        "/api/v1/venues", params={"city": "athens-ga"}, headers=_as(viewer),
    )
    assert res.status_code == 200
    data = res.json()
    assert data["city"] == "athens-ga"
    assert [
        (v["id"], v["total_going"], v["friends_going"]) for v in data["venues"]
    ] == [(str(bar.id), 2, 1), (str(club.id), 0, 0)]


async def test_venue_attendance_requires_city(client, pair):
    ana, _ = pair
    res = await client.get("/api/v1/venues", headers=_as(ana))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "MISSING_FIELD"


# ─── Error envelope ──────────────────────────────────────────────

async def test_plan_race_is_409_with_retry_after(client, pair, make_venue):
    ana, _ = pair
    venue = await make_venue("Bar")
    with patch.object(
        PlanLedger, "set_plan",
        AsyncMock(side_effect=ConcurrencyError("Another plan update won the race")),
    ):
        res = await client.post(
            "/api/v1/plans", json={"venue_id": str(venue.id)}, headers=_as(ana),
        )
    assert res.status_code == 409
    assert res.headers["retry-after"] == "1"
    assert res.json()["error"]["code"] == "CONCURRENCY_CONFLICT"
    assert res.json()["error"]["context"]["retry_after_ms"] == 250


async def test_client_errors_have_no_retry_after(client, pair):
    ana, _ = pair
    res = await client.post("/api/v1/plans", json={}, headers=_as(ana))
    assert "retry-after" not in res.headers


async def test_validation_details_name_the_field(client, pair):
    ana, _ = pair
    res = await client.post(
        "/api/v1/friendships", json={"addressee_id": "nope"}, headers=_as(ana),
    )
    assert res.status_code == 400
    fields = [d["field"] for d in res.json()["error"]["details"]]
    assert fields == ["addressee_id"]
