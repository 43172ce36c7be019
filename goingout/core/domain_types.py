"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, FriendshipId, PlanId, VenueId wrap UUIDs — never use bare UUID in domain logic
    - Scope is a city slug (e.g. "athens-ga"), derived from the venue at write time
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and store in String columns without converters
    - Viewer is the explicit request context; core and services never look up a
      "current user" on their own
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
FriendshipId = NewType("FriendshipId", UUID)
PlanId = NewType("PlanId", UUID)
VenueId = NewType("VenueId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Scope = NewType("Scope", str)


# ─── Enums ───────────────────────────────────────────────────────

class FriendshipStatus(str, Enum):
    """Friendship lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"


# ─── Context & Records ───────────────────────────────────────────

@dataclass(frozen=True)
class Viewer:
    """The authenticated user on whose behalf a core operation runs."""
    user_id: UserId


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity already verified by the upstream provider; email is the join key."""
    email: str
    display_name: str | None = None
    avatar_ref: str | None = None
    subject: str | None = None


@dataclass(frozen=True)
class VenueRecord:
    """Read-only venue reference data as supplied by the venue directory."""
    id: VenueId
    name: str
    city: str
    lat: float | None = None
    lng: float | None = None
