"""Plan Rules — scope derivation and the per-(user, scope) lock key.

Invariants:
    - A plan's scope is the venue's city at write time (never client-supplied)
    - A client-supplied city, when present and non-blank, must match the venue's city
    - plan_lock_key is deterministic across processes and hosts
    - plan_lock_key fits a signed 64-bit integer (PostgreSQL advisory lock key)

Design Decisions:
    - blake2b over hash(): Python's str hash is salted per process, the lock
      key must be identical in every worker
"""

import hashlib
from uuid import UUID

from goingout.core.domain_types import Scope, VenueRecord
from goingout.core.errors import ErrorContext, InvalidRequestError, MissingFieldError


def normalize_scope(city: str | None) -> Scope:
    """Strip a city slug; blank or missing raises MissingFieldError('city')."""
    value = (city or "").strip()
    if not value:
        raise MissingFieldError("city")
    return Scope(value)


def resolve_scope(venue: VenueRecord, requested_city: str | None = None) -> Scope:
    """Derive the plan scope from the venue, cross-checking an optional client city."""
    scope = normalize_scope(venue.city)
    if requested_city and requested_city.strip() and requested_city.strip() != scope:
        raise InvalidRequestError(
            f"Venue '{venue.id}' is not in city '{requested_city}'",
            field="city",
            context=ErrorContext(venue_id=str(venue.id), scope=scope),
        )
    return scope


def plan_lock_key(user_id: UUID, scope: str) -> int:
    """Stable signed 64-bit key for locking one user's plan within one scope."""
    digest = hashlib.blake2b(
        f"plan:{user_id}:{scope}".encode("utf-8"), digest_size=8,
    ).digest()
    return int.from_bytes(digest, "big", signed=True)
