"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Venue reference data is read-only from the core's perspective
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, the SQL directory and test fakes
      satisfy it without inheriting anything
    - Async in Protocol: implementations do IO
"""

from typing import Protocol

from goingout.core.domain_types import VenueId, VenueRecord


class VenueDirectory(Protocol):
    """Contract for the external venue directory — implemented by shell."""
    async def get(self, venue_id: VenueId) -> VenueRecord | None: ...
