"""Services Layer — one class per component, each bound to a request's AsyncSession.

Invariants:
    - Services receive the acting user explicitly; no ambient "current user"
    - Writes that carry an invariant run inside infrastructure.database.transaction()

Design Decisions:
    - Rules live in core/, services only sequence IO around them
"""
