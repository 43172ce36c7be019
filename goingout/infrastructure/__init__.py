"""Infrastructure Layer — database access and cross-cutting concerns.

Invariants:
    - Infrastructure never decides domain rules (core/ does)
    - All storage errors mapped to core/errors.py types at the session boundary
"""
