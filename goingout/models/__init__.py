"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Plan and Friendship reference users; Plan references venues

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before
      create_all / alembic autogenerate runs
"""

from goingout.models.user import User  # noqa: F401
from goingout.models.venue import Venue  # noqa: F401
from goingout.models.friendship import Friendship  # noqa: F401
from goingout.models.plan import Plan  # noqa: F401
