"""Request Context — turns the upstream-verified user id into an explicit Viewer.

Invariants:
    - The auth layer in front of this service forwards the verified local user id
      in the X-User-Id header; this service never performs the handshake
    - Missing, malformed or unknown ids are NotAuthenticatedError (401)
    - Routes pass viewer.user_id into services explicitly
"""

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import UserId, Viewer
from goingout.core.errors import NotAuthenticatedError
from goingout.infrastructure.database import get_db
from goingout.models.user import User


async def get_viewer(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Viewer:
    if not x_user_id:
        raise NotAuthenticatedError()
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise NotAuthenticatedError("Malformed user id")
    if await db.get(User, user_id) is None:
        raise NotAuthenticatedError("User not found (identity not synced)")
    return Viewer(user_id=UserId(user_id))
