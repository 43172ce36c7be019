"""Identity Route — called by the auth layer after every successful login.

Invariants:
    - Never fails because the store is down: returns degraded=true, user_id=null
    - Same email + same profile twice -> same user_id
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.config import get_settings
from goingout.core.domain_types import VerifiedIdentity
from goingout.infrastructure.database import get_db
from goingout.schemas.identity import IdentitySyncRequest, IdentitySyncResponse
from goingout.services.identity_sync import IdentitySync

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/identity", tags=["identity"])


@router.post("/sync", response_model=IdentitySyncResponse)
async def sync_identity(
    body: IdentitySyncRequest, db: AsyncSession = Depends(get_db),
):
    """Create or refresh the local user for a verified identity."""
    service = IdentitySync(
        db, max_attempts=get_settings().identity_sync_max_attempts,
    )
    result = await service.sync(VerifiedIdentity(
        subject=body.subject,
        email=body.email,
        display_name=body.display_name,
        avatar_ref=body.avatar_ref,
    ))
    return IdentitySyncResponse(user_id=result.user_id, degraded=result.degraded)
