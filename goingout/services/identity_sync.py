"""Identity Sync — reconciles a verified identity with the local users table.

Invariants:
    - Exactly one users row per (normalized) email, also under concurrent first logins
    - Existing rows get display_name / avatar_ref overwritten on every sync;
      external_subject only when the identity carries one
    - Store unavailable -> degraded SyncResult (user_id=None), never an exception
    - Malformed identity (blank email) still raises MissingFieldError

Design Decisions:
    - INSERT ... ON CONFLICT (email) DO NOTHING RETURNING id, then UPDATE ... RETURNING id:
      the unique constraint arbitrates races, no pre-check-then-insert
    - Bounded retry when the row disappears between the two statements
    - Non-fatal by contract: identity was verified upstream, the login flow must continue
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.core.domain_types import UserId, VerifiedIdentity
from goingout.core.enforce_identity import normalize_identity
from goingout.core.errors import ConcurrencyError, DependencyUnavailableError
from goingout.infrastructure.database import dialect_insert, transaction
from goingout.models.user import User

logger = logging.getLogger(__name__)

_STORE_UNAVAILABLE = (
    OperationalError, InterfaceError, DependencyUnavailableError,
    OSError, TimeoutError,
)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a sync: the local user id, or a degraded identity without one."""
    user_id: UserId | None
    degraded: bool = False


class IdentitySync:
    """Idempotent upsert of users keyed by email."""

    def __init__(self, db: AsyncSession, max_attempts: int = 3):
        self.db = db
        self.max_attempts = max(1, max_attempts)

    async def sync(self, identity: VerifiedIdentity) -> SyncResult:
        identity = normalize_identity(identity)
        try:
            user_id = await self._upsert(identity)
        except _STORE_UNAVAILABLE as e:
            logger.warning(
                f"Identity sync skipped, store unavailable: {e}",
                extra={"error_code": "DATABASE_ERROR"},
            )
            return SyncResult(user_id=None, degraded=True)
        logger.info("Identity synced", extra={"user_id": user_id})
        return SyncResult(user_id=user_id)

    async def _upsert(self, identity: VerifiedIdentity) -> UserId:
        for attempt in range(1, self.max_attempts + 1):
            async with transaction(self.db):
                user_id = await self._insert_new(identity)
                if user_id is None:
                    user_id = await self._refresh_profile(identity)
            if user_id is not None:
                return UserId(user_id)
            logger.warning(
                "User row vanished between insert and update, retrying",
                extra={"attempt": attempt},
            )
        raise ConcurrencyError(
            f"Could not sync identity after {self.max_attempts} attempts",
        )

    async def _insert_new(self, identity: VerifiedIdentity) -> uuid.UUID | None:
        now = datetime.now(timezone.utc)
        stmt = (
            dialect_insert(self.db, User)
            .values(
                id=uuid.uuid4(),
                email=identity.email,
                external_subject=identity.subject,
                display_name=identity.display_name,
                avatar_ref=identity.avatar_ref,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["email"])
            .returning(User.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _refresh_profile(self, identity: VerifiedIdentity) -> uuid.UUID | None:
        stmt = (
            update(User)
            .where(User.email == identity.email)
            .values(
                external_subject=func.coalesce(identity.subject, User.external_subject),
                display_name=identity.display_name,
                avatar_ref=identity.avatar_ref,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
