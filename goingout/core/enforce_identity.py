"""Identity Rules — normalization of verified identities before sync.

Invariants:
    - Emails are compared case-insensitively and without surrounding whitespace
    - A blank email is never synced
    - Blank display names / avatar refs become None
"""

from goingout.core.domain_types import VerifiedIdentity
from goingout.core.errors import MissingFieldError


def normalize_email(email: str | None) -> str:
    value = (email or "").strip().lower()
    if not value:
        raise MissingFieldError("email")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_identity(identity: VerifiedIdentity) -> VerifiedIdentity:
    """Return a copy with normalized email and profile fields."""
    return VerifiedIdentity(
        subject=_blank_to_none(identity.subject),
        email=normalize_email(identity.email),
        display_name=_blank_to_none(identity.display_name),
        avatar_ref=_blank_to_none(identity.avatar_ref),
    )
