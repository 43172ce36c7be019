"""Identity Schemas — verified identity handed over by the upstream auth layer.

Invariants:
    - email is stripped, lower-cased and must contain "@"
    - subject, display_name, avatar_ref optional; blank strings become None downstream
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class IdentitySyncRequest(BaseModel):
    """Already-verified identity: email, display profile and optional provider subject."""
    email: str = Field(min_length=3, max_length=320)
    subject: str | None = Field(None, max_length=255)
    display_name: str | None = Field(None, max_length=255)
    avatar_ref: str | None = Field(None, max_length=2048)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class IdentitySyncResponse(BaseModel):
    """user_id is None when the store was unavailable (degraded identity)."""
    user_id: UUID | None
    degraded: bool = False
