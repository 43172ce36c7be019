"""Plan Schemas — set/clear/list payloads for the plan ledger.

Invariants:
    - PlanCreate fields are optional at the schema level so a missing venue_id
      is reported as MISSING_FIELD by the route, like a blank city
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PlanCreate(BaseModel):
    venue_id: UUID | None = None
    city: str | None = Field(None, max_length=120)


class PlanResponse(BaseModel):
    """Echoed plan: who, where, when."""
    model_config = ConfigDict(from_attributes=True)

    plan_id: UUID
    user_id: UUID
    user_name: str | None = None
    venue_id: UUID
    venue_name: str
    city: str
    created_at: datetime


class PlanEnvelope(BaseModel):
    plan: PlanResponse | None


class PlanListResponse(BaseModel):
    city: str
    plans: list[PlanResponse]


class ClearPlanResponse(BaseModel):
    cleared: bool = True
    removed: bool
