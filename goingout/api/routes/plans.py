"""Plan Routes — set, clear, list and read the viewer's plan for a city.

Invariants:
    - Plans are always written for the authenticated viewer, never for another user
    - POST without venue_id -> 400 MISSING_FIELD; DELETE without city -> 400 MISSING_FIELD
    - DELETE is idempotent (cleared=true even when there was nothing to remove)
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from goingout.api.deps import get_viewer
from goingout.core.domain_types import VenueId, Viewer
from goingout.core.errors import MissingFieldError
from goingout.infrastructure.database import get_db
from goingout.schemas.plan import (
    ClearPlanResponse, PlanCreate, PlanEnvelope, PlanListResponse, PlanResponse,
)
from goingout.services.plan_ledger import PlanLedger

router = APIRouter(prefix="/api/v1/plans", tags=["plans"])


@router.get("", response_model=PlanListResponse)
async def list_plans(
    city: str | None = Query(None),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    plans = await PlanLedger(db).list_plans(city)
    return PlanListResponse(
        city=city.strip(),
        plans=[PlanResponse(**asdict(p)) for p in plans],
    )


@router.get("/mine", response_model=PlanEnvelope)
async def get_my_plan(
    city: str | None = Query(None),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    plan = await PlanLedger(db).get_plan(viewer.user_id, city)
    return PlanEnvelope(plan=PlanResponse(**asdict(plan)) if plan else None)


@router.post("", response_model=PlanEnvelope)
async def set_plan(
    body: PlanCreate,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the viewer's single plan in the venue's city."""
    if body.venue_id is None:
        raise MissingFieldError("venue_id")
    plan = await PlanLedger(db).set_plan(
        viewer.user_id, VenueId(body.venue_id), requested_city=body.city,
    )
    return PlanEnvelope(plan=PlanResponse(**asdict(plan)))


@router.delete("", response_model=ClearPlanResponse)
async def clear_plan(
    city: str | None = Query(None),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    removed = await PlanLedger(db).clear_plan(viewer.user_id, city)
    return ClearPlanResponse(cleared=True, removed=removed)
