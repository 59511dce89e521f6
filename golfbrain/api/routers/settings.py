from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from golfbrain.api.errors import translate_errors
from golfbrain.bag.models import Settings
from golfbrain.security import require_api_key
from golfbrain.tracker import (
    GolfTrackerService,
    TrackerSnapshot,
    get_golf_tracker_service,
)

router = APIRouter(
    prefix="/api/settings", tags=["settings"], dependencies=[Depends(require_api_key)]
)


class HandicapIn(BaseModel):
    # Raw user input; coerced to 0..54 or cleared, never rejected.
    handicap: Any = None


@router.get("", response_model=Settings)
def get_settings(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Settings:
    return service.settings


@router.put("", response_model=Settings)
def update_settings(
    changes: Dict[str, Any] = Body(...),
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Settings:
    with translate_errors():
        return service.update_settings(changes)


@router.put("/handicap", response_model=Settings)
def set_handicap(
    payload: HandicapIn,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Settings:
    return service.set_handicap(payload.handicap)


@router.post("/reset", response_model=TrackerSnapshot)
def reset_data(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    return service.reset_data()


__all__ = ["router"]
