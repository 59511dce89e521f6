"""Active round endpoints: lifecycle transitions and the open hole's shots."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from golfbrain.api.errors import translate_errors
from golfbrain.courses.models import Hole
from golfbrain.rounds.history import HoleHistory
from golfbrain.rounds.models import Lie, OutcomeDirection, PuttDistance, Round, Shot
from golfbrain.rounds.scoring import ClubStats, CumulativeEntry, RoundSummary
from golfbrain.security import require_api_key
from golfbrain.tracker import (
    GolfTrackerService,
    HoleBuffer,
    HoleData,
    TrackerSnapshot,
    get_golf_tracker_service,
)

router = APIRouter(
    prefix="/api/round", tags=["round"], dependencies=[Depends(require_api_key)]
)


class StartRoundRequest(BaseModel):
    course_id: str = Field(validation_alias=AliasChoices("course_id", "courseId"))

    model_config = ConfigDict(populate_by_name=True)


class HoleShotsRequest(BaseModel):
    strokes: Optional[List[Shot]] = None
    putts: Optional[List[Shot]] = None


class TodaysDistanceRequest(BaseModel):
    distance: Optional[int] = None


class AddStrokeRequest(BaseModel):
    club: Optional[str] = None


class OutcomeRequest(BaseModel):
    outcome: OutcomeDirection
    poor: bool = False
    add_another: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("add_another", "addAnother")
    )

    model_config = ConfigDict(populate_by_name=True)


class LieRequest(BaseModel):
    lie: Lie
    add_another: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("add_another", "addAnother")
    )

    model_config = ConfigDict(populate_by_name=True)


class PuttDistanceRequest(BaseModel):
    putt_distance: PuttDistance = Field(
        validation_alias=AliasChoices("putt_distance", "puttDistance")
    )

    model_config = ConfigDict(populate_by_name=True)


class ClubRequest(BaseModel):
    club: str


class CursorRequest(BaseModel):
    index: int


@router.get("", response_model=TrackerSnapshot)
def get_round_state(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    return service.snapshot()


@router.post("/start", response_model=Round, status_code=status.HTTP_201_CREATED)
def start_round(
    payload: StartRoundRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        return service.select_course(payload.course_id)


@router.post("/review", response_model=Round)
def review_round(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        return service.review_round()


@router.post("/return", response_model=TrackerSnapshot)
def return_to_round(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        return service.return_to_round()


@router.post("/finalize", response_model=Round)
def finalize_round(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        return service.finalize_round()


@router.get("/summary", response_model=RoundSummary)
def get_round_summary(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> RoundSummary:
    with translate_errors():
        return service.round_summary()


@router.get("/scorecard", response_model=list[CumulativeEntry])
def get_scorecard(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[CumulativeEntry]:
    with translate_errors():
        return service.cumulative_series()


@router.get("/clubs", response_model=list[ClubStats])
def get_club_breakdown(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[ClubStats]:
    with translate_errors():
        return service.club_breakdown()


@router.post("/next", response_model=TrackerSnapshot)
def next_hole(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        return service.next_hole()


@router.post("/previous", response_model=TrackerSnapshot)
def previous_hole(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        return service.previous_hole()


# Holes
@router.get("/hole", response_model=HoleBuffer)
def get_open_hole(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    snapshot = service.snapshot()
    if snapshot.open_hole is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="no hole open"
        )
    return snapshot.open_hole


@router.get("/holes/{hole_number}", response_model=HoleData)
def load_hole_data(
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleData:
    data = service.load_hole_data(hole_number)
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="no saved data for hole"
        )
    return data


@router.put("/holes/{hole_number}", response_model=Round)
def save_hole_data(
    hole_number: int,
    payload: HoleShotsRequest | None = Body(default=None),
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        if payload is None:
            return service.save_hole_data(hole_number)
        return service.save_hole_data(
            hole_number, payload.strokes or [], payload.putts or []
        )


@router.post("/holes/{hole_number}/open", response_model=HoleBuffer)
def open_hole(
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.open_hole(hole_number)


@router.post("/holes/{hole_number}/go", response_model=TrackerSnapshot)
def go_to_hole(
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        return service.go_to_hole(hole_number)


@router.post("/holes/{hole_number}/complete", response_model=TrackerSnapshot)
def complete_hole(
    hole_number: int,
    payload: HoleShotsRequest | None = Body(default=None),
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        if payload is None or (payload.strokes is None and payload.putts is None):
            return service.complete_hole(hole_number)
        return service.complete_hole(
            hole_number, payload.strokes or [], payload.putts or []
        )


@router.put("/holes/{hole_number}/todays-distance", response_model=Hole)
def update_todays_distance(
    hole_number: int,
    payload: TodaysDistanceRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Hole:
    with translate_errors():
        return service.update_todays_distance(hole_number, payload.distance)


@router.get("/holes/{hole_number}/history", response_model=HoleHistory)
def get_hole_history(
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleHistory:
    with translate_errors():
        return service.hole_history(hole_number)


# Shots in the open hole
@router.post("/shots/stroke", response_model=HoleBuffer)
def add_stroke(
    payload: AddStrokeRequest | None = Body(default=None),
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.add_stroke(club=payload.club if payload else None)


@router.post("/shots/putt", response_model=HoleBuffer)
def add_putt(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.add_putt()


@router.delete("/shots/{shot_id}", response_model=TrackerSnapshot)
def remove_shot(
    shot_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> TrackerSnapshot:
    with translate_errors():
        return service.remove_shot(shot_id)


@router.post("/shots/{shot_id}/outcome", response_model=HoleBuffer)
def select_outcome(
    shot_id: str,
    payload: OutcomeRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.select_outcome(
            shot_id, payload.outcome, poor=payload.poor, add_another=payload.add_another
        )


@router.post("/shots/{shot_id}/lie", response_model=HoleBuffer)
def set_lie(
    shot_id: str,
    payload: LieRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.set_lie(shot_id, payload.lie, add_another=payload.add_another)


@router.post("/shots/{shot_id}/putt-distance", response_model=HoleBuffer)
def set_putt_distance(
    shot_id: str,
    payload: PuttDistanceRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.set_putt_distance(shot_id, payload.putt_distance)


@router.post("/shots/{shot_id}/club", response_model=HoleBuffer)
def set_club(
    shot_id: str,
    payload: ClubRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.set_club(shot_id, payload.club)


@router.post("/cursor", response_model=HoleBuffer)
def move_cursor(
    payload: CursorRequest,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleBuffer:
    with translate_errors():
        return service.move_cursor(payload.index)


__all__ = ["router"]
