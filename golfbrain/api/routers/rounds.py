from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from golfbrain.api.errors import translate_errors
from golfbrain.rounds.models import Round
from golfbrain.rounds.scoring import ClubStats, CumulativeEntry, RoundSummary
from golfbrain.security import require_api_key
from golfbrain.tracker import GolfTrackerService, get_golf_tracker_service

router = APIRouter(
    prefix="/api/rounds", tags=["rounds"], dependencies=[Depends(require_api_key)]
)

logger = logging.getLogger(__name__)


class DeletedOut(BaseModel):
    deleted: bool


@router.get("", response_model=list[Round])
def list_rounds(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[Round]:
    return service.list_rounds()


@router.get("/{round_id}", response_model=Round)
def get_round(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        return service.get_round(round_id)


@router.delete("/{round_id}", response_model=DeletedOut)
def delete_round(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> DeletedOut:
    deleted = service.delete_round(round_id)
    if not deleted:
        logger.info("delete of unknown round ignored", extra={"round_id": round_id})
    return DeletedOut(deleted=deleted)


@router.post("/{round_id}/edit", response_model=Round)
def edit_past_round(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Round:
    with translate_errors():
        return service.edit_past_round(round_id)


@router.get("/{round_id}/summary", response_model=RoundSummary)
def get_round_summary(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> RoundSummary:
    with translate_errors():
        return service.round_summary(round_id)


@router.get("/{round_id}/scorecard", response_model=list[CumulativeEntry])
def get_scorecard(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[CumulativeEntry]:
    with translate_errors():
        return service.cumulative_series(round_id)


@router.get("/{round_id}/clubs", response_model=list[ClubStats])
def get_club_breakdown(
    round_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[ClubStats]:
    with translate_errors():
        return service.club_breakdown(round_id)


__all__ = ["router"]
