from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from golfbrain.api.errors import translate_errors
from golfbrain.courses.models import Course
from golfbrain.rounds.history import HoleHistory
from golfbrain.security import require_api_key
from golfbrain.tracker import GolfTrackerService, get_golf_tracker_service

router = APIRouter(
    prefix="/api/courses", tags=["courses"], dependencies=[Depends(require_api_key)]
)

# Free-form numbers: "4 4 3 5" or [4, 4, 3, 5]; bad tokens are dropped.
NumbersIn = str | List[Any] | None


class CourseIn(BaseModel):
    name: str | None = None
    pars: NumbersIn = None
    stroke_indices: NumbersIn = Field(
        default=None,
        validation_alias=AliasChoices("stroke_indices", "strokeIndices"),
    )
    distances: NumbersIn = None

    model_config = ConfigDict(populate_by_name=True)


class DeletedOut(BaseModel):
    deleted: bool


@router.get("", response_model=list[Course])
def list_courses(
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> list[Course]:
    return service.list_courses()


@router.post("", response_model=Course, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseIn,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Course:
    with translate_errors():
        return service.create_course(
            payload.name or "",
            pars=payload.pars,
            stroke_indices=payload.stroke_indices,
            distances=payload.distances,
        )


@router.get("/{course_id}", response_model=Course)
def get_course(
    course_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Course:
    with translate_errors():
        return service.get_course(course_id)


@router.put("/{course_id}", response_model=Course)
def update_course(
    course_id: str,
    payload: CourseIn,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> Course:
    with translate_errors():
        return service.update_course(
            course_id,
            name=payload.name,
            pars=payload.pars,
            stroke_indices=payload.stroke_indices,
            distances=payload.distances,
        )


@router.delete("/{course_id}", response_model=DeletedOut)
def delete_course(
    course_id: str,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> DeletedOut:
    return DeletedOut(deleted=service.delete_course(course_id))


@router.get("/{course_id}/holes/{hole_number}/history", response_model=HoleHistory)
def get_hole_history(
    course_id: str,
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> HoleHistory:
    with translate_errors():
        return service.hole_history(hole_number, course_id=course_id)


@router.get("/{course_id}/holes/{hole_number}/outcomes")
def get_outcome_totals(
    course_id: str,
    hole_number: int,
    service: GolfTrackerService = Depends(get_golf_tracker_service),
) -> dict[str, dict[str, int]]:
    with translate_errors():
        return service.outcome_totals(hole_number, course_id=course_id)


__all__ = ["router"]
