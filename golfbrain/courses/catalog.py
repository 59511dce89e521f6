"""Course creation and validation.

Numeric course configuration (pars, stroke indices, distances) comes from
free-form user input. Bad tokens are dropped and missing values are replaced
with defaults; only a missing course name is rejected.
"""

from __future__ import annotations

import re
import uuid
from typing import Callable, Iterable, List, Sequence

from .models import MAX_HOLES, Course, Hole

PAR_RANGE = (3, 5)
STROKE_INDEX_RANGE = (1, MAX_HOLES)
DISTANCE_RANGE_YARDS = (50, 600)
DEFAULT_PAR = 4


class CourseValidationError(ValueError):
    pass


class CourseNotFound(Exception):
    pass


NumberInput = str | Iterable[object] | None


def parse_number_list(raw: NumberInput, lo: int, hi: int) -> list[int]:
    """Parse whitespace separated integers, keeping only values in ``[lo, hi]``."""

    if raw is None:
        return []
    tokens: Iterable[object]
    if isinstance(raw, str):
        tokens = re.split(r"\s+", raw.strip()) if raw.strip() else []
    else:
        tokens = raw

    values: list[int] = []
    for token in tokens:
        if isinstance(token, bool):
            continue
        try:
            number = int(str(token).strip())
        except (TypeError, ValueError):
            continue
        if lo <= number <= hi:
            values.append(number)
    return values


def _unique_stroke_indices(candidates: Sequence[int], hole_count: int) -> list[int]:
    used: set[int] = set()
    result: list[int | None] = []
    for index in range(hole_count):
        value = candidates[index] if index < len(candidates) else None
        if value is None or value in used:
            result.append(None)
            continue
        used.add(value)
        result.append(value)

    free = iter(i for i in range(1, MAX_HOLES + 1) if i not in used)
    return [value if value is not None else next(free) for value in result]


def build_holes(
    pars: NumberInput = None,
    stroke_indices: NumberInput = None,
    distances: NumberInput = None,
) -> list[Hole]:
    par_values = parse_number_list(pars, *PAR_RANGE)
    index_values = parse_number_list(stroke_indices, *STROKE_INDEX_RANGE)
    distance_values = parse_number_list(distances, *DISTANCE_RANGE_YARDS)

    if not par_values:
        par_values = [DEFAULT_PAR] * MAX_HOLES
    if not index_values:
        index_values = list(range(1, len(par_values) + 1))

    hole_count = min(MAX_HOLES, max(len(par_values), len(index_values)))
    indices = _unique_stroke_indices(index_values, hole_count)

    holes: list[Hole] = []
    for offset in range(hole_count):
        distance = None
        if distance_values and offset < len(distance_values):
            distance = distance_values[offset]
        holes.append(
            Hole(
                number=offset + 1,
                par=par_values[offset] if offset < len(par_values) else DEFAULT_PAR,
                stroke_index=indices[offset],
                distance_yards=distance,
            )
        )
    return holes


def validate_course(course: Course) -> None:
    if not course.name.strip():
        raise CourseValidationError("course name must not be blank")
    if len(course.holes) > MAX_HOLES:
        raise CourseValidationError(f"a course has at most {MAX_HOLES} holes")
    numbers = [hole.number for hole in course.holes]
    if len(set(numbers)) != len(numbers):
        raise CourseValidationError("hole numbers must be unique")
    indices = [hole.stroke_index for hole in course.holes]
    if len(set(indices)) != len(indices):
        raise CourseValidationError("stroke indices must be unique per course")


def new_course(
    name: str,
    *,
    pars: NumberInput = None,
    stroke_indices: NumberInput = None,
    distances: NumberInput = None,
    now_ms: Callable[[], int],
    course_id: str | None = None,
) -> Course:
    name = (name or "").strip()
    if not name:
        raise CourseValidationError("course name must not be blank")
    course = Course(
        id=course_id or str(uuid.uuid4()),
        name=name,
        holes=build_holes(pars, stroke_indices, distances),
        created_at=now_ms(),
    )
    validate_course(course)
    return course


def updated_course(
    course: Course,
    *,
    name: str | None = None,
    pars: NumberInput = None,
    stroke_indices: NumberInput = None,
    distances: NumberInput = None,
) -> Course:
    """Return a copy of ``course`` with a new name and/or rebuilt holes.

    Holes are rebuilt only when pars or stroke indices are supplied; a rebuilt
    hole keeps the ``todaysDistance`` of the hole it replaces.
    """

    changes: dict[str, object] = {}
    if name is not None:
        cleaned = name.strip()
        if not cleaned:
            raise CourseValidationError("course name must not be blank")
        changes["name"] = cleaned

    if pars is not None or stroke_indices is not None or distances is not None:
        holes = build_holes(
            pars if pars is not None else [h.par for h in course.holes],
            stroke_indices
            if stroke_indices is not None
            else [h.stroke_index for h in course.holes],
            distances
            if distances is not None
            else [h.distance_yards for h in course.holes if h.distance_yards],
        )
        for hole in holes:
            previous = course.hole(hole.number)
            if previous is not None and previous.todays_distance is not None:
                hole.todays_distance = previous.todays_distance
        changes["holes"] = holes

    updated = course.model_copy(update=changes)
    validate_course(updated)
    return updated


def find_course(courses: List[Course], course_id: str) -> Course:
    for course in courses:
        if course.id == course_id:
            return course
    raise CourseNotFound(course_id)


__all__ = [
    "PAR_RANGE",
    "STROKE_INDEX_RANGE",
    "DISTANCE_RANGE_YARDS",
    "CourseValidationError",
    "CourseNotFound",
    "parse_number_list",
    "build_holes",
    "validate_course",
    "new_course",
    "updated_course",
    "find_course",
]
