from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from .models import HoleScore, Round, ShotKind

RECENT_ROUNDS_LIMIT = 5


class HoleHistory(BaseModel):
    hole_number: int = Field(serialization_alias="holeNumber")
    course_id: str = Field(serialization_alias="courseId")
    total_rounds: int = Field(default=0, serialization_alias="totalRounds")
    average_score: float = Field(default=0, serialization_alias="averageScore")
    best_score: int = Field(default=0, serialization_alias="bestScore")
    worst_score: int = Field(default=0, serialization_alias="worstScore")
    recent_rounds: List[HoleScore] = Field(
        default_factory=list, serialization_alias="recentRounds"
    )
    shot_position_outcomes: Dict[str, Dict[str, int]] = Field(
        default_factory=dict, serialization_alias="shotPositionOutcomes"
    )

    model_config = ConfigDict(populate_by_name=True)


def _completed_hole_scores(
    course_id: str, hole_number: int, rounds: Iterable[Round]
) -> list[HoleScore]:
    return [
        hole_score
        for round_ in rounds
        if round_.course_id == course_id and round_.is_complete
        for hole_score in round_.hole_scores
        if hole_score.hole_number == hole_number
    ]


def _average(scores: List[int]) -> float:
    """Mean score to one decimal, halves rounded up (4.25 -> 4.3)."""

    mean = Decimal(sum(scores)) / Decimal(len(scores))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def hole_history(
    course_id: str, hole_number: int, rounds: Iterable[Round]
) -> HoleHistory:
    hole_scores = _completed_hole_scores(course_id, hole_number, rounds)
    if not hole_scores:
        return HoleHistory(hole_number=hole_number, course_id=course_id)

    scores = [hs.total_score for hs in hole_scores]
    # sorted() is stable, so equal completedAt values keep input order.
    recent = sorted(hole_scores, key=lambda hs: hs.completed_at, reverse=True)
    history = HoleHistory(
        hole_number=hole_number,
        course_id=course_id,
        total_rounds=len(hole_scores),
        average_score=_average(scores),
        best_score=min(scores),
        worst_score=max(scores),
        recent_rounds=recent[:RECENT_ROUNDS_LIMIT],
    )
    history.shot_position_outcomes = shot_position_outcomes(history)
    return history


def shot_position_outcomes(history: HoleHistory) -> dict[str, dict[str, int]]:
    """Tally outcomes per shot position (``stroke-1``, ``putt-2`` ...)."""

    table: dict[str, dict[str, int]] = {}
    for hole_score in history.recent_rounds[:RECENT_ROUNDS_LIMIT]:
        for kind in (ShotKind.STROKE, ShotKind.PUTT):
            shots = sorted(
                (s for s in hole_score.shots if s.kind == kind),
                key=lambda s: s.timestamp,
            )
            for position, shot in enumerate(shots, start=1):
                bucket = table.setdefault(f"{kind.value}-{position}", {})
                if shot.outcome_direction is None:
                    continue
                outcome = shot.outcome_direction.value
                bucket[outcome] = bucket.get(outcome, 0) + 1
    return table


def outcome_totals(
    course_id: str, hole_number: int, rounds: Iterable[Round]
) -> dict[str, dict[str, int]]:
    """Outcome counts per shot kind over every round played on the course."""

    totals: dict[str, dict[str, int]] = {kind.value: {} for kind in ShotKind}
    for round_ in rounds:
        if round_.course_id != course_id:
            continue
        for hole_score in round_.hole_scores:
            if hole_score.hole_number != hole_number:
                continue
            for shot in hole_score.shots:
                if shot.outcome_direction is None:
                    continue
                bucket = totals[shot.kind.value]
                outcome = shot.outcome_direction.value
                bucket[outcome] = bucket.get(outcome, 0) + 1
    return totals


__all__ = [
    "RECENT_ROUNDS_LIMIT",
    "HoleHistory",
    "hole_history",
    "shot_position_outcomes",
    "outcome_totals",
]
