from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ShotKind(str, Enum):
    STROKE = "stroke"
    PUTT = "putt"


class OutcomeDirection(str, Enum):
    GOOD = "good"
    FIRE = "fire"
    LEFT = "left"
    RIGHT = "right"
    LONG = "long"
    SHORT = "short"
    LEFT_AND_SHORT = "left-and-short"
    LEFT_AND_LONG = "left-and-long"
    RIGHT_AND_SHORT = "right-and-short"
    RIGHT_AND_LONG = "right-and-long"
    PENALTY = "penalty"


class Lie(str, Enum):
    FAIRWAY = "fairway"
    ROUGH = "rough"
    SAND = "sand"
    GREEN = "green"
    OB = "ob"
    WATER = "water"


class PuttDistance(str, Enum):
    UNDER_4FT = "<4ft"
    FT_5_TO_10 = "5-10ft"
    OVER_10FT = "10+ft"


HAZARD_LIES = frozenset({Lie.OB, Lie.WATER})

_LEGACY_STROKE_KINDS = {"iron", "shot"}


def _putt_bucket(feet: Any) -> str | None:
    try:
        value = float(feet)
    except (TypeError, ValueError):
        return None
    if value < 4:
        return PuttDistance.UNDER_4FT.value
    if value <= 10:
        return PuttDistance.FT_5_TO_10.value
    return PuttDistance.OVER_10FT.value


class Shot(BaseModel):
    id: str
    kind: ShotKind
    outcome_direction: Optional[OutcomeDirection] = Field(
        default=None, alias="outcomeDirection"
    )
    lie: Optional[Lie] = None
    putt_distance: Optional[PuttDistance] = Field(default=None, alias="puttDistance")
    club: Optional[str] = None
    timestamp: int
    poor_shot_flag: bool = Field(default=False, alias="poorShotFlag")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)

        kind = payload.pop("type", None)
        if "kind" not in payload and kind is not None:
            payload["kind"] = kind
        if payload.get("kind") in _LEGACY_STROKE_KINDS:
            payload["kind"] = ShotKind.STROKE.value

        direction = payload.pop("direction", None)
        if "outcomeDirection" not in payload and "outcome_direction" not in payload:
            if direction is not None:
                payload["outcomeDirection"] = direction
        for key in ("outcomeDirection", "outcome_direction"):
            value = payload.get(key)
            if isinstance(value, str):
                payload[key] = value.strip().replace(" ", "-")

        if "poorShot" in payload:
            legacy_flag = payload.pop("poorShot")
            payload.setdefault("poorShotFlag", bool(legacy_flag))

        feet = payload.pop("feet", None)
        if (
            payload.get("kind") == ShotKind.PUTT.value
            and not payload.get("puttDistance")
            and not payload.get("putt_distance")
            and feet is not None
        ):
            bucket = _putt_bucket(feet)
            if bucket is not None:
                payload["puttDistance"] = bucket

        if payload.get("kind") == ShotKind.PUTT.value:
            payload.pop("lie", None)
            payload.pop("club", None)
        return payload

    @property
    def is_stroke(self) -> bool:
        return self.kind == ShotKind.STROKE

    @property
    def is_putt(self) -> bool:
        return self.kind == ShotKind.PUTT


class HoleScore(BaseModel):
    hole_number: int = Field(alias="holeNumber", ge=1, le=18)
    course_id: str = Field(alias="courseId")
    shots: List[Shot] = Field(default_factory=list)
    total_score: int = Field(default=0, alias="totalScore")
    par: int
    # Gross strokes relative to par; handicap net is never stored.
    net_score: int = Field(default=0, alias="netScore")
    completed_at: int = Field(alias="completedAt")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def strokes(self) -> list[Shot]:
        return [shot for shot in self.shots if shot.is_stroke]

    @property
    def putts(self) -> list[Shot]:
        return [shot for shot in self.shots if shot.is_putt]


class Round(BaseModel):
    id: str
    course_id: str = Field(alias="courseId")
    course_name: str = Field(alias="courseName")
    hole_scores: List[HoleScore] = Field(default_factory=list, alias="holeScores")
    total_score: int = Field(default=0, alias="totalScore")
    total_par: int = Field(default=0, alias="totalPar")
    started_at: int = Field(alias="startedAt")
    completed_at: Optional[int] = Field(default=None, alias="completedAt")
    is_complete: bool = Field(default=False, alias="isComplete")

    model_config = ConfigDict(populate_by_name=True)

    def hole_score(self, hole_number: int) -> HoleScore | None:
        for hole_score in self.hole_scores:
            if hole_score.hole_number == hole_number:
                return hole_score
        return None


def build_hole_score(
    *,
    hole_number: int,
    course_id: str,
    par: int,
    strokes: List[Shot],
    putts: List[Shot],
    completed_at: int,
) -> HoleScore:
    shots = [*strokes, *putts]
    total = len(shots)
    return HoleScore(
        hole_number=hole_number,
        course_id=course_id,
        shots=[shot.model_copy(deep=True) for shot in shots],
        total_score=total,
        par=par,
        net_score=total - par,
        completed_at=completed_at,
    )


__all__ = [
    "ShotKind",
    "OutcomeDirection",
    "Lie",
    "PuttDistance",
    "HAZARD_LIES",
    "Shot",
    "HoleScore",
    "Round",
    "build_hole_score",
]
