from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from golfbrain.bag.defaults import club_sort_key
from golfbrain.courses.models import MAX_HOLES, Course

from .models import HoleScore, OutcomeDirection, Round, Shot


class OverPar(BaseModel):
    gross: int = 0
    net: int = 0


class CumulativeEntry(BaseModel):
    hole: int
    par: int
    score: int = 0
    bumps: int = 0
    gross: Optional[int] = None
    net: Optional[int] = None


class RoundSummary(BaseModel):
    round_id: str = Field(serialization_alias="roundId")
    total_score: int = Field(serialization_alias="totalScore")
    total_par: int = Field(serialization_alias="totalPar")
    net_score: int = Field(serialization_alias="netScore")
    holes_played: int = Field(serialization_alias="holesPlayed")
    under_par_holes: int = Field(default=0, serialization_alias="underParHoles")
    par_holes: int = Field(default=0, serialization_alias="parHoles")
    over_par_holes: int = Field(default=0, serialization_alias="overParHoles")
    net_over_par: Optional[int] = Field(default=None, serialization_alias="netOverPar")
    fire_holes: List[int] = Field(default_factory=list, serialization_alias="fireHoles")
    poor_shot_holes: List[int] = Field(
        default_factory=list, serialization_alias="poorShotHoles"
    )

    model_config = ConfigDict(populate_by_name=True)


class ClubStats(BaseModel):
    club: str
    total: int = 0
    fire: int = 0
    poor: int = 0
    tee_shots: int = Field(default=0, serialization_alias="teeShots")
    fire_tee_shots: int = Field(default=0, serialization_alias="fireTeeShots")
    poor_tee_shots: int = Field(default=0, serialization_alias="poorTeeShots")

    model_config = ConfigDict(populate_by_name=True)


def hole_stroke_count(hole_score: HoleScore) -> int:
    return len(hole_score.shots)


def bumps(stroke_index: int, handicap: int | None) -> int:
    """Handicap strokes received on a hole of the given stroke index."""

    if not handicap:
        return 0
    if handicap <= 18:
        return 1 if stroke_index <= handicap else 0
    return 1 + (1 if stroke_index <= handicap - 18 else 0)


def _provisional_count(
    strokes: Sequence[Shot] | None, putts: Sequence[Shot] | None
) -> int:
    return len(strokes or ()) + len(putts or ())


def cumulative_over_par(
    round_: Round,
    course: Course,
    upto_hole: int,
    *,
    handicap: int | None = None,
    provisional_strokes: Sequence[Shot] | None = None,
    provisional_putts: Sequence[Shot] | None = None,
) -> OverPar:
    """Running gross and net over-par through ``upto_hole``.

    Holes without a committed score add nothing. The target hole falls back
    to the in-progress shots when it has no committed score yet.
    """

    result = OverPar()
    for number in range(1, min(upto_hole, MAX_HOLES) + 1):
        hole = course.hole(number)
        if hole is None:
            continue
        hole_score = round_.hole_score(number)
        if hole_score is not None:
            count = hole_stroke_count(hole_score)
        elif number == upto_hole:
            count = _provisional_count(provisional_strokes, provisional_putts)
            if count == 0:
                continue
        else:
            continue
        over = count - hole.par
        result.gross += over
        result.net += over - bumps(hole.stroke_index, handicap)
    return result


def cumulative_series(
    round_: Round, course: Course, *, handicap: int | None = None
) -> list[CumulativeEntry]:
    entries: list[CumulativeEntry] = []
    gross = 0
    net = 0
    for number in range(1, MAX_HOLES + 1):
        hole = course.hole(number)
        hole_score = round_.hole_score(number)
        if hole is None or hole_score is None:
            entries.append(CumulativeEntry(hole=number, par=hole.par if hole else 0))
            continue
        count = hole_stroke_count(hole_score)
        hole_bumps = bumps(hole.stroke_index, handicap)
        gross += count - hole.par
        net += count - hole.par - hole_bumps
        entries.append(
            CumulativeEntry(
                hole=number,
                par=hole.par,
                score=count,
                bumps=hole_bumps,
                gross=gross,
                net=net,
            )
        )
    return entries


def recompute_round_totals(round_: Round) -> Round:
    round_.total_score = sum(hole_stroke_count(hs) for hs in round_.hole_scores)
    return round_


def summarize_round(
    round_: Round, course: Course | None = None, *, handicap: int | None = None
) -> RoundSummary:
    total_score = sum(hole_stroke_count(hs) for hs in round_.hole_scores)
    total_par = course.total_par if course is not None else round_.total_par
    ordered = sorted(round_.hole_scores, key=lambda hs: hs.hole_number)

    net_over_par = None
    if course is not None:
        net_over_par = cumulative_over_par(
            round_, course, MAX_HOLES, handicap=handicap
        ).net

    return RoundSummary(
        round_id=round_.id,
        total_score=total_score,
        total_par=total_par,
        net_score=total_score - total_par,
        holes_played=len(ordered),
        under_par_holes=sum(1 for hs in ordered if hs.total_score < hs.par),
        par_holes=sum(1 for hs in ordered if hs.total_score == hs.par),
        over_par_holes=sum(1 for hs in ordered if hs.total_score > hs.par),
        net_over_par=net_over_par,
        fire_holes=[
            hs.hole_number
            for hs in ordered
            if any(s.outcome_direction == OutcomeDirection.FIRE for s in hs.shots)
        ],
        poor_shot_holes=[
            hs.hole_number for hs in ordered if any(s.poor_shot_flag for s in hs.shots)
        ],
    )


def club_breakdown(round_: Round) -> list[ClubStats]:
    stats: Dict[str, ClubStats] = {}
    for hole_score in round_.hole_scores:
        for position, shot in enumerate(hole_score.shots):
            if not shot.club:
                continue
            entry = stats.setdefault(shot.club, ClubStats(club=shot.club))
            is_fire = shot.outcome_direction == OutcomeDirection.FIRE
            is_poor = shot.poor_shot_flag

            entry.total += 1
            entry.fire += int(is_fire)
            entry.poor += int(is_poor)
            if position == 0:
                entry.tee_shots += 1
                entry.fire_tee_shots += int(is_fire)
                entry.poor_tee_shots += int(is_poor)

    return [stats[club] for club in sorted(stats, key=club_sort_key)]


__all__ = [
    "OverPar",
    "CumulativeEntry",
    "RoundSummary",
    "ClubStats",
    "hole_stroke_count",
    "bumps",
    "cumulative_over_par",
    "cumulative_series",
    "recompute_round_totals",
    "summarize_round",
    "club_breakdown",
]
