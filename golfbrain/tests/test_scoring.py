from __future__ import annotations

from typing import List

import pytest

from golfbrain.courses.catalog import build_holes
from golfbrain.courses.models import Course
from golfbrain.courses.store import demo_courses
from golfbrain.rounds.models import HoleScore, Round, Shot, build_hole_score
from golfbrain.rounds.scoring import (
    bumps,
    club_breakdown,
    cumulative_over_par,
    cumulative_series,
    recompute_round_totals,
    summarize_round,
)


def _strokes(
    count: int, *, clubs: List[str] | None = None, outcome: str = "good"
) -> List[Shot]:
    clubs = clubs or ["Driver"] * count
    return [
        Shot(
            id=f"stroke-{n}",
            kind="stroke",
            outcome_direction=outcome,
            lie="fairway",
            club=clubs[n],
            timestamp=n,
        )
        for n in range(count)
    ]


def _putts(count: int) -> List[Shot]:
    return [
        Shot(id=f"putt-{n}", kind="putt", outcome_direction="good", timestamp=100 + n)
        for n in range(count)
    ]


def _hole(
    course: Course, number: int, strokes: List[Shot], putts: List[Shot]
) -> HoleScore:
    return build_hole_score(
        hole_number=number,
        course_id=course.id,
        par=course.hole(number).par,
        strokes=strokes,
        putts=putts,
        completed_at=1_000 + number,
    )


def _round(course: Course, hole_scores: List[HoleScore]) -> Round:
    round_ = Round(
        id="round-1",
        course_id=course.id,
        course_name=course.name,
        hole_scores=hole_scores,
        total_par=course.total_par,
        started_at=0,
    )
    return recompute_round_totals(round_)


@pytest.mark.parametrize(
    "stroke_index,handicap,expected",
    [
        (5, None, 0),
        (5, 0, 0),
        (5, 10, 1),
        (11, 10, 0),
        (18, 18, 1),
        (1, 1, 1),
        (2, 20, 2),
        (3, 20, 1),
        (18, 36, 2),
        (18, 54, 2),
    ],
)
def test_bumps(stroke_index: int, handicap: int | None, expected: int) -> None:
    assert bumps(stroke_index, handicap) == expected


def test_par_four_stroke_index_five_handicap_ten() -> None:
    course = Course(id="c1", name="One", holes=build_holes("4", "5"), created_at=0)
    round_ = _round(course, [_hole(course, 1, _strokes(2), _putts(2))])

    result = cumulative_over_par(round_, course, 1, handicap=10)

    assert result.gross == 0
    assert result.net == -1


def test_all_par_round_is_level() -> None:
    course = demo_courses()[0]
    scores = [
        _hole(course, hole.number, _strokes(hole.par - 2), _putts(2))
        for hole in course.holes
    ]
    round_ = _round(course, scores)

    assert cumulative_over_par(round_, course, 18).gross == 0
    assert round_.total_score == course.total_par
    assert summarize_round(round_, course).net_score == 0


def test_provisional_shots_fill_the_target_hole_only() -> None:
    course = Course(id="c2", name="Three", holes=build_holes("4 4 4"), created_at=0)
    round_ = _round(course, [_hole(course, 1, _strokes(3), _putts(2))])

    # hole 2 skipped, hole 3 in progress
    result = cumulative_over_par(
        round_,
        course,
        3,
        provisional_strokes=_strokes(2),
        provisional_putts=_putts(3),
    )
    assert result.gross == 2

    empty = cumulative_over_par(
        round_, course, 3, provisional_strokes=[], provisional_putts=[]
    )
    assert empty.gross == 1


def test_committed_score_wins_over_provisional() -> None:
    course = Course(id="c3", name="Two", holes=build_holes("3 4"), created_at=0)
    round_ = _round(course, [_hole(course, 2, _strokes(2), _putts(2))])

    result = cumulative_over_par(round_, course, 2, provisional_strokes=_strokes(5))

    assert result.gross == 0


def test_cumulative_series_leaves_gaps_for_unplayed_holes() -> None:
    course = Course(
        id="c4", name="Three", holes=build_holes("4 3 5", "1 2 3"), created_at=0
    )
    round_ = _round(
        course,
        [
            _hole(course, 1, _strokes(3), _putts(2)),
            _hole(course, 3, _strokes(3), _putts(1)),
        ],
    )

    series = cumulative_series(round_, course, handicap=1)

    assert len(series) == 18
    assert (series[0].gross, series[0].net, series[0].bumps) == (1, 0, 1)
    assert series[1].gross is None
    assert series[1].par == 3
    assert (series[2].gross, series[2].net) == (0, -1)
    assert series[5].par == 0


def test_summarize_round_counts_and_flags() -> None:
    course = Course(id="c5", name="Three", holes=build_holes("4 3 5"), created_at=0)
    birdie = _strokes(1, outcome="fire") + _putts(2)
    par = _strokes(1) + _putts(2)
    poor = _strokes(5)
    poor[1].poor_shot_flag = True
    round_ = _round(
        course,
        [
            _hole(course, 1, birdie[:1], birdie[1:]),
            _hole(course, 2, par[:1], par[1:]),
            _hole(course, 3, poor, _putts(2)),
        ],
    )

    summary = summarize_round(round_, course, handicap=None)

    assert summary.total_score == 13
    assert summary.total_par == 12
    assert summary.net_score == 1
    assert summary.holes_played == 3
    assert summary.under_par_holes == 1
    assert summary.par_holes == 1
    assert summary.over_par_holes == 1
    assert summary.fire_holes == [1]
    assert summary.poor_shot_holes == [3]
    assert summary.net_over_par == 1
    dumped = summary.model_dump(by_alias=True)
    assert dumped["underParHoles"] == 1


def test_recompute_totals_matches_hole_scores() -> None:
    course = Course(id="c6", name="Two", holes=build_holes("4 4"), created_at=0)
    round_ = _round(course, [_hole(course, 1, _strokes(4), _putts(2))])
    round_.hole_scores.append(_hole(course, 2, _strokes(1), _putts(1)))

    recompute_round_totals(round_)

    assert round_.total_score == sum(hs.total_score for hs in round_.hole_scores) == 8


def test_club_breakdown_orders_by_bag() -> None:
    course = Course(id="c7", name="Two", holes=build_holes("4 5"), created_at=0)
    hole_one = _strokes(2, clubs=["Mystery Hybrid", "9-Iron"])
    hole_two = _strokes(3, clubs=["Driver", "7-Iron", "9-Iron"], outcome="fire")
    round_ = _round(
        course,
        [_hole(course, 1, hole_one, _putts(2)), _hole(course, 2, hole_two, _putts(1))],
    )

    stats = club_breakdown(round_)

    assert [s.club for s in stats] == ["Driver", "7-Iron", "9-Iron", "Mystery Hybrid"]
    driver = stats[0]
    assert (driver.total, driver.fire) == (1, 1)
    assert (driver.tee_shots, driver.fire_tee_shots) == (1, 1)
    nine = stats[2]
    assert nine.total == 2
    assert nine.fire == 1
    assert nine.tee_shots == 0
    assert stats[3].tee_shots == 1
