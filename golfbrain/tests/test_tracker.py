from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from golfbrain.courses.catalog import CourseNotFound, CourseValidationError
from golfbrain.courses.store import DEMO_COURSE_IDS
from golfbrain.rounds.lifecycle import (
    ActiveRoundConflict,
    IncompleteHoleError,
    RoundState,
    RoundStateError,
)
from golfbrain.rounds.models import OutcomeDirection, Shot
from golfbrain.storage.kv import InMemoryStore
from golfbrain.telemetry.feedback import FeedbackKind
from golfbrain.tracker import GolfTrackerService


class FailingStore(InMemoryStore):
    def save(self, key: str, payload: Dict[str, Any]) -> None:
        raise OSError("disk full")


class CountingStore(InMemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.saves = 0

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        self.saves += 1
        super().save(key, payload)


def _stored(store: InMemoryStore) -> Optional[Dict[str, Any]]:
    return store.load("golf-brain")


def test_demo_courses_present_on_first_load(service: GolfTrackerService) -> None:
    ids = [c.id for c in service.list_courses()]

    assert set(DEMO_COURSE_IDS) <= set(ids)
    assert service.state == RoundState.NO_ACTIVE_ROUND


def test_select_course_opens_seeded_first_hole(service, store, signals) -> None:
    round_ = service.select_course("demo-links")

    snapshot = service.snapshot()
    assert snapshot.state == RoundState.IN_PROGRESS
    assert snapshot.current_hole == 1
    assert snapshot.open_hole.hole.number == 1
    assert len(snapshot.open_hole.strokes) == 2
    assert len(snapshot.open_hole.putts) == 2
    assert _stored(store)["currentRound"]["id"] == round_.id
    assert signals == [FeedbackKind.LIGHT]


def test_select_unknown_course_raises(service) -> None:
    with pytest.raises(CourseNotFound):
        service.select_course("nowhere")


def test_complete_hole_commits_buffer_and_opens_next(
    service, store, signals
) -> None:
    service.select_course("demo-links")

    snapshot = service.complete_hole()

    assert snapshot.current_hole == 2
    assert snapshot.open_hole.hole.number == 2
    assert snapshot.current_round.total_score == 4
    stored = _stored(store)["currentRound"]
    assert [hs["holeNumber"] for hs in stored["holeScores"]] == [1]
    assert signals[-1] == FeedbackKind.SUCCESS


def test_complete_hole_with_missing_outcome_commits_nothing(
    service, store
) -> None:
    service.select_course("demo-links")
    added = service.add_stroke()
    saved_before = _stored(store)

    with pytest.raises(IncompleteHoleError) as excinfo:
        service.complete_hole()

    assert excinfo.value.missing_shot_ids == [added.appended.id]
    assert service.snapshot().current_round.hole_scores == []
    assert service.snapshot().current_hole == 1
    assert _stored(store) == saved_before


def test_each_mutation_saves_once(clock, signals) -> None:
    store = CountingStore()
    service = GolfTrackerService(store, notifier=signals.append, clock=clock)

    service.select_course("demo-links")
    service.complete_hole()
    service.set_handicap(12)

    assert store.saves == 3


def test_working_buffer_edits_are_not_persisted(service, store) -> None:
    service.select_course("demo-links")
    before = _stored(store)

    service.add_putt()
    service.set_club(service.snapshot().open_hole.strokes[0].id, "3-Wood")

    assert _stored(store) == before


def test_go_to_hole_saves_the_open_hole(service) -> None:
    service.select_course("demo-links")
    service.add_putt()
    buffer = service.snapshot().open_hole
    service.select_outcome(buffer.putts[-1].id, "good")

    snapshot = service.go_to_hole(5)

    assert snapshot.current_hole == 5
    assert service.load_hole_data(1) is not None
    assert len(service.load_hole_data(1).putts) == 3
    assert service.load_hole_data(5) is None


def test_save_and_load_hole_data(service) -> None:
    service.select_course("demo-parkland")
    strokes = [
        Shot(
            id="s1", kind="stroke", outcome_direction="fire", club="Driver", timestamp=1
        )
    ]
    putts = [Shot(id="p1", kind="putt", outcome_direction="good", timestamp=2)]

    round_ = service.save_hole_data(3, strokes, putts)

    assert round_.hole_score(3).total_score == 2
    data = service.load_hole_data(3)
    assert [s.id for s in data.strokes] == ["s1"]
    assert [p.id for p in data.putts] == ["p1"]

    round_ = service.save_hole_data(3, [], [])
    assert round_.hole_score(3) is None
    assert service.load_hole_data(3) is None


def test_remove_last_shot_deletes_hole_and_steps_back(service) -> None:
    service.select_course("demo-links")
    service.complete_hole()
    service.save_hole_data(2)

    buffer = service.snapshot().open_hole
    for shot in buffer.strokes + buffer.putts:
        snapshot = service.remove_shot(shot.id)

    assert snapshot.current_hole == 1
    assert snapshot.open_hole.hole.number == 1
    assert snapshot.current_round.hole_score(2) is None
    assert snapshot.current_round.hole_score(1) is not None


def test_remove_last_shot_on_first_hole_closes_view(service) -> None:
    service.select_course("demo-links")
    buffer = service.snapshot().open_hole

    for shot in buffer.strokes + buffer.putts:
        snapshot = service.remove_shot(shot.id)

    assert snapshot.open_hole is None
    assert snapshot.current_hole == 1
    assert snapshot.state == RoundState.IN_PROGRESS
    with pytest.raises(RoundStateError):
        service.add_stroke()


def test_review_saves_in_flight_hole_and_finalize(service, store) -> None:
    service.select_course("demo-links")
    service.complete_hole()

    round_ = service.review_round()

    assert round_.is_complete is False
    assert [hs.hole_number for hs in round_.hole_scores] == [1, 2]
    assert service.state == RoundState.REVIEWING_SUMMARY

    final = service.finalize_round()

    assert final.is_complete is True
    assert service.state == RoundState.NO_ACTIVE_ROUND
    stored = _stored(store)
    assert "currentRound" not in stored
    assert [r["id"] for r in stored["rounds"]] == [final.id]


def test_return_to_round_reopens_hole(service) -> None:
    service.select_course("demo-links")
    service.complete_hole()
    service.review_round()

    snapshot = service.return_to_round()

    assert snapshot.state == RoundState.IN_PROGRESS
    assert snapshot.open_hole.hole.number == 2


def test_edit_past_round_conflict_leaves_state_unchanged(service) -> None:
    service.select_course("demo-links")
    service.review_round()
    past = service.finalize_round()
    active = service.select_course("demo-parkland")

    with pytest.raises(ActiveRoundConflict):
        service.edit_past_round(past.id)

    snapshot = service.snapshot()
    assert snapshot.current_round.id == active.id
    assert snapshot.state == RoundState.IN_PROGRESS


def test_edit_past_round_and_refinalize(service) -> None:
    service.select_course("demo-links")
    service.complete_hole()
    service.review_round()
    past = service.finalize_round()

    edited = service.edit_past_round(past.id)
    assert edited.id == past.id
    assert service.snapshot().editing_past_round is True

    service.open_hole(3)
    service.complete_hole()
    service.review_round()
    service.finalize_round()

    rounds = service.list_rounds()
    assert len(rounds) == 1
    assert {hs.hole_number for hs in rounds[0].hole_scores} >= {1, 3}


def test_delete_course_cascades_to_rounds(service) -> None:
    course = service.create_course("Club", pars="4 4 3")
    service.select_course(course.id)
    service.complete_hole()

    assert service.delete_course(course.id) is True

    snapshot = service.snapshot()
    assert snapshot.current_round is None
    assert snapshot.open_hole is None
    assert course.id not in {c.id for c in service.list_courses()}
    assert service.delete_course(course.id) is False


def test_delete_round_unknown_id_is_noop(service, store) -> None:
    before = _stored(store)

    assert service.delete_round("ghost") is False
    assert _stored(store) == before


def test_create_and_update_course(service) -> None:
    with pytest.raises(CourseValidationError):
        service.create_course("")

    course = service.create_course("Nine", pars="4 4 3 5 4 4 3 5 4")
    assert len(course.holes) == 9

    service.select_course(course.id)
    updated = service.update_course(
        course.id, name="Nine Holes", pars="5 5 5 5 5 5 5 5 5"
    )

    assert updated.total_par == 45
    assert service.snapshot().current_round.course_name == "Nine Holes"
    assert service.snapshot().current_round.total_par == 45


def test_short_course_last_hole_stays_open(service) -> None:
    course = service.create_course("Two", pars="3 3")
    service.select_course(course.id)
    service.complete_hole()

    snapshot = service.complete_hole()

    assert snapshot.current_hole == 3
    assert snapshot.open_hole is None
    assert snapshot.current_round.total_score == 6


def test_update_todays_distance(service) -> None:
    service.select_course("demo-links")

    hole = service.update_todays_distance(1, 410)
    assert hole.todays_distance == 410
    assert service.get_course("demo-links").hole(1).todays_distance == 410
    assert service.snapshot().open_hole.hole.todays_distance == 410

    assert service.update_todays_distance(1, None).todays_distance is None


@pytest.mark.parametrize(
    "raw,expected", [(18, 18), (99, 54), ("abc", None), (-4, 0)]
)
def test_set_handicap_coerces(service, raw, expected) -> None:
    assert service.set_handicap(raw).handicap == expected


def test_handicap_drives_net_over_par(service) -> None:
    service.set_handicap(18)
    service.select_course("demo-links")
    service.complete_hole()

    summary = service.round_summary()
    assert summary.net_over_par == -1
    assert summary.net_score == 4 - service.snapshot().current_round.total_par

    buffer = service.snapshot().open_hole
    assert buffer.over_par.gross == 0
    assert buffer.over_par.net == -2


def test_hole_history_uses_finalized_rounds(service) -> None:
    for _ in range(2):
        service.select_course("demo-links")
        service.complete_hole()
        service.review_round()
        service.finalize_round()

    history = service.hole_history(1, course_id="demo-links")

    assert history.total_rounds == 2
    assert history.average_score == 4.0
    assert history.shot_position_outcomes["stroke-1"] == {"good": 2}


def test_fire_outcome_signals_success(service, signals) -> None:
    service.select_course("demo-links")
    shot_id = service.snapshot().open_hole.strokes[0].id

    buffer = service.select_outcome(shot_id, "fire")

    assert buffer.strokes[0].outcome_direction == OutcomeDirection.FIRE
    assert signals[-1] == FeedbackKind.SUCCESS


def test_lie_decision_flows_through_service(service) -> None:
    service.select_course("demo-links")
    first = service.snapshot().open_hole.strokes[0]

    buffer = service.set_lie(first.id, "ob", add_another=True)

    assert buffer.appended is not None
    assert buffer.strokes[1].outcome_direction == OutcomeDirection.PENALTY
    assert buffer.cursor == 2


def test_resume_after_reload(store, make_service) -> None:
    first = make_service()
    first.select_course("demo-links")
    first.complete_hole()
    first.complete_hole()

    second = make_service()

    snapshot = second.snapshot()
    assert snapshot.state == RoundState.IN_PROGRESS
    assert snapshot.current_hole == 3
    assert snapshot.open_hole.hole.number == 3


def test_reload_mid_edit_resumes_in_summary(store, make_service) -> None:
    first = make_service()
    first.select_course("demo-links")
    first.complete_hole()
    first.complete_hole()
    first.review_round()
    past = first.finalize_round()
    first.edit_past_round(past.id)

    second = make_service()

    snapshot = second.snapshot()
    assert snapshot.state == RoundState.REVIEWING_SUMMARY
    assert snapshot.current_hole == 3
    assert snapshot.open_hole is None
    assert snapshot.editing_past_round is True

    second.finalize_round()

    rounds = second.list_rounds()
    assert len(rounds) == 1
    assert [hs.hole_number for hs in rounds[0].hole_scores] == [1, 2, 3]


def test_store_failures_do_not_break_scoring(clock, signals) -> None:
    service = GolfTrackerService(
        FailingStore(), notifier=signals.append, clock=clock
    )

    service.select_course("demo-links")
    snapshot = service.complete_hole()

    assert snapshot.current_round.total_score == 4


def test_notifier_failure_is_ignored(clock) -> None:
    def explode(kind: FeedbackKind) -> None:
        raise RuntimeError("haptics offline")

    service = GolfTrackerService(InMemoryStore(), notifier=explode, clock=clock)

    assert service.select_course("demo-links").course_id == "demo-links"


def test_reset_data_restores_defaults(service) -> None:
    service.create_course("Extra")
    service.select_course("demo-links")

    snapshot = service.reset_data()

    assert snapshot.state == RoundState.NO_ACTIVE_ROUND
    assert sorted(c.id for c in service.list_courses()) == sorted(DEMO_COURSE_IDS)
    assert service.list_rounds() == []


def test_update_settings_changes_default_clubs(service) -> None:
    settings = service.update_settings(
        {"defaultClubsByPar": {"par4": {"shot1": "3-Wood"}}}
    )
    assert settings.default_clubs_by_par.par4.shot1 == "3-Wood"

    service.select_course("demo-links")
    assert service.snapshot().open_hole.strokes[0].club == "3-Wood"


def test_next_and_previous_hole_stop_at_the_ends(service) -> None:
    service.select_course("demo-links")

    assert service.previous_hole().current_hole == 1
    assert service.next_hole().current_hole == 2
    assert service.previous_hole().current_hole == 1
    assert service.load_hole_data(2) is not None

    service.go_to_hole(18)
    assert service.next_hole().current_hole == 18


def test_putt_distance_and_cursor_through_service(service) -> None:
    service.select_course("demo-links")
    putt = service.snapshot().open_hole.putts[0]

    buffer = service.set_putt_distance(putt.id, "10+ft")
    assert buffer.putts[0].putt_distance.value == "10+ft"

    assert service.move_cursor(99).cursor == 3
    with pytest.raises(ValueError):
        service.set_club(putt.id, "Putter")


def test_outcome_totals_default_to_active_course(service) -> None:
    service.select_course("demo-links")
    service.review_round()
    service.finalize_round()
    service.select_course("demo-links")

    totals = service.outcome_totals(1)

    assert totals["stroke"] == {"good": 2}
    assert totals["putt"] == {"good": 2}


def test_scorecard_and_clubs_for_past_round(service) -> None:
    service.select_course("demo-links")
    service.complete_hole()
    service.review_round()
    past = service.finalize_round()

    series = service.cumulative_series(past.id)
    assert len(series) == 18
    assert series[0].gross == 0
    assert series[2].gross is None

    clubs = service.club_breakdown(past.id)
    assert clubs[0].club == "Driver"
    assert clubs[0].tee_shots == 1
    assert {c.club for c in clubs} == {"Driver", "9-Iron", "7-Iron"}

    with pytest.raises(RoundStateError):
        service.club_breakdown()


def test_go_to_hole_commits_open_buffer_before_moving(service) -> None:
    service.select_course("demo-links")

    snapshot = service.next_hole()

    assert snapshot.current_hole == 2
    assert snapshot.open_hole.hole.number == 2
    assert snapshot.current_round.hole_score(1) is not None
    assert service.previous_hole().open_hole.hole.number == 1
