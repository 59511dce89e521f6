"""Golf tracker service.

Owns the persisted :class:`DataAggregate`, the round lifecycle and the
working buffer (:class:`ShotSequencer`) of the hole being played. Every
public method is one user action: it runs under a lock, saves the whole
aggregate at most once and fires a feedback signal.

The working buffer is never persisted; it is committed to the round through
``save_hole_data``, ``complete_hole``, hole navigation or ``review_round``.
"""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from typing import Any, Callable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from golfbrain.bag.models import Settings, coerce_handicap
from golfbrain.config import get_settings
from golfbrain.courses.catalog import (
    DEFAULT_PAR,
    CourseNotFound,
    NumberInput,
    find_course,
    new_course,
    updated_course,
)
from golfbrain.courses.models import MAX_HOLES, Course, Hole
from golfbrain.courses.store import demo_courses, ensure_demo_courses
from golfbrain.metrics import HOLES_COMPLETED, ROUNDS_FINALIZED, STORE_SAVE_FAILURES
from golfbrain.rounds.history import HoleHistory, hole_history, outcome_totals
from golfbrain.rounds.lifecycle import (
    RoundLifecycle,
    RoundNotFound,
    RoundState,
    RoundStateError,
)
from golfbrain.rounds.models import (
    HoleScore,
    Lie,
    OutcomeDirection,
    PuttDistance,
    Round,
    Shot,
    build_hole_score,
)
from golfbrain.rounds.scoring import (
    ClubStats,
    CumulativeEntry,
    OverPar,
    RoundSummary,
    club_breakdown,
    cumulative_over_par,
    cumulative_series,
    summarize_round,
)
from golfbrain.rounds.sequencer import ShotSequencer
from golfbrain.storage.kv import KeyValueStore, create_store
from golfbrain.storage.models import DataAggregate
from golfbrain.telemetry.feedback import FeedbackKind, notify

logger = logging.getLogger(__name__)

Notifier = Callable[[FeedbackKind], None]


class HoleData(BaseModel):
    hole_number: int = Field(serialization_alias="holeNumber")
    strokes: List[Shot] = Field(default_factory=list)
    putts: List[Shot] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class HoleBuffer(BaseModel):
    hole: Hole
    strokes: List[Shot] = Field(default_factory=list)
    putts: List[Shot] = Field(default_factory=list)
    cursor: Optional[int] = None
    missing_outcomes: List[str] = Field(
        default_factory=list, serialization_alias="missingOutcomes"
    )
    over_par: Optional[OverPar] = Field(default=None, serialization_alias="overPar")
    appended: Optional[Shot] = None

    model_config = ConfigDict(populate_by_name=True)


class TrackerSnapshot(BaseModel):
    state: RoundState
    current_hole: Optional[int] = Field(default=None, serialization_alias="currentHole")
    editing_past_round: bool = Field(
        default=False, serialization_alias="editingPastRound"
    )
    current_round: Optional[Round] = Field(
        default=None, serialization_alias="currentRound"
    )
    open_hole: Optional[HoleBuffer] = Field(
        default=None, serialization_alias="openHole"
    )

    model_config = ConfigDict(populate_by_name=True)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GolfTrackerService:
    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        notifier: Notifier | None = None,
        clock: Callable[[], int] | None = None,
        store_key: str | None = None,
    ) -> None:
        self._store = store if store is not None else create_store()
        self._notifier = notifier or notify
        self._clock = clock or _now_ms
        self._key = store_key or get_settings().store_key
        self._lock = threading.Lock()
        self._sequencer: ShotSequencer | None = None
        self._data = self._load()
        self._lifecycle = RoundLifecycle(self._data, clock=self._clock)
        lifecycle = self._lifecycle
        if lifecycle.state == RoundState.IN_PROGRESS and lifecycle.current_hole:
            self._open_if_present(lifecycle.current_hole)

    # Persistence and signals
    def _load(self) -> DataAggregate:
        data = DataAggregate()
        raw = self._store.load(self._key)
        if raw is not None:
            try:
                data = DataAggregate.model_validate(raw)
            except ValidationError:
                logger.exception(
                    "stored golf data is unreadable, starting empty",
                    extra={"key": self._key},
                )
        data.courses = ensure_demo_courses(data.courses)
        return data

    def _persist(self) -> None:
        try:
            self._store.save(self._key, self._data.to_payload())
        except Exception:
            STORE_SAVE_FAILURES.inc()
            logger.exception("failed to save golf data", extra={"key": self._key})

    def _signal(self, kind: FeedbackKind) -> None:
        try:
            self._notifier(kind)
        except Exception:
            logger.exception("feedback notifier failed", extra={"kind": kind.value})

    # Read-only views
    @property
    def settings(self) -> Settings:
        return self._data.settings

    @property
    def state(self) -> RoundState:
        return self._lifecycle.state

    def snapshot(self) -> TrackerSnapshot:
        with self._lock:
            return self._snapshot()

    def list_courses(self) -> list[Course]:
        with self._lock:
            return list(self._data.courses)

    def get_course(self, course_id: str) -> Course:
        with self._lock:
            return find_course(self._data.courses, course_id)

    def list_rounds(self) -> list[Round]:
        with self._lock:
            return sorted(
                self._data.rounds,
                key=lambda r: r.completed_at or r.started_at,
                reverse=True,
            )

    def get_round(self, round_id: str) -> Round:
        with self._lock:
            return self._find_round(round_id)

    # Courses
    def create_course(
        self,
        name: str,
        *,
        pars: NumberInput = None,
        stroke_indices: NumberInput = None,
        distances: NumberInput = None,
    ) -> Course:
        with self._lock:
            course = new_course(
                name,
                pars=pars,
                stroke_indices=stroke_indices,
                distances=distances,
                now_ms=self._clock,
            )
            self._data.courses.append(course)
            self._persist()
            self._signal(FeedbackKind.SUCCESS)
            logger.info("course created", extra={"course_id": course.id})
            return course

    def update_course(
        self,
        course_id: str,
        *,
        name: str | None = None,
        pars: NumberInput = None,
        stroke_indices: NumberInput = None,
        distances: NumberInput = None,
    ) -> Course:
        with self._lock:
            current = find_course(self._data.courses, course_id)
            course = updated_course(
                current,
                name=name,
                pars=pars,
                stroke_indices=stroke_indices,
                distances=distances,
            )
            self._data.courses = [
                course if c.id == course_id else c for c in self._data.courses
            ]

            active = self._lifecycle.current_round
            if active is not None and active.course_id == course_id:
                active.course_name = course.name
                active.total_par = course.total_par
                if self._sequencer is not None:
                    self._open_if_present(self._sequencer.hole.number, keep_buffer=True)

            self._persist()
            self._signal(FeedbackKind.SUCCESS)
            return course

    def delete_course(self, course_id: str) -> bool:
        """Delete a course and every round played on it. Unknown ids are a no-op."""

        with self._lock:
            remaining = [c for c in self._data.courses if c.id != course_id]
            if len(remaining) == len(self._data.courses):
                return False
            self._data.courses = remaining
            removed_rounds = self._lifecycle.delete_course_rounds(course_id)
            if self._lifecycle.current_round is None:
                self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.MEDIUM)
            logger.info(
                "course deleted",
                extra={"course_id": course_id, "rounds_removed": removed_rounds},
            )
            return True

    # Round lifecycle
    def select_course(self, course_id: str) -> Round:
        with self._lock:
            course = find_course(self._data.courses, course_id)
            round_ = self._lifecycle.select_course(course)
            self._open_if_present(1)
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return round_

    def complete_hole(
        self,
        hole_number: int | None = None,
        strokes: Sequence[Shot] | None = None,
        putts: Sequence[Shot] | None = None,
    ) -> TrackerSnapshot:
        """Commit a hole and move on to the next one.

        Without explicit shots the open working buffer is committed. Any
        shot without an outcome rejects the whole hole.
        """

        with self._lock:
            if strokes is None and putts is None:
                sequencer = self._require_sequencer(hole_number)
                number = sequencer.hole.number
                strokes, putts = sequencer.strokes, sequencer.putts
            else:
                number = hole_number or self._lifecycle.current_hole
                if number is None:
                    raise RoundStateError("no hole selected")

            hole_score = self._build_hole_score(number, strokes or [], putts or [])
            self._lifecycle.complete_hole(hole_score)
            HOLES_COMPLETED.inc()

            self._open_if_present(self._lifecycle.current_hole or number)
            self._persist()
            self._signal(FeedbackKind.SUCCESS)
            return self._snapshot()

    def save_hole_data(
        self,
        hole_number: int,
        strokes: Sequence[Shot] | None = None,
        putts: Sequence[Shot] | None = None,
    ) -> Round:
        """Commit shots for a hole without outcome validation.

        An empty hole deletes its score. Without explicit shots the open
        working buffer for ``hole_number`` is committed.
        """

        with self._lock:
            sequencer = self._sequencer
            if strokes is None and putts is None:
                sequencer = self._require_sequencer(hole_number)
                strokes, putts = sequencer.strokes, sequencer.putts
            round_ = self._save_hole(hole_number, strokes or [], putts or [])
            if sequencer is not None and sequencer.hole.number == hole_number:
                self._open_if_present(hole_number)
            self._persist()
            return round_

    def load_hole_data(self, hole_number: int) -> HoleData | None:
        with self._lock:
            round_ = self._lifecycle.current_round
            if round_ is None:
                return None
            hole_score = round_.hole_score(hole_number)
            if hole_score is None:
                return None
            return HoleData(
                hole_number=hole_number,
                strokes=[s.model_copy(deep=True) for s in hole_score.strokes],
                putts=[p.model_copy(deep=True) for p in hole_score.putts],
            )

    def update_todays_distance(self, hole_number: int, distance: int | None) -> Hole:
        """Set (or, given ``None`` or a non-positive value, clear) today's yardage."""

        with self._lock:
            round_ = self._require_round()
            course = self._course_for(round_)
            hole = course.hole(hole_number)
            if hole is None:
                raise ValueError(f"course has no hole {hole_number}")
            hole.todays_distance = distance if distance and distance > 0 else None
            sequencer = self._sequencer
            if sequencer is not None and sequencer.hole.number == hole_number:
                sequencer.hole = hole
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return hole

    def go_to_hole(self, hole_number: int) -> TrackerSnapshot:
        """Save the open hole, then open ``hole_number``."""

        with self._lock:
            return self._go_to_hole(hole_number)

    def next_hole(self) -> TrackerSnapshot:
        """Move one hole forward; a no-op on the last hole."""

        with self._lock:
            current = self._lifecycle.current_hole or 1
            if current >= MAX_HOLES:
                return self._snapshot()
            return self._go_to_hole(current + 1)

    def previous_hole(self) -> TrackerSnapshot:
        with self._lock:
            current = self._lifecycle.current_hole or 1
            if current <= 1:
                return self._snapshot()
            return self._go_to_hole(current - 1)

    def open_hole(self, hole_number: int | None = None) -> HoleBuffer:
        """Load a hole into the working buffer, seeding defaults if it has no shots."""

        with self._lock:
            self._require_round()
            number = hole_number or self._lifecycle.current_hole or 1
            self._open(number)
            self._lifecycle.go_to_hole(number)
            return self._require_view()

    def review_round(self) -> Round:
        with self._lock:
            round_ = self._lifecycle.review_round()
            self._commit_open_hole()
            self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return round_

    def return_to_round(self) -> TrackerSnapshot:
        with self._lock:
            hole_number = self._lifecycle.return_to_round()
            self._open_if_present(hole_number)
            self._signal(FeedbackKind.LIGHT)
            return self._snapshot()

    def finalize_round(self) -> Round:
        with self._lock:
            round_ = self._lifecycle.finalize_round()
            ROUNDS_FINALIZED.inc()
            self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.SUCCESS)
            logger.info(
                "round finalized",
                extra={"round_id": round_.id, "total_score": round_.total_score},
            )
            return round_

    def edit_past_round(self, round_id: str) -> Round:
        with self._lock:
            round_ = self._lifecycle.edit_past_round(round_id)
            self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return round_

    def delete_round(self, round_id: str) -> bool:
        with self._lock:
            removed = self._lifecycle.delete_round(round_id)
            if not removed:
                return False
            if self._lifecycle.current_round is None:
                self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.MEDIUM)
            return True

    # Settings
    def set_handicap(self, value: Any) -> Settings:
        with self._lock:
            self._data.settings.handicap = coerce_handicap(value)
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return self._data.settings

    def update_settings(self, changes: Mapping[str, Any]) -> Settings:
        with self._lock:
            merged = self._data.settings.model_dump(by_alias=True)
            if {"default_clubs_by_par", "defaultClubs"} & set(changes):
                merged.pop("defaultClubsByPar", None)
            merged.update(changes)
            if "handicap" in changes:
                merged["handicap"] = coerce_handicap(changes["handicap"])
            self._data.settings = Settings.model_validate(merged)
            if self._sequencer is not None:
                self._sequencer.settings = self._data.settings
            self._persist()
            self._signal(FeedbackKind.LIGHT)
            return self._data.settings

    def reset_data(self) -> TrackerSnapshot:
        with self._lock:
            self._data = DataAggregate(courses=demo_courses())
            self._lifecycle = RoundLifecycle(self._data, clock=self._clock)
            self._sequencer = None
            self._persist()
            self._signal(FeedbackKind.SUCCESS)
            logger.info("golf data reset")
            return self._snapshot()

    # History and scoring
    def hole_history(
        self, hole_number: int, course_id: str | None = None
    ) -> HoleHistory:
        with self._lock:
            course_id = course_id or self._require_round().course_id
            return hole_history(course_id, hole_number, self._data.rounds)

    def outcome_totals(
        self, hole_number: int, course_id: str | None = None
    ) -> dict[str, dict[str, int]]:
        with self._lock:
            course_id = course_id or self._require_round().course_id
            return outcome_totals(course_id, hole_number, self._data.rounds)

    def round_summary(self, round_id: str | None = None) -> RoundSummary:
        with self._lock:
            round_ = self._round_or_active(round_id)
            return summarize_round(
                round_,
                self._course_or_none(round_),
                handicap=self._data.settings.handicap,
            )

    def cumulative_series(self, round_id: str | None = None) -> list[CumulativeEntry]:
        with self._lock:
            round_ = self._round_or_active(round_id)
            return cumulative_series(
                round_, self._course_for(round_), handicap=self._data.settings.handicap
            )

    def club_breakdown(self, round_id: str | None = None) -> list[ClubStats]:
        with self._lock:
            return club_breakdown(self._round_or_active(round_id))

    # Working buffer
    def add_stroke(self, club: str | None = None) -> HoleBuffer:
        with self._lock:
            appended = self._require_sequencer().add_stroke(club=club)
            self._signal(FeedbackKind.LIGHT)
            return self._require_view(appended)

    def add_putt(self) -> HoleBuffer:
        with self._lock:
            appended = self._require_sequencer().add_putt()
            self._signal(FeedbackKind.LIGHT)
            return self._require_view(appended)

    def remove_shot(self, shot_id: str) -> TrackerSnapshot:
        """Remove a shot; emptying a hole deletes its score and steps back a hole.

        On hole 1 the hole view closes instead (``open_hole`` is ``None``).
        """

        with self._lock:
            sequencer = self._require_sequencer()
            sequencer.remove_shot(shot_id)
            if sequencer.is_empty:
                number = sequencer.hole.number
                self._lifecycle.save_hole(number, None)
                if number > 1:
                    self._lifecycle.go_to_hole(number - 1)
                    self._open_if_present(number - 1)
                else:
                    self._sequencer = None
                self._persist()
            self._signal(FeedbackKind.MEDIUM)
            return self._snapshot()

    def select_outcome(
        self,
        shot_id: str,
        outcome: OutcomeDirection | str,
        *,
        poor: bool = False,
        add_another: bool | None = None,
    ) -> HoleBuffer:
        with self._lock:
            outcome = OutcomeDirection(outcome)
            appended = self._require_sequencer().select_outcome(
                shot_id, outcome, poor=poor, add_another=add_another
            )
            fire = outcome == OutcomeDirection.FIRE
            self._signal(FeedbackKind.SUCCESS if fire else FeedbackKind.LIGHT)
            return self._require_view(appended)

    def set_lie(
        self, shot_id: str, lie: Lie | str, *, add_another: bool | None = None
    ) -> HoleBuffer:
        with self._lock:
            appended = self._require_sequencer().set_lie(
                shot_id, lie, add_another=add_another
            )
            self._signal(FeedbackKind.LIGHT)
            return self._require_view(appended)

    def set_putt_distance(
        self, shot_id: str, distance: PuttDistance | str
    ) -> HoleBuffer:
        with self._lock:
            self._require_sequencer().set_putt_distance(shot_id, distance)
            self._signal(FeedbackKind.LIGHT)
            return self._require_view()

    def set_club(self, shot_id: str, club: str) -> HoleBuffer:
        with self._lock:
            self._require_sequencer().set_club(shot_id, club)
            self._signal(FeedbackKind.LIGHT)
            return self._require_view()

    def move_cursor(self, index: int) -> HoleBuffer:
        with self._lock:
            self._require_sequencer().move_cursor(index)
            return self._require_view()

    # Internal helpers
    def _require_round(self) -> Round:
        round_ = self._lifecycle.current_round
        if round_ is None:
            raise RoundStateError("no active round")
        return round_

    def _require_sequencer(self, hole_number: int | None = None) -> ShotSequencer:
        sequencer = self._sequencer
        if sequencer is None:
            raise RoundStateError("no hole is open")
        if hole_number is not None and sequencer.hole.number != hole_number:
            raise RoundStateError(f"hole {hole_number} is not the open hole")
        return sequencer

    def _course_for(self, round_: Round) -> Course:
        return find_course(self._data.courses, round_.course_id)

    def _course_or_none(self, round_: Round) -> Course | None:
        try:
            return self._course_for(round_)
        except CourseNotFound:
            return None

    def _find_round(self, round_id: str) -> Round:
        for round_ in self._data.rounds:
            if round_.id == round_id:
                return round_
        active = self._lifecycle.current_round
        if active is not None and active.id == round_id:
            return active
        raise RoundNotFound(round_id)

    def _round_or_active(self, round_id: str | None) -> Round:
        if round_id is None:
            return self._require_round()
        return self._find_round(round_id)

    def _open(self, hole_number: int) -> ShotSequencer:
        round_ = self._require_round()
        hole = self._course_for(round_).hole(hole_number)
        if hole is None:
            raise ValueError(f"course has no hole {hole_number}")
        saved = round_.hole_score(hole_number)
        if saved is not None and saved.shots:
            sequencer = ShotSequencer.from_saved(
                hole,
                self._data.settings,
                saved.strokes,
                saved.putts,
                clock=self._clock,
            )
        else:
            sequencer = ShotSequencer.seeded(
                hole, self._data.settings, clock=self._clock
            )
        self._sequencer = sequencer
        return sequencer

    def _open_if_present(self, hole_number: int, *, keep_buffer: bool = False) -> None:
        round_ = self._lifecycle.current_round
        if round_ is None:
            self._sequencer = None
            return
        course = self._course_or_none(round_)
        hole = course.hole(hole_number) if course is not None else None
        if hole is None:
            self._sequencer = None
            return
        if keep_buffer and self._sequencer is not None:
            self._sequencer.hole = hole
            return
        self._open(hole_number)

    def _build_hole_score(
        self, hole_number: int, strokes: Sequence[Shot], putts: Sequence[Shot]
    ) -> HoleScore:
        round_ = self._require_round()
        course = self._course_or_none(round_)
        hole = course.hole(hole_number) if course is not None else None
        return build_hole_score(
            hole_number=hole_number,
            course_id=round_.course_id,
            par=hole.par if hole is not None else DEFAULT_PAR,
            strokes=list(strokes),
            putts=list(putts),
            completed_at=self._clock(),
        )

    def _save_hole(
        self, hole_number: int, strokes: Sequence[Shot], putts: Sequence[Shot]
    ) -> Round:
        if not strokes and not putts:
            return self._lifecycle.save_hole(hole_number, None)
        hole_score = self._build_hole_score(hole_number, strokes, putts)
        return self._lifecycle.save_hole(hole_number, hole_score)

    def _go_to_hole(self, hole_number: int) -> TrackerSnapshot:
        self._require_round()
        if not 1 <= hole_number <= MAX_HOLES:
            raise ValueError(f"hole_number must be between 1 and {MAX_HOLES}")
        self._commit_open_hole()
        self._lifecycle.go_to_hole(hole_number)
        self._open_if_present(hole_number)
        self._persist()
        self._signal(FeedbackKind.LIGHT)
        return self._snapshot()

    def _commit_open_hole(self) -> None:
        sequencer = self._sequencer
        if sequencer is None or self._lifecycle.current_round is None:
            return
        self._save_hole(sequencer.hole.number, sequencer.strokes, sequencer.putts)

    def _view(self, appended: Shot | None = None) -> HoleBuffer | None:
        sequencer = self._sequencer
        if sequencer is None:
            return None
        over_par = None
        round_ = self._lifecycle.current_round
        course = self._course_or_none(round_) if round_ is not None else None
        if round_ is not None and course is not None:
            over_par = cumulative_over_par(
                round_,
                course,
                sequencer.hole.number,
                handicap=self._data.settings.handicap,
                provisional_strokes=sequencer.strokes,
                provisional_putts=sequencer.putts,
            )
        return HoleBuffer(
            hole=sequencer.hole,
            strokes=sequencer.strokes,
            putts=sequencer.putts,
            cursor=sequencer.cursor,
            missing_outcomes=sequencer.missing_outcomes(),
            over_par=over_par,
            appended=appended,
        )

    def _require_view(self, appended: Shot | None = None) -> HoleBuffer:
        view = self._view(appended)
        if view is None:
            raise RoundStateError("no hole is open")
        return view

    def _snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            state=self._lifecycle.state,
            current_hole=self._lifecycle.current_hole,
            editing_past_round=self._lifecycle.editing_past_round,
            current_round=self._lifecycle.current_round,
            open_hole=self._view(),
        )


@lru_cache(maxsize=1)
def get_golf_tracker_service() -> GolfTrackerService:
    return GolfTrackerService(create_store())


__all__ = [
    "HoleData",
    "HoleBuffer",
    "TrackerSnapshot",
    "GolfTrackerService",
    "get_golf_tracker_service",
]
