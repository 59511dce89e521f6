"""Round lifecycle: the single active round and its review/finalize flow.

The active-round slot (``DataAggregate.current_round``) holds at most one
round. An in-progress round lives only in that slot; finalized rounds live in
``DataAggregate.rounds``. Editing a finalized round puts it back in the slot
while it stays complete.
"""

from __future__ import annotations

import logging
import time
import uuid
from enum import Enum
from typing import Callable, List

from golfbrain.courses.models import MAX_HOLES, Course
from golfbrain.storage.models import DataAggregate

from .models import HoleScore, Round
from .scoring import recompute_round_totals

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    NO_ACTIVE_ROUND = "no_active_round"
    IN_PROGRESS = "in_progress"
    REVIEWING_SUMMARY = "reviewing_summary"


class RoundNotFound(Exception):
    pass


class RoundStateError(Exception):
    pass


class ActiveRoundConflict(RoundStateError):
    pass


class IncompleteHoleError(ValueError):
    def __init__(self, hole_number: int, missing_shot_ids: List[str]):
        self.hole_number = hole_number
        self.missing_shot_ids = list(missing_shot_ids)
        if self.missing_shot_ids:
            message = (
                f"hole {hole_number}: every shot needs an outcome "
                f"({len(self.missing_shot_ids)} missing)"
            )
        else:
            message = f"hole {hole_number}: add at least one shot to complete the hole"
        super().__init__(message)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RoundLifecycle:
    def __init__(
        self, aggregate: DataAggregate, *, clock: Callable[[], int] | None = None
    ) -> None:
        self._data = aggregate
        self._clock = clock or _now_ms
        self.state = RoundState.NO_ACTIVE_ROUND
        self.current_hole: int | None = None
        self.editing_past_round = False
        self.resume_from_aggregate()

    @property
    def current_round(self) -> Round | None:
        return self._data.current_round

    def resume_from_aggregate(self) -> None:
        """Derive the state for a freshly loaded aggregate.

        A stored active round resumes at the hole after its last scored hole.
        A stored complete round is a past round being edited and resumes in
        the summary, as :meth:`edit_past_round` leaves it.
        """

        current = self._data.current_round
        if current is None:
            self.state = RoundState.NO_ACTIVE_ROUND
            self.current_hole = None
            self.editing_past_round = False
            return

        played = [hs.hole_number for hs in current.hole_scores]
        self.editing_past_round = current.is_complete
        if current.is_complete:
            self.current_hole = max(played) if played else 1
            self.state = RoundState.REVIEWING_SUMMARY
            return
        self.current_hole = min(MAX_HOLES, max(played) + 1) if played else 1
        self.state = RoundState.IN_PROGRESS

    # Transitions
    def select_course(self, course: Course) -> Round:
        if self.state != RoundState.NO_ACTIVE_ROUND or self._data.current_round:
            raise RoundStateError("a round is already active")

        round_ = Round(
            id=str(uuid.uuid4()),
            course_id=course.id,
            course_name=course.name,
            hole_scores=[],
            total_score=0,
            total_par=course.total_par,
            started_at=self._clock(),
            is_complete=False,
        )
        self._data.current_round = round_
        self.state = RoundState.IN_PROGRESS
        self.current_hole = 1
        self.editing_past_round = False
        return round_

    def save_hole(self, hole_number: int, hole_score: HoleScore | None) -> Round:
        """Replace (or, given ``None``, delete) the score for one hole."""

        round_ = self._require_round()
        round_.hole_scores = [
            hs for hs in round_.hole_scores if hs.hole_number != hole_number
        ]
        if hole_score is not None:
            round_.hole_scores.append(hole_score)
            round_.hole_scores.sort(key=lambda hs: hs.hole_number)
        recompute_round_totals(round_)
        self._sync_history(round_)
        return round_

    def complete_hole(self, hole_score: HoleScore) -> Round:
        if self.state != RoundState.IN_PROGRESS:
            raise RoundStateError("holes can only be completed while playing")
        missing = [s.id for s in hole_score.shots if s.outcome_direction is None]
        if not hole_score.shots or missing:
            logger.info(
                "rejected hole completion",
                extra={"hole": hole_score.hole_number, "missing": len(missing)},
            )
            raise IncompleteHoleError(hole_score.hole_number, missing)

        round_ = self.save_hole(hole_score.hole_number, hole_score)
        if hole_score.hole_number < MAX_HOLES:
            self.current_hole = hole_score.hole_number + 1
        else:
            self.current_hole = MAX_HOLES
        return round_

    def go_to_hole(self, hole_number: int) -> int:
        self._require_round()
        if not 1 <= hole_number <= MAX_HOLES:
            raise ValueError(f"hole_number must be between 1 and {MAX_HOLES}")
        self.current_hole = hole_number
        self.state = RoundState.IN_PROGRESS
        return hole_number

    def review_round(self) -> Round:
        if self.state != RoundState.IN_PROGRESS:
            raise RoundStateError("no round in progress to review")
        self.state = RoundState.REVIEWING_SUMMARY
        return self._require_round()

    def return_to_round(self) -> int:
        if self.state != RoundState.REVIEWING_SUMMARY:
            raise RoundStateError("not reviewing a round")
        self._require_round()
        self.state = RoundState.IN_PROGRESS
        if self.current_hole is None:
            self.current_hole = 1
        return self.current_hole

    def finalize_round(self) -> Round:
        if self.state != RoundState.REVIEWING_SUMMARY:
            raise RoundStateError("review the round before finalizing it")
        round_ = self._require_round()
        round_.is_complete = True
        round_.completed_at = self._clock()
        recompute_round_totals(round_)

        if not self._sync_history(round_):
            self._data.rounds.append(round_)
        self._clear_slot()
        return round_

    def edit_past_round(self, round_id: str) -> Round:
        active = self._data.current_round
        if active is not None and active.id != round_id:
            raise ActiveRoundConflict(
                "finish or abandon the active round before editing another"
            )
        round_ = self._find_history(round_id)
        if round_ is None:
            if active is not None and active.id == round_id:
                round_ = active
            else:
                raise RoundNotFound(round_id)

        self._data.current_round = round_
        self.editing_past_round = round_.is_complete
        played = [hs.hole_number for hs in round_.hole_scores]
        self.current_hole = max(played) if played else 1
        self.state = RoundState.REVIEWING_SUMMARY
        return round_

    def delete_round(self, round_id: str) -> bool:
        before = len(self._data.rounds)
        self._data.rounds = [r for r in self._data.rounds if r.id != round_id]
        removed = len(self._data.rounds) != before

        active = self._data.current_round
        if active is not None and active.id == round_id:
            self._clear_slot()
            removed = True
        return removed

    def delete_course_rounds(self, course_id: str) -> int:
        before = len(self._data.rounds)
        self._data.rounds = [r for r in self._data.rounds if r.course_id != course_id]
        removed = before - len(self._data.rounds)

        active = self._data.current_round
        if active is not None and active.course_id == course_id:
            if not active.is_complete:
                removed += 1
            self._clear_slot()
        return removed

    # Internal helpers
    def _require_round(self) -> Round:
        round_ = self._data.current_round
        if round_ is None:
            raise RoundStateError("no active round")
        return round_

    def _find_history(self, round_id: str) -> Round | None:
        for round_ in self._data.rounds:
            if round_.id == round_id:
                return round_
        return None

    def _sync_history(self, round_: Round) -> bool:
        for index, existing in enumerate(self._data.rounds):
            if existing.id == round_.id:
                self._data.rounds[index] = round_
                return True
        return False

    def _clear_slot(self) -> None:
        self._data.current_round = None
        self.state = RoundState.NO_ACTIVE_ROUND
        self.current_hole = None
        self.editing_past_round = False


__all__ = [
    "RoundState",
    "RoundNotFound",
    "RoundStateError",
    "ActiveRoundConflict",
    "IncompleteHoleError",
    "RoundLifecycle",
]
