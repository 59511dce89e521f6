"""Shot sequencing for the hole being played.

A :class:`ShotSequencer` is the transient working buffer for one hole: the
ordered strokes, then the ordered putts, and a single cursor into that
concatenated sequence. Decisions the player makes in a prompt ("add another
shot?") are passed in as explicit ``add_another`` arguments.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from golfbrain.bag.defaults import RECOVERY_CLUB, default_club
from golfbrain.bag.models import Settings
from golfbrain.courses.models import Hole

from .models import (
    HAZARD_LIES,
    Lie,
    OutcomeDirection,
    PuttDistance,
    Shot,
    ShotKind,
)

EXPECTED_PUTT_COUNT = 2


class SequencerError(ValueError):
    pass


class ShotNotFound(SequencerError):
    pass


class DecisionRequired(SequencerError):
    """Raised when an action needs an explicit yes/no ``add_another`` answer."""


def expected_stroke_count(par: int) -> int:
    return max(0, par - 2)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ShotSlot:
    shot: Shot
    index: int
    position: int

    @property
    def kind(self) -> ShotKind:
        return self.shot.kind

    @property
    def label(self) -> str:
        return f"{self.shot.kind.value}-{self.position}"


class ShotSequencer:
    def __init__(
        self,
        hole: Hole,
        settings: Settings | None = None,
        *,
        strokes: Iterable[Shot] = (),
        putts: Iterable[Shot] = (),
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.hole = hole
        self.settings = settings or Settings()
        self._clock = clock or _now_ms
        self._strokes: List[Shot] = [s.model_copy(deep=True) for s in strokes]
        self._putts: List[Shot] = [p.model_copy(deep=True) for p in putts]
        self._cursor: Optional[int] = 0 if self._strokes or self._putts else None

    # Construction
    @classmethod
    def seeded(
        cls,
        hole: Hole,
        settings: Settings | None = None,
        *,
        clock: Callable[[], int] | None = None,
    ) -> "ShotSequencer":
        """Build the default strokes and putts for a hole with no saved data."""

        sequencer = cls(hole, settings, clock=clock)
        stroke_count = expected_stroke_count(hole.par)
        now = sequencer._clock()
        for index in range(stroke_count):
            sequencer._strokes.append(
                Shot(
                    id=_new_id(ShotKind.STROKE),
                    kind=ShotKind.STROKE,
                    outcome_direction=OutcomeDirection.GOOD,
                    lie=Lie.GREEN if index == stroke_count - 1 else Lie.FAIRWAY,
                    club=default_club(hole.par, index + 1, sequencer.settings),
                    timestamp=now,
                )
            )
        sequencer._putts.extend(_default_putts(now))
        sequencer._cursor = 0 if sequencer._all() else None
        return sequencer

    @classmethod
    def from_saved(
        cls,
        hole: Hole,
        settings: Settings | None,
        strokes: Iterable[Shot],
        putts: Iterable[Shot],
        *,
        clock: Callable[[], int] | None = None,
    ) -> "ShotSequencer":
        """Rebuild a buffer from stored shots.

        Strokes missing a club get the default for their position, and a hole
        saved with strokes but no putts gets the two default putts.
        """

        sequencer = cls(hole, settings, strokes=strokes, putts=putts, clock=clock)
        for number, stroke in enumerate(sequencer._strokes, start=1):
            if not stroke.club:
                stroke.club = default_club(hole.par, number, sequencer.settings)
        if sequencer._strokes and not sequencer._putts:
            sequencer._putts.extend(_default_putts(sequencer._clock()))
        return sequencer

    # Views
    @property
    def strokes(self) -> list[Shot]:
        return list(self._strokes)

    @property
    def putts(self) -> list[Shot]:
        return list(self._putts)

    @property
    def cursor(self) -> int | None:
        return self._cursor

    @property
    def total(self) -> int:
        return len(self._strokes) + len(self._putts)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def slots(self) -> list[ShotSlot]:
        slots = [
            ShotSlot(shot=shot, index=i, position=i + 1)
            for i, shot in enumerate(self._strokes)
        ]
        offset = len(self._strokes)
        slots.extend(
            ShotSlot(shot=putt, index=offset + i, position=i + 1)
            for i, putt in enumerate(self._putts)
        )
        return slots

    def current(self) -> ShotSlot | None:
        if self._cursor is None:
            return None
        return self.slots()[self._cursor]

    def shot(self, shot_id: str) -> Shot:
        return self._all()[self._index_of(shot_id)]

    def missing_outcomes(self) -> list[str]:
        return [shot.id for shot in self._all() if shot.outcome_direction is None]

    # Navigation
    def move_cursor(self, index: int) -> int | None:
        self._cursor = self._clamp(index)
        return self._cursor

    def next_shot(self) -> int | None:
        if self._cursor is None:
            return None
        return self.move_cursor(self._cursor + 1)

    def previous_shot(self) -> int | None:
        if self._cursor is None:
            return None
        return self.move_cursor(self._cursor - 1)

    # Mutations
    def add_stroke(self, *, club: str | None = None) -> Shot:
        """Append a stroke played from the green; its outcome starts unset."""

        if self._strokes and self._strokes[-1].lie == Lie.GREEN:
            self._strokes[-1].lie = Lie.FAIRWAY
        if not club:
            club = default_club(self.hole.par, len(self._strokes) + 1, self.settings)
        stroke = Shot(
            id=_new_id(ShotKind.STROKE),
            kind=ShotKind.STROKE,
            lie=Lie.GREEN,
            club=club,
            timestamp=self._clock(),
        )
        self._strokes.append(stroke)
        self._cursor = len(self._strokes) - 1
        return stroke

    def add_putt(self) -> Shot:
        putt = Shot(
            id=_new_id(ShotKind.PUTT),
            kind=ShotKind.PUTT,
            putt_distance=PuttDistance.FT_5_TO_10,
            timestamp=self._clock(),
        )
        self._putts.append(putt)
        self._cursor = self.total - 1
        return putt

    def remove_shot(self, shot_id: str) -> Shot:
        index = self._index_of(shot_id)
        if index < len(self._strokes):
            removed = self._strokes.pop(index)
        else:
            removed = self._putts.pop(index - len(self._strokes))

        if self._cursor is not None:
            if self._cursor == index:
                self._cursor = max(0, index - 1)
            elif self._cursor > index:
                self._cursor -= 1
        self._cursor = self._clamp(self._cursor if self._cursor is not None else 0)
        return removed

    def select_outcome(
        self,
        shot_id: str,
        outcome: OutcomeDirection | str,
        *,
        poor: bool = False,
        add_another: bool | None = None,
    ) -> Shot | None:
        """Record the outcome of a shot.

        ``poor=True`` marks the shot as a poor shot; that requires an
        ``add_another`` answer, and ``True`` appends one more shot of the same
        kind. Any other selection clears the poor-shot flag. Returns the
        appended shot, if any.
        """

        outcome = OutcomeDirection(outcome)
        shot = self.shot(shot_id)
        if poor and add_another is None:
            raise DecisionRequired("marking a poor shot needs an add_another decision")

        shot.outcome_direction = outcome
        shot.poor_shot_flag = bool(poor)
        if not poor or not add_another:
            return None

        focused = self.current()
        if shot.is_stroke:
            extra = Shot(
                id=_new_id(ShotKind.STROKE),
                kind=ShotKind.STROKE,
                lie=Lie.GREEN,
                club=RECOVERY_CLUB,
                timestamp=self._clock(),
            )
            if self._strokes and self._strokes[-1].lie == Lie.GREEN:
                self._strokes[-1].lie = Lie.FAIRWAY
            self._strokes.append(extra)
        else:
            extra = Shot(
                id=_new_id(ShotKind.PUTT),
                kind=ShotKind.PUTT,
                putt_distance=PuttDistance.FT_5_TO_10,
                timestamp=self._clock(),
            )
            self._putts.append(extra)
        # An appended stroke shifts every putt; keep the cursor on its shot.
        if focused is not None:
            self._cursor = self._index_of(focused.shot.id)
        else:
            self._cursor = self._clamp(0)
        return extra

    def set_lie(
        self,
        shot_id: str,
        lie: Lie | str,
        *,
        add_another: bool | None = None,
    ) -> Shot | None:
        """Set the lie of a stroke.

        Hitting into OB or water forces the next shot in the sequence to a
        penalty. ``add_another=False`` moves the cursor past that penalty;
        ``True`` appends a new stroke and moves the cursor to it. Returns the
        appended stroke, if any.
        """

        lie = Lie(lie)
        index = self._index_of(shot_id)
        shot = self._all()[index]
        if not shot.is_stroke:
            raise SequencerError("only strokes have a lie")

        if lie not in HAZARD_LIES:
            shot.lie = lie
            return None

        if shot.outcome_direction == OutcomeDirection.PENALTY:
            raise SequencerError("a penalty shot cannot be moved into a hazard")
        if add_another is None:
            raise DecisionRequired("a hazard lie needs an add_another decision")

        shot.lie = lie
        sequence = self._all()
        penalty_index: int | None = None
        if index + 1 < len(sequence):
            penalty_index = index + 1
            penalty = sequence[penalty_index]
            penalty.outcome_direction = OutcomeDirection.PENALTY
            penalty.poor_shot_flag = False

        if not add_another:
            skip_to = penalty_index + 1 if penalty_index is not None else index + 1
            self._cursor = self._clamp(skip_to)
            return None

        club = shot.club if lie == Lie.OB and shot.club else RECOVERY_CLUB
        return self.add_stroke(club=club)

    def set_putt_distance(self, shot_id: str, distance: PuttDistance | str) -> Shot:
        shot = self.shot(shot_id)
        if not shot.is_putt:
            raise SequencerError("only putts have a putt distance")
        shot.putt_distance = PuttDistance(distance)
        return shot

    def set_club(self, shot_id: str, club: str) -> Shot:
        shot = self.shot(shot_id)
        if not shot.is_stroke:
            raise SequencerError("only strokes have a club")
        shot.club = club
        return shot

    # Internal helpers
    def _all(self) -> list[Shot]:
        return [*self._strokes, *self._putts]

    def _index_of(self, shot_id: str) -> int:
        for index, shot in enumerate(self._all()):
            if shot.id == shot_id:
                return index
        raise ShotNotFound(shot_id)

    def _clamp(self, index: int) -> int | None:
        if self.total == 0:
            return None
        return max(0, min(index, self.total - 1))


def _new_id(kind: ShotKind) -> str:
    return f"{kind.value}-{uuid.uuid4().hex[:12]}"


def _default_putts(now: int) -> list[Shot]:
    return [
        Shot(
            id=_new_id(ShotKind.PUTT),
            kind=ShotKind.PUTT,
            outcome_direction=OutcomeDirection.GOOD,
            putt_distance=(
                PuttDistance.UNDER_4FT if index == 1 else PuttDistance.FT_5_TO_10
            ),
            timestamp=now,
        )
        for index in range(EXPECTED_PUTT_COUNT)
    ]


__all__ = [
    "EXPECTED_PUTT_COUNT",
    "SequencerError",
    "ShotNotFound",
    "DecisionRequired",
    "ShotSlot",
    "ShotSequencer",
    "expected_stroke_count",
]
