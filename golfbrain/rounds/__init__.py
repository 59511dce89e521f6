from .models import (
    HoleScore,
    Lie,
    OutcomeDirection,
    PuttDistance,
    Round,
    Shot,
    ShotKind,
)
from .scoring import bumps, cumulative_over_par
from .sequencer import ShotSequencer, expected_stroke_count

__all__ = [
    "HoleScore",
    "Lie",
    "OutcomeDirection",
    "PuttDistance",
    "Round",
    "Shot",
    "ShotKind",
    "bumps",
    "cumulative_over_par",
    "ShotSequencer",
    "expected_stroke_count",
]
