from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Settings


DEFAULT_CLUBS = [
    "Driver",
    "3-Wood",
    "5-Wood",
    "4-Iron",
    "5-Iron",
    "6-Iron",
    "7-Iron",
    "8-Iron",
    "9-Iron",
    "Pitching Wedge",
    "Gap Wedge",
    "Sand Wedge",
    "Lob Wedge",
    "Putter",
]

# Used when a setting slot is unconfigured.
FALLBACK_PAR5_CLUBS = ("Driver", "7-Iron", "9-Iron")
FALLBACK_PAR4_CLUBS = ("Driver", "9-Iron")
FALLBACK_PAR3_CLUBS = ("7-Iron",)
FALLBACK_CLUB = "Driver"

# Default club for an extra shot after a poor shot or a water ball.
RECOVERY_CLUB = "Gap Wedge"

# Bag order used when listing per-club statistics.
CLUB_ORDER = [
    "Driver",
    "3-Wood",
    "5-Wood",
    "7-Wood",
    "1-Iron",
    "2-Iron",
    "3-Iron",
    "4-Iron",
    "5-Iron",
    "6-Iron",
    "7-Iron",
    "8-Iron",
    "9-Iron",
    "Pitching Wedge",
    "PW",
    "Gap Wedge",
    "Sand Wedge",
    "SW",
    "Lob Wedge",
    "LW",
    "Putter",
]


def default_club(
    par: int, stroke_number: int, settings: "Settings | None" = None
) -> str:
    """Return the club to pre-select for the ``stroke_number``-th stroke of a hole."""

    clubs = settings.default_clubs_by_par if settings is not None else None

    if par == 5:
        if stroke_number <= 1:
            chosen = clubs.par5.shot1 if clubs else None
            return chosen or FALLBACK_PAR5_CLUBS[0]
        if stroke_number == 2:
            chosen = clubs.par5.shot2 if clubs else None
            return chosen or FALLBACK_PAR5_CLUBS[1]
        chosen = clubs.par5.shot3 if clubs else None
        return chosen or FALLBACK_PAR5_CLUBS[2]

    if par == 4:
        if stroke_number <= 1:
            chosen = clubs.par4.shot1 if clubs else None
            return chosen or FALLBACK_PAR4_CLUBS[0]
        chosen = clubs.par4.shot2 if clubs else None
        return chosen or FALLBACK_PAR4_CLUBS[1]

    if par == 3:
        chosen = clubs.par3.shot1 if clubs else None
        return chosen or FALLBACK_PAR3_CLUBS[0]

    return FALLBACK_CLUB


def club_sort_key(club: str) -> tuple[int, str]:
    try:
        return (CLUB_ORDER.index(club), "")
    except ValueError:
        return (len(CLUB_ORDER), club)


__all__ = [
    "DEFAULT_CLUBS",
    "FALLBACK_PAR5_CLUBS",
    "FALLBACK_PAR4_CLUBS",
    "FALLBACK_PAR3_CLUBS",
    "FALLBACK_CLUB",
    "RECOVERY_CLUB",
    "CLUB_ORDER",
    "default_club",
    "club_sort_key",
]
