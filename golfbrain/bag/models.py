from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .defaults import (
    DEFAULT_CLUBS,
    FALLBACK_PAR3_CLUBS,
    FALLBACK_PAR4_CLUBS,
    FALLBACK_PAR5_CLUBS,
)

HANDICAP_MIN = 0
HANDICAP_MAX = 54


class Par5Clubs(BaseModel):
    shot1: str = FALLBACK_PAR5_CLUBS[0]
    shot2: str = FALLBACK_PAR5_CLUBS[1]
    shot3: str = FALLBACK_PAR5_CLUBS[2]


class Par4Clubs(BaseModel):
    shot1: str = FALLBACK_PAR4_CLUBS[0]
    shot2: str = FALLBACK_PAR4_CLUBS[1]


class Par3Clubs(BaseModel):
    shot1: str = FALLBACK_PAR3_CLUBS[0]


class DefaultClubsByPar(BaseModel):
    par5: Par5Clubs = Field(default_factory=Par5Clubs)
    par4: Par4Clubs = Field(default_factory=Par4Clubs)
    par3: Par3Clubs = Field(default_factory=Par3Clubs)


class Settings(BaseModel):
    handicap: Optional[int] = Field(default=None, ge=HANDICAP_MIN, le=HANDICAP_MAX)
    default_clubs_by_par: DefaultClubsByPar = Field(
        default_factory=DefaultClubsByPar,
        alias="defaultClubsByPar",
        validation_alias=AliasChoices(
            "defaultClubsByPar", "default_clubs_by_par", "defaultClubs"
        ),
    )
    clubs: List[str] = Field(default_factory=lambda: list(DEFAULT_CLUBS))

    model_config = ConfigDict(populate_by_name=True)


def coerce_handicap(value: object) -> int | None:
    """Turn raw handicap input into a valid handicap or ``None``.

    Non-numeric input yields ``None`` (no handicap); numbers outside 0..54 are
    clamped. Never raises.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    return max(HANDICAP_MIN, min(HANDICAP_MAX, number))


__all__ = [
    "HANDICAP_MIN",
    "HANDICAP_MAX",
    "Par5Clubs",
    "Par4Clubs",
    "Par3Clubs",
    "DefaultClubsByPar",
    "Settings",
    "coerce_handicap",
]
