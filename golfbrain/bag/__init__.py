from .defaults import DEFAULT_CLUBS, RECOVERY_CLUB, default_club
from .models import DefaultClubsByPar, Settings, coerce_handicap

__all__ = [
    "DEFAULT_CLUBS",
    "RECOVERY_CLUB",
    "default_club",
    "DefaultClubsByPar",
    "Settings",
    "coerce_handicap",
]
