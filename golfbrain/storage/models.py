from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from golfbrain.bag.models import Settings, coerce_handicap
from golfbrain.courses.models import Course
from golfbrain.rounds.models import Round


class DataAggregate(BaseModel):
    """Everything the tracker persists under a single store key."""

    courses: List[Course] = Field(default_factory=list)
    rounds: List[Round] = Field(default_factory=list)
    current_round: Optional[Round] = Field(
        default=None,
        alias="currentRound",
        validation_alias=AliasChoices("currentRound", "current_round"),
    )
    settings: Settings = Field(default_factory=Settings)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _coerce_settings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        settings = data.get("settings")
        if isinstance(settings, dict) and "handicap" in settings:
            data = dict(data)
            data["settings"] = {
                **settings,
                "handicap": coerce_handicap(settings.get("handicap")),
            }
        return data

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["DataAggregate"]
