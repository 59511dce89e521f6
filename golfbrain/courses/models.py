from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_HOLES = 18


class Hole(BaseModel):
    number: int = Field(ge=1, le=MAX_HOLES)
    par: int = Field(ge=3, le=5)
    stroke_index: int = Field(alias="strokeIndex", ge=1, le=MAX_HOLES)
    distance_yards: Optional[int] = Field(default=None, alias="distanceYards")
    todays_distance: Optional[int] = Field(default=None, alias="todaysDistance")

    model_config = ConfigDict(populate_by_name=True)


class Course(BaseModel):
    id: str
    name: str
    holes: List[Hole] = Field(default_factory=list)
    created_at: int = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    def hole(self, number: int) -> Hole | None:
        for hole in self.holes:
            if hole.number == number:
                return hole
        return None

    @property
    def total_par(self) -> int:
        return sum(hole.par for hole in self.holes)


__all__ = ["MAX_HOLES", "Hole", "Course"]
