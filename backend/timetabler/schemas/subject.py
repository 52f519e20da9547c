from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from timetabler.schemas.common import TimeWindow
from timetabler.schemas.faculty import Faculty


class SubjectType(str, Enum):
    THEORY = "THEORY"
    PRACTICAL = "PRACTICAL"
    THEORY_CUM_PRACTICAL = "THEORY_CUM_PRACTICAL"

    @property
    def needs_lab(self) -> bool:
        return self is not SubjectType.THEORY


class FixedSlot(TimeWindow):
    """A pinned (day, start, end) tried before any free placement."""


class Subject(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(default="", max_length=200)
    type: SubjectType = SubjectType.THEORY
    weekly_classes_required: int = Field(alias="weeklyClassesRequired", ge=0, le=40)
    hours_per_session: int = Field(default=1, alias="hoursPerSession", ge=1, le=8)
    total_hours_required: int | None = Field(default=None, alias="totalHoursRequired", ge=0)
    course_duration_weeks: int | None = Field(default=None, alias="courseDurationWeeks", ge=1, le=52)
    fixed_slot: FixedSlot | None = Field(default=None, alias="fixedSlot")
    faculties: tuple[Faculty, ...] = ()

    model_config = {"populate_by_name": True, "frozen": True, "from_attributes": True}

    @property
    def display_name(self) -> str:
        return self.name or self.code
