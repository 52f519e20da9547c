from __future__ import annotations

from pydantic import BaseModel, Field

from timetabler.schemas.batch import Batch
from timetabler.schemas.classroom import Classroom
from timetabler.schemas.timetable import CandidateTimetable, ConstraintViolation


class GenerationSettings(BaseModel):
    attempts: int = Field(default=3, ge=1, le=10)
    random_seed: int | None = Field(default=None, alias="randomSeed", ge=0, le=2_000_000_000)
    enforce_weekly_load_limit: bool = Field(default=True, alias="enforceWeeklyLoadLimit")

    model_config = {"populate_by_name": True}


class GenerateTimetableRequest(BaseModel):
    semester: int = Field(ge=1, le=8)
    name: str = Field(min_length=1, max_length=200)
    batches: list[Batch] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    persist: bool = False
    settings: GenerationSettings | None = None


class GenerateTimetableResponse(BaseModel):
    message: str
    timetables: list[CandidateTimetable]
    violations: list[ConstraintViolation] = Field(default_factory=list)
    persisted_ids: list[str] = Field(default_factory=list, alias="persistedIds")
    runtime_ms: int = Field(alias="runtimeMs", ge=0)

    model_config = {"populate_by_name": True}
