from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from timetabler.models.timetable import TimetableStatus


class ViolationType(str, Enum):
    INSUFFICIENT_SLOTS = "INSUFFICIENT_SLOTS"
    DURATION_INSUFFICIENT = "DURATION_INSUFFICIENT"
    NO_FACULTY_ASSIGNED = "NO_FACULTY_ASSIGNED"
    NO_FACULTY_AVAILABLE = "NO_FACULTY_AVAILABLE"
    WRONG_CLASSROOM_TYPE = "WRONG_CLASSROOM_TYPE"
    INCOMPLETE_THEORY_CUM_PRACTICAL = "INCOMPLETE_THEORY_CUM_PRACTICAL"
    INSUFFICIENT_FREE_PERIODS = "INSUFFICIENT_FREE_PERIODS"


class ConstraintViolation(BaseModel):
    type: ViolationType
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class TimetableEntry(BaseModel):
    batch_id: str = Field(alias="batchId")
    subject_id: str = Field(alias="subjectId")
    faculty_id: str = Field(alias="facultyId")
    classroom_id: str = Field(alias="classroomId")
    day_of_week: int = Field(alias="dayOfWeek", ge=0, le=6)
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    model_config = {"populate_by_name": True, "frozen": True, "from_attributes": True}


class TimetableMetadata(BaseModel):
    generated_at: datetime = Field(alias="generatedAt")
    constraints_violated: int = Field(alias="constraintsViolated", ge=0)
    total_entries: int = Field(alias="totalEntries", ge=0)

    model_config = {"populate_by_name": True}


class CandidateTimetable(BaseModel):
    name: str
    semester: int
    attempt: int = Field(ge=1)
    entries: list[TimetableEntry] = Field(default_factory=list)
    score: float = 0.0
    # Unclamped score used for ranking; ``score`` is capped at 100.
    raw_score: float | None = Field(default=None, alias="rawScore")
    status: TimetableStatus = TimetableStatus.DRAFT
    metadata: TimetableMetadata
    violations: list[ConstraintViolation] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class GenerationResult(BaseModel):
    """Outcome of one generation request.

    ``success`` is False only when every attempt produced zero entries; in that
    case ``candidates`` is empty and ``violations`` explains why.
    """

    success: bool
    candidates: list[CandidateTimetable] = Field(default_factory=list)
    violations: list[ConstraintViolation] = Field(default_factory=list)


class TimetableEntryOut(TimetableEntry):
    id: str


class TimetableSummaryOut(BaseModel):
    id: str
    name: str
    semester: int
    status: TimetableStatus
    score: float | None = None
    metadata: dict = Field(default_factory=dict, validation_alias="generation_metadata")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    approved_at: datetime | None = Field(default=None, alias="approvedAt")
    approved_by: str | None = Field(default=None, alias="approvedBy")

    model_config = {"populate_by_name": True, "from_attributes": True}


class TimetableOut(TimetableSummaryOut):
    violations: list[dict] = Field(default_factory=list)
    entries: list[TimetableEntryOut] = Field(default_factory=list)
