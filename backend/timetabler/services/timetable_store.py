"""Persistence of generated candidates and their approval lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from timetabler.core.exceptions import InvalidStateError, ResourceNotFoundError
from timetabler.models.timetable import Timetable, TimetableEntryRecord, TimetableStatus
from timetabler.schemas.timetable import CandidateTimetable

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = {
    "batch_id",
    "subject_id",
    "faculty_id",
    "classroom_id",
    "day_of_week",
    "start_time",
    "end_time",
}


def save_candidates(db: Session, candidates: Sequence[CandidateTimetable]) -> list[Timetable]:
    records: list[Timetable] = []
    for candidate in candidates:
        record = Timetable(
            name=candidate.name,
            semester=candidate.semester,
            status=TimetableStatus.DRAFT,
            score=candidate.score,
            generation_metadata=candidate.metadata.model_dump(mode="json", by_alias=True),
            violations=[item.model_dump(mode="json") for item in candidate.violations],
            entries=[
                TimetableEntryRecord(**entry.model_dump(include=_ENTRY_FIELDS))
                for entry in candidate.entries
            ],
        )
        db.add(record)
        records.append(record)
    db.commit()
    for record in records:
        db.refresh(record)
    logger.info("Saved %d generated timetable(s)", len(records))
    return records


def list_timetables(
    db: Session,
    *,
    semester: int | None = None,
    status: TimetableStatus | None = None,
) -> list[Timetable]:
    query = select(Timetable).order_by(Timetable.created_at.desc())
    if semester is not None:
        query = query.where(Timetable.semester == semester)
    if status is not None:
        query = query.where(Timetable.status == status)
    return list(db.execute(query).scalars())


def get_timetable(db: Session, timetable_id: str) -> Timetable:
    record = db.execute(
        select(Timetable).options(selectinload(Timetable.entries)).where(Timetable.id == timetable_id)
    ).scalar_one_or_none()
    if record is None:
        raise ResourceNotFoundError("Timetable", timetable_id)
    return record


def approve_timetable(db: Session, timetable_id: str, approved_by: str | None = None) -> Timetable:
    record = get_timetable(db, timetable_id)
    if record.status == TimetableStatus.LOCKED:
        raise InvalidStateError("Timetable is already locked", details={"id": timetable_id})
    record.status = TimetableStatus.APPROVED
    record.approved_at = datetime.now(timezone.utc)
    record.approved_by = approved_by
    db.commit()
    db.refresh(record)
    logger.info("Timetable %s approved", timetable_id)
    return record


def lock_timetable(db: Session, timetable_id: str) -> Timetable:
    record = get_timetable(db, timetable_id)
    if record.status != TimetableStatus.APPROVED:
        raise InvalidStateError(
            "Only approved timetables can be locked",
            details={"id": timetable_id, "status": record.status.value},
        )
    record.status = TimetableStatus.LOCKED
    db.commit()
    db.refresh(record)
    logger.info("Timetable %s locked", timetable_id)
    return record


def delete_timetable(db: Session, timetable_id: str) -> None:
    record = get_timetable(db, timetable_id)
    if record.status == TimetableStatus.LOCKED:
        raise InvalidStateError("Cannot delete a locked timetable", details={"id": timetable_id})
    db.delete(record)
    db.commit()
    logger.info("Timetable %s deleted", timetable_id)
