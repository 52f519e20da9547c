import logging
from time import perf_counter

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from timetabler.api.deps import get_db
from timetabler.core.config import get_settings
from timetabler.core.exceptions import GenerationFailedError
from timetabler.models.timetable import TimetableStatus
from timetabler.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse, GenerationSettings
from timetabler.schemas.timetable import TimetableOut, TimetableSummaryOut
from timetabler.services import timetable_store
from timetabler.services.timetable_generator import TimetableGenerator

router = APIRouter()
logger = logging.getLogger(__name__)


def _generation_settings(payload: GenerateTimetableRequest) -> GenerationSettings:
    if payload.settings is not None:
        return payload.settings
    settings = get_settings()
    return GenerationSettings(attempts=settings.generation_attempts, random_seed=settings.random_seed)


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate_timetables(payload: GenerateTimetableRequest, db: Session = Depends(get_db)) -> GenerateTimetableResponse:
    started = perf_counter()
    generator = TimetableGenerator(settings=_generation_settings(payload))
    result = generator.generate(payload.batches, payload.classrooms, payload.semester, payload.name)
    if not result.success:
        raise GenerationFailedError([item.model_dump(mode="json") for item in result.violations])

    persisted_ids: list[str] = []
    if payload.persist:
        persisted_ids = [record.id for record in timetable_store.save_candidates(db, result.candidates)]

    runtime_ms = int((perf_counter() - started) * 1000)
    logger.info(
        "Generated %d timetable option(s) for semester %d in %d ms",
        len(result.candidates),
        payload.semester,
        runtime_ms,
    )
    return GenerateTimetableResponse(
        message=f"Generated {len(result.candidates)} timetable options",
        timetables=result.candidates,
        violations=result.violations,
        persisted_ids=persisted_ids,
        runtime_ms=runtime_ms,
    )


@router.get("", response_model=list[TimetableSummaryOut])
def list_timetables(
    semester: int | None = Query(default=None, ge=1, le=8),
    status: TimetableStatus | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TimetableSummaryOut]:
    return timetable_store.list_timetables(db, semester=semester, status=status)


@router.get("/{timetable_id}", response_model=TimetableOut)
def get_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableOut:
    return timetable_store.get_timetable(db, timetable_id)


@router.post("/{timetable_id}/approve", response_model=TimetableSummaryOut)
def approve_timetable(
    timetable_id: str,
    approved_by: str | None = Query(default=None, alias="approvedBy", max_length=36),
    db: Session = Depends(get_db),
) -> TimetableSummaryOut:
    return timetable_store.approve_timetable(db, timetable_id, approved_by=approved_by)


@router.post("/{timetable_id}/lock", response_model=TimetableSummaryOut)
def lock_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableSummaryOut:
    return timetable_store.lock_timetable(db, timetable_id)


@router.delete("/{timetable_id}")
def delete_timetable(timetable_id: str, db: Session = Depends(get_db)) -> dict:
    timetable_store.delete_timetable(db, timetable_id)
    return {"success": True}
