from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import datetime, timezone

from timetabler.core.config import Settings, get_settings
from timetabler.core.exceptions import InsufficientDataError
from timetabler.schemas.batch import Batch
from timetabler.schemas.classroom import Classroom
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.subject import Subject
from timetabler.schemas.timetable import (
    CandidateTimetable,
    ConstraintViolation,
    GenerationResult,
    TimetableEntry,
    TimetableMetadata,
    ViolationType,
)
from timetabler.services.schedule_index import ScheduleIndex
from timetabler.services.scoring import clamp_score, rank_candidates, raw_score
from timetabler.services.slot_resolver import SlotResolver
from timetabler.services.subject_placement import SubjectPlacer
from timetabler.services.time_grid import DEFAULT_GRID, WeeklyGrid

logger = logging.getLogger(__name__)


class TimetableGenerator:
    """Runs independent greedy attempts and returns the non-empty ones ranked by score.

    Each attempt gets a fresh ``ScheduleIndex`` and ``SlotResolver``; the only
    thing shared between attempts is the random source, so a seeded
    ``random.Random`` reproduces a whole run.
    """

    def __init__(
        self,
        settings: GenerationSettings | None = None,
        rng: random.Random | None = None,
        *,
        app_settings: Settings | None = None,
        grid: WeeklyGrid = DEFAULT_GRID,
    ) -> None:
        self.app_settings = app_settings or get_settings()
        self.settings = settings or GenerationSettings(
            attempts=self.app_settings.generation_attempts,
            random_seed=self.app_settings.random_seed,
        )
        self.random = rng if rng is not None else random.Random(self.settings.random_seed)
        self.grid = grid
        self._violations: list[ConstraintViolation] = []

    def list_violations(self) -> list[ConstraintViolation]:
        return list(self._violations)

    def generate(
        self,
        batches: Sequence[Batch],
        classrooms: Sequence[Classroom],
        semester: int,
        name: str,
    ) -> GenerationResult:
        if not batches:
            raise InsufficientDataError("No batches supplied for timetable generation")
        if not classrooms:
            raise InsufficientDataError("No classrooms available for timetable generation")

        self._violations = []
        candidates: list[CandidateTimetable] = []
        for attempt in range(1, self.settings.attempts + 1):
            candidate, violations = self._run_attempt(attempt, batches, classrooms, semester, name)
            self._violations.extend(violations)
            if candidate is None:
                logger.info("Attempt %d produced no entries (%d violations)", attempt, len(violations))
                continue
            logger.info(
                "Attempt %d produced %d entries, %d violations, score %.2f",
                attempt,
                len(candidate.entries),
                len(violations),
                candidate.score,
            )
            candidates.append(candidate)

        if not candidates:
            logger.warning(
                "Timetable generation failed: %d attempts, %d violations",
                self.settings.attempts,
                len(self._violations),
            )
            return GenerationResult(success=False, violations=self.list_violations())

        return GenerationResult(
            success=True,
            candidates=rank_candidates(candidates),
            violations=self.list_violations(),
        )

    def _run_attempt(
        self,
        attempt: int,
        batches: Sequence[Batch],
        classrooms: Sequence[Classroom],
        semester: int,
        name: str,
    ) -> tuple[CandidateTimetable | None, list[ConstraintViolation]]:
        entries: list[TimetableEntry] = []
        violations: list[ConstraintViolation] = []
        resolver = SlotResolver(
            index=ScheduleIndex(self.grid),
            classrooms=classrooms,
            rng=self.random,
            enforce_weekly_load_limit=self.settings.enforce_weekly_load_limit,
        )
        placer = SubjectPlacer(resolver, entries, violations)

        ordered = list(batches)
        self.random.shuffle(ordered)
        for batch in ordered:
            logger.debug("Processing batch %s (%d subjects)", batch.name, len(batch.subjects))
            for subject in batch.subjects:
                self._check_duration(batch, subject, violations)
                scheduled = placer.place(batch, subject)
                logger.debug(
                    "  %s (%s, %s): %d / %d classes scheduled",
                    subject.display_name,
                    subject.code,
                    subject.type.value,
                    scheduled,
                    subject.weekly_classes_required,
                )
            self._check_free_periods(batch, entries, violations)

        if not entries:
            return None, violations

        unclamped = raw_score(
            entries,
            violations,
            len(classrooms),
            violation_penalty=self.app_settings.violation_penalty,
            working_days=self.grid.working_days,
        )
        candidate = CandidateTimetable(
            name=f"{name} - Option {attempt}",
            semester=semester,
            attempt=attempt,
            entries=entries,
            score=clamp_score(unclamped),
            raw_score=unclamped,
            metadata=TimetableMetadata(
                generated_at=datetime.now(timezone.utc),
                constraints_violated=len(violations),
                total_entries=len(entries),
            ),
            violations=violations,
        )
        return candidate, violations

    def _check_duration(self, batch: Batch, subject: Subject, violations: list[ConstraintViolation]) -> None:
        weeks = self.app_settings.semester_duration_weeks
        max_possible = subject.weekly_classes_required * weeks
        total_needed = subject.total_hours_required or max_possible
        if max_possible < total_needed:
            violations.append(
                ConstraintViolation(
                    type=ViolationType.DURATION_INSUFFICIENT,
                    message=f"{subject.display_name} cannot be completed within semester duration",
                    details={
                        "batch": batch.name,
                        "subject": subject.display_name,
                        "totalHoursNeeded": total_needed,
                        "maxPossibleHours": max_possible,
                        "semesterWeeks": weeks,
                    },
                )
            )

    def _check_free_periods(
        self,
        batch: Batch,
        entries: Sequence[TimetableEntry],
        violations: list[ConstraintViolation],
    ) -> None:
        scheduled = sum(1 for entry in entries if entry.batch_id == batch.id)
        free_periods = self.grid.periods_per_week - scheduled
        minimum = self.app_settings.min_free_periods_per_week
        if free_periods < minimum:
            violations.append(
                ConstraintViolation(
                    type=ViolationType.INSUFFICIENT_FREE_PERIODS,
                    message=f"Batch {batch.name} has insufficient free periods",
                    details={
                        "batch": batch.name,
                        "freePeriods": free_periods,
                        "minimumRequired": minimum,
                    },
                )
            )
