"""Placement of one subject's weekly sessions for one batch.

Order of work for a (batch, subject) pair:

1. the subject's fixed slot, if it has one, is tried exactly once;
2. THEORY_CUM_PRACTICAL subjects pin one faculty for every session and split
   the remaining hours 1:2 into 1-hour theory periods and 2-hour lab blocks,
   placing the lab blocks first since they are the harder ones to fit;
3. PRACTICAL subjects fill the rest from the 2-hour grid;
4. THEORY subjects fill the rest from the 1-hour grid, choosing a faculty per
   session.

Every failure is recorded as a violation on the attempt; nothing here raises.
"""

from __future__ import annotations

import logging
import math

from timetabler.schemas.batch import Batch
from timetabler.schemas.classroom import ClassroomType
from timetabler.schemas.faculty import Faculty
from timetabler.schemas.subject import Subject, SubjectType
from timetabler.schemas.timetable import ConstraintViolation, TimetableEntry, ViolationType
from timetabler.services.slot_resolver import SlotResolver
from timetabler.services.time_grid import GridSlot, day_name

logger = logging.getLogger(__name__)


def split_theory_practical(total_hours: int) -> tuple[int, int]:
    """Split hours 1:2 into (theory hours, practical hours)."""
    theory_hours = total_hours // 3
    return theory_hours, total_hours - theory_hours


class SubjectPlacer:
    def __init__(
        self,
        resolver: SlotResolver,
        entries: list[TimetableEntry],
        violations: list[ConstraintViolation],
    ) -> None:
        self.resolver = resolver
        self.grid = resolver.grid
        self.entries = entries
        self.violations = violations

    def _record(self, kind: ViolationType, message: str, **details) -> None:
        logger.debug("%s: %s", kind.value, message)
        self.violations.append(ConstraintViolation(type=kind, message=message, details=details))

    def place(self, batch: Batch, subject: Subject) -> int:
        """Schedule as many sessions of ``subject`` for ``batch`` as fit; return the count."""
        if not subject.faculties:
            self._record(
                ViolationType.NO_FACULTY_ASSIGNED,
                f"No faculty assigned to {subject.display_name} ({subject.code})",
                subject=subject.display_name,
                code=subject.code,
                batch=batch.name,
                type=subject.type.value,
            )
            return 0

        pinned: Faculty | None = None
        if subject.type is SubjectType.THEORY_CUM_PRACTICAL:
            pinned = self.resolver.pick_available_faculty(subject.faculties)
            if pinned is None:
                self._record(
                    ViolationType.NO_FACULTY_AVAILABLE,
                    f"No faculty available for {subject.display_name} ({subject.code})",
                    subject=subject.display_name,
                    code=subject.code,
                    batch=batch.name,
                    type=subject.type.value,
                    facultiesChecked=len(subject.faculties),
                )
                return 0

        scheduled = 0
        if subject.fixed_slot is not None and self._place_fixed(batch, subject, pinned):
            scheduled += 1

        remaining = max(0, subject.weekly_classes_required - scheduled)

        if subject.type is SubjectType.THEORY_CUM_PRACTICAL:
            return self._place_theory_cum_practical(batch, subject, pinned, scheduled, remaining)

        practical = subject.type is SubjectType.PRACTICAL
        for _ in range(remaining):
            if not self.place_session(batch, subject, practical=practical):
                break
            scheduled += 1

        if scheduled < subject.weekly_classes_required:
            self._record(
                ViolationType.INSUFFICIENT_SLOTS,
                f"Could not schedule all classes for {subject.display_name}",
                batch=batch.name,
                subject=subject.display_name,
                required=subject.weekly_classes_required,
                scheduled=scheduled,
            )
        return scheduled

    def _place_theory_cum_practical(
        self,
        batch: Batch,
        subject: Subject,
        faculty: Faculty,
        scheduled: int,
        remaining: int,
    ) -> int:
        """Split the remaining hours 1:2 and place them with one pinned faculty.

        Lab blocks are placed before the theory periods rather than after them,
        so when the week runs short the sessions left unscheduled are 1-hour
        theory periods, not 2-hour labs.
        """
        total_hours = remaining * subject.hours_per_session
        theory_hours, practical_hours = split_theory_practical(total_hours)
        practical_sessions = math.ceil(practical_hours / 2)
        logger.debug(
            "Scheduling %s (%s): %d total hours = %d theory + %d practical",
            subject.display_name,
            subject.code,
            total_hours,
            theory_hours,
            practical_hours,
        )

        # Best effort: a session that does not fit is skipped, not retried.
        for number in range(practical_sessions):
            if self.place_session(batch, subject, practical=True, faculty=faculty):
                scheduled += 1
            else:
                logger.debug("Failed to schedule practical session %d for %s", number + 1, subject.code)

        for number in range(theory_hours):
            if self.place_session(batch, subject, practical=False, faculty=faculty):
                scheduled += 1
            else:
                logger.debug("Failed to schedule theory session %d for %s", number + 1, subject.code)

        if scheduled < subject.weekly_classes_required:
            self._record(
                ViolationType.INCOMPLETE_THEORY_CUM_PRACTICAL,
                f"Could not schedule all classes for {subject.display_name}",
                subject=subject.display_name,
                code=subject.code,
                batch=batch.name,
                required=subject.weekly_classes_required,
                scheduled=scheduled,
                theoryHours=theory_hours,
                practicalHours=practical_hours,
                faculty=faculty.name,
            )
        return scheduled

    def _place_fixed(self, batch: Batch, subject: Subject, faculty: Faculty | None) -> bool:
        fixed = subject.fixed_slot
        slot = GridSlot(fixed.start_time, fixed.end_time)
        if not self.grid.covered_positions(slot.start_time, slot.end_time):
            logger.debug(
                "Fixed slot %s %s-%s for %s lies outside the teaching grid; ignoring it",
                day_name(fixed.day_of_week),
                fixed.start_time,
                fixed.end_time,
                subject.code,
            )
            return False
        room_type = ClassroomType.LAB if subject.type.needs_lab else ClassroomType.CLASSROOM
        placed = self.try_slot(batch, subject, fixed.day_of_week, slot, room_type, faculty=faculty)
        if placed is None:
            logger.debug(
                "Fixed slot %s %s-%s unavailable for %s",
                day_name(fixed.day_of_week),
                fixed.start_time,
                fixed.end_time,
                subject.code,
            )
        return placed is not None

    def place_session(
        self,
        batch: Batch,
        subject: Subject,
        *,
        practical: bool,
        faculty: Faculty | None = None,
    ) -> TimetableEntry | None:
        """Try every (day, slot) of the grid in random order until one session fits."""
        room_type = ClassroomType.LAB if practical else ClassroomType.CLASSROOM
        for day, slot in self.grid.search_order(self.resolver.random, practical):
            entry = self.try_slot(batch, subject, day, slot, room_type, faculty=faculty)
            if entry is not None:
                return entry
        return None

    def try_slot(
        self,
        batch: Batch,
        subject: Subject,
        day_of_week: int,
        slot: GridSlot,
        room_type: ClassroomType,
        *,
        faculty: Faculty | None = None,
    ) -> TimetableEntry | None:
        resolver = self.resolver
        if faculty is not None:
            if not resolver.is_faculty_available(faculty, day_of_week, slot.start_time):
                return None
        else:
            faculty = resolver.select_faculty(subject.faculties, day_of_week, slot.start_time)
            if faculty is None:
                return None

        if not resolver.faculty_can_take(faculty, day_of_week, slot):
            return None

        classroom, mismatched = resolver.find_classroom(batch.batch_size, day_of_week, slot, room_type)
        if classroom is None:
            return None

        entry = TimetableEntry(
            batch_id=batch.id,
            subject_id=subject.id,
            faculty_id=faculty.id,
            classroom_id=classroom.id,
            day_of_week=day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
        )
        if not resolver.is_conflict_free(entry):
            return None

        resolver.commit(entry)
        self.entries.append(entry)
        if mismatched:
            self._record(
                ViolationType.WRONG_CLASSROOM_TYPE,
                f"{room_type.value} class using {classroom.type.value} room",
                expectedType=room_type.value,
                actualType=classroom.type.value,
                classroom=classroom.room_id,
                batch=batch.name,
                subject=subject.code,
            )
        return entry
