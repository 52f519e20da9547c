"""Per-attempt resource checks: who can teach, where, and whether the day still fits."""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from collections.abc import Sequence

from timetabler.schemas.classroom import Classroom, ClassroomType
from timetabler.schemas.common import windows_allow
from timetabler.schemas.faculty import Faculty
from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.schedule_index import ResourceKind, ScheduleIndex
from timetabler.services.time_grid import GridSlot, WeeklyGrid

logger = logging.getLogger(__name__)


class SlotResolver:
    def __init__(
        self,
        *,
        index: ScheduleIndex,
        classrooms: Sequence[Classroom],
        rng: random.Random,
        enforce_weekly_load_limit: bool = True,
    ) -> None:
        self.index = index
        self.grid: WeeklyGrid = index.grid
        self.classrooms = tuple(classrooms)
        self.random = rng
        self.enforce_weekly_load_limit = enforce_weekly_load_limit
        # (faculty_id, day) -> grid positions covered by each accepted session
        self._faculty_day_sessions: dict[tuple[str, int], list[list[int]]] = defaultdict(list)
        self._faculty_week_load: dict[str, int] = defaultdict(int)

    # ----------------------------
    # Faculty
    # ----------------------------

    def is_faculty_available(self, faculty: Faculty, day_of_week: int, start_time: str) -> bool:
        return windows_allow(faculty.availability, day_of_week, start_time)

    def select_faculty(self, faculties: Sequence[Faculty], day_of_week: int, start_time: str) -> Faculty | None:
        available = [item for item in faculties if self.is_faculty_available(item, day_of_week, start_time)]
        if not available:
            return None
        return self.random.choice(available)

    def pick_available_faculty(self, faculties: Sequence[Faculty]) -> Faculty | None:
        """Pick one faculty that can teach somewhere in the working week."""
        start_times = {slot.start_time for slot in (*self.grid.standard_slots, *self.grid.practical_slots)}
        available = [
            item
            for item in faculties
            if self.within_weekly_load(item)
            and any(
                self.is_faculty_available(item, day, start_time)
                for day in self.grid.working_days
                for start_time in start_times
            )
        ]
        if not available:
            return None
        return self.random.choice(available)

    def sessions_on_day(self, faculty_id: str, day_of_week: int) -> int:
        return len(self._faculty_day_sessions.get((faculty_id, day_of_week), ()))

    def within_daily_cap(self, faculty: Faculty, day_of_week: int) -> bool:
        return self.sessions_on_day(faculty.id, day_of_week) < faculty.max_classes_per_day

    def within_weekly_load(self, faculty: Faculty) -> bool:
        if not self.enforce_weekly_load_limit:
            return True
        return self._faculty_week_load[faculty.id] < faculty.weekly_load_limit

    def follows_consecutive_rule(self, faculty_id: str, day_of_week: int, slot: GridSlot) -> bool:
        """A faculty's sessions on one day must form an unbroken run of grid positions."""
        sessions = self._faculty_day_sessions.get((faculty_id, day_of_week))
        if not sessions:
            return True
        taken = sorted(position for positions in sessions for position in positions)
        wanted = self.grid.covered_positions(slot.start_time, slot.end_time)
        if not taken or not wanted:
            return False
        return min(wanted) == taken[-1] + 1 or max(wanted) == taken[0] - 1

    def faculty_can_take(self, faculty: Faculty, day_of_week: int, slot: GridSlot) -> bool:
        return (
            self.follows_consecutive_rule(faculty.id, day_of_week, slot)
            and self.within_daily_cap(faculty, day_of_week)
            and self.within_weekly_load(faculty)
        )

    # ----------------------------
    # Classrooms
    # ----------------------------

    def _room_is_usable(
        self,
        room: Classroom,
        required_capacity: int,
        day_of_week: int,
        slot: GridSlot,
        room_type: ClassroomType | None,
    ) -> bool:
        if room.capacity < required_capacity:
            return False
        if room_type is not None and room.type != room_type:
            return False
        if not windows_allow(room.availability, day_of_week, slot.start_time):
            return False
        return not any(
            self.index.occupied(ResourceKind.CLASSROOM, room.id, day_of_week, start_time)
            for start_time in self.grid.reserved_start_times(slot.start_time, slot.end_time)
        )

    def find_classroom(
        self,
        required_capacity: int,
        day_of_week: int,
        slot: GridSlot,
        preferred_type: ClassroomType,
    ) -> tuple[Classroom | None, bool]:
        """Smallest free room that fits, and whether it had to break the type preference."""
        suitable = [
            room
            for room in self.classrooms
            if self._room_is_usable(room, required_capacity, day_of_week, slot, preferred_type)
        ]
        mismatched = False
        if not suitable:
            suitable = [
                room for room in self.classrooms if self._room_is_usable(room, required_capacity, day_of_week, slot, None)
            ]
            mismatched = bool(suitable)
            if mismatched:
                logger.debug(
                    "No free %s room on day %d at %s; falling back to any room type",
                    preferred_type.value,
                    day_of_week,
                    slot.start_time,
                )
        if not suitable:
            return None, False
        return min(suitable, key=lambda room: room.capacity), mismatched

    # ----------------------------
    # Acceptance
    # ----------------------------

    def is_conflict_free(self, entry: TimetableEntry) -> bool:
        return not self.index.conflicts_with(entry)

    def commit(self, entry: TimetableEntry) -> None:
        self.index.reserve_entry(entry)
        positions = self.grid.covered_positions(entry.start_time, entry.end_time)
        self._faculty_day_sessions[(entry.faculty_id, entry.day_of_week)].append(positions)
        self._faculty_week_load[entry.faculty_id] += 1
