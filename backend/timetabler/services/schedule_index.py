from __future__ import annotations

from enum import Enum

from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.time_grid import DEFAULT_GRID, WeeklyGrid


class ResourceKind(str, Enum):
    BATCH = "batch"
    FACULTY = "faculty"
    CLASSROOM = "classroom"


IndexKey = tuple[ResourceKind, str, int, str]


class ScheduleIndex:
    """Occupancy table for one generation attempt.

    Keys are ``(kind, resource_id, day_of_week, start_time)``. There is no way
    to release a key; an attempt builds a fresh index and throws it away.
    """

    def __init__(self, grid: WeeklyGrid = DEFAULT_GRID) -> None:
        self.grid = grid
        self._occupied: set[IndexKey] = set()

    def __len__(self) -> int:
        return len(self._occupied)

    def __contains__(self, key: IndexKey) -> bool:
        return key in self._occupied

    def occupied(self, kind: ResourceKind, resource_id: str, day_of_week: int, start_time: str) -> bool:
        return (ResourceKind(kind), resource_id, day_of_week, start_time) in self._occupied

    def reserve(self, kind: ResourceKind, resource_id: str, day_of_week: int, start_time: str) -> None:
        self._occupied.add((ResourceKind(kind), resource_id, day_of_week, start_time))

    def entry_keys(self, entry: TimetableEntry) -> list[IndexKey]:
        # A 2-hour block also holds every 1-hour period inside it.
        start_times = self.grid.reserved_start_times(entry.start_time, entry.end_time)
        resources = (
            (ResourceKind.BATCH, entry.batch_id),
            (ResourceKind.FACULTY, entry.faculty_id),
            (ResourceKind.CLASSROOM, entry.classroom_id),
        )
        return [
            (kind, resource_id, entry.day_of_week, start_time)
            for kind, resource_id in resources
            for start_time in start_times
        ]

    def conflicts_with(self, entry: TimetableEntry) -> bool:
        return any(key in self._occupied for key in self.entry_keys(entry))

    def reserve_entry(self, entry: TimetableEntry) -> None:
        for key in self.entry_keys(entry):
            self._occupied.add(key)
