"""Weekly working grid used by the allocation engine.

Two grids share the same working days:

- the standard grid: seven 1-hour periods between 09:00 and 17:15, with a
  short morning break, lunch, and a short afternoon break removed;
- the practical grid: three 2-hour lab blocks aligned with the standard grid.

Grid positions always refer to the standard grid, so a 2-hour block covers
two positions.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from timetabler.schemas.common import DAY_NAMES, parse_time_to_minutes


@dataclass(frozen=True)
class GridSlot:
    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


STANDARD_SLOTS: tuple[GridSlot, ...] = (
    GridSlot("09:00", "10:00"),
    GridSlot("10:00", "11:00"),
    GridSlot("11:15", "12:15"),
    GridSlot("12:15", "13:15"),
    GridSlot("14:00", "15:00"),
    GridSlot("15:00", "16:00"),
    GridSlot("16:15", "17:15"),
)

PRACTICAL_SLOTS: tuple[GridSlot, ...] = (
    GridSlot("09:00", "11:00"),
    GridSlot("11:15", "13:15"),
    GridSlot("14:00", "16:00"),
)

WORKING_DAYS: tuple[int, ...] = (0, 1, 2, 3, 4)


def day_name(day_of_week: int) -> str:
    return DAY_NAMES[day_of_week] if 0 <= day_of_week < len(DAY_NAMES) else str(day_of_week)


@dataclass(frozen=True)
class WeeklyGrid:
    standard_slots: tuple[GridSlot, ...] = STANDARD_SLOTS
    practical_slots: tuple[GridSlot, ...] = PRACTICAL_SLOTS
    working_days: tuple[int, ...] = WORKING_DAYS

    @property
    def periods_per_week(self) -> int:
        return len(self.standard_slots) * len(self.working_days)

    def slots_for(self, practical: bool) -> tuple[GridSlot, ...]:
        return self.practical_slots if practical else self.standard_slots

    def position_of(self, start_time: str) -> int | None:
        for position, slot in enumerate(self.standard_slots):
            if slot.start_time == start_time:
                return position
        return None

    def covered_positions(self, start_time: str, end_time: str) -> list[int]:
        """Standard-grid positions overlapping ``[start_time, end_time)``.

        Grid-aligned sessions cover exactly the periods inside them; an off-grid
        session such as 09:30-10:30 covers both periods it cuts into.
        """
        start = parse_time_to_minutes(start_time)
        end = parse_time_to_minutes(end_time)
        return [
            position
            for position, slot in enumerate(self.standard_slots)
            if slot.start_minutes < end and slot.end_minutes > start
        ]

    def inner_start_times(self, start_time: str, end_time: str) -> list[str]:
        """Start times of the other 1-hour periods a session overlaps."""
        return [
            self.standard_slots[position].start_time
            for position in self.covered_positions(start_time, end_time)
            if self.standard_slots[position].start_time != start_time
        ]

    def reserved_start_times(self, start_time: str, end_time: str) -> list[str]:
        return [start_time, *self.inner_start_times(start_time, end_time)]

    def search_order(self, rng: random.Random, practical: bool) -> list[tuple[int, GridSlot]]:
        """Every (day, slot) pair of the requested grid, shuffled."""
        pairs = [(day, slot) for day in self.working_days for slot in self.slots_for(practical)]
        rng.shuffle(pairs)
        return pairs


DEFAULT_GRID = WeeklyGrid()
