"""Heuristic quality score for a candidate timetable.

The score starts at 100 and is adjusted by:

- ``-violation_penalty`` per violation recorded in the attempt;
- ``-2 x variance`` of each faculty's sessions per working day (population
  variance, so an even spread costs nothing);
- ``+10 x`` the share of available classrooms actually used;
- ``-2`` for every gap longer than an hour between consecutive sessions of a
  batch on the same day.

The reported score is clamped to ``[0, 100]``. Ranking uses the unclamped
value, so candidates that all exceed 100 still order by quality. Both
functions are pure: the same entries and violations always give the same score.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from timetabler.schemas.common import parse_time_to_minutes
from timetabler.schemas.timetable import CandidateTimetable, ConstraintViolation, TimetableEntry
from timetabler.services.time_grid import WORKING_DAYS

BASE_SCORE = 100.0
MAX_SCORE = 100.0
VARIANCE_WEIGHT = 2.0
UTILIZATION_WEIGHT = 10.0
IDLE_GAP_MINUTES = 60
IDLE_GAP_PENALTY = 2.0


def population_variance(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((value - mean) ** 2 for value in values) / len(values)


def workload_variance_penalty(
    entries: Sequence[TimetableEntry],
    working_days: Sequence[int] = WORKING_DAYS,
) -> float:
    day_positions = {day: position for position, day in enumerate(working_days)}
    per_faculty: dict[str, list[int]] = {}
    for entry in entries:
        counts = per_faculty.setdefault(entry.faculty_id, [0] * len(working_days))
        position = day_positions.get(entry.day_of_week)
        if position is not None:
            counts[position] += 1
    return sum(population_variance(counts) * VARIANCE_WEIGHT for counts in per_faculty.values())


def utilization_bonus(entries: Sequence[TimetableEntry], total_classrooms: int) -> float:
    if total_classrooms <= 0:
        return 0.0
    used = {entry.classroom_id for entry in entries}
    return len(used) / total_classrooms * UTILIZATION_WEIGHT


def idle_gap_count(entries: Sequence[TimetableEntry]) -> int:
    by_batch_day: dict[tuple[str, int], list[TimetableEntry]] = defaultdict(list)
    for entry in entries:
        by_batch_day[(entry.batch_id, entry.day_of_week)].append(entry)

    gaps = 0
    for day_entries in by_batch_day.values():
        day_entries.sort(key=lambda item: item.start_time)
        for current, following in zip(day_entries, day_entries[1:]):
            gap = parse_time_to_minutes(following.start_time) - parse_time_to_minutes(current.end_time)
            if gap > IDLE_GAP_MINUTES:
                gaps += 1
    return gaps


def raw_score(
    entries: Sequence[TimetableEntry],
    violations: Sequence[ConstraintViolation],
    total_classrooms: int,
    *,
    violation_penalty: float = 10.0,
    working_days: Sequence[int] = WORKING_DAYS,
) -> float:
    score = BASE_SCORE
    score -= len(violations) * violation_penalty
    score -= workload_variance_penalty(entries, working_days)
    score += utilization_bonus(entries, total_classrooms)
    score -= idle_gap_count(entries) * IDLE_GAP_PENALTY
    return score


def clamp_score(score: float) -> float:
    return min(MAX_SCORE, max(0.0, score))


def score_timetable(
    entries: Sequence[TimetableEntry],
    violations: Sequence[ConstraintViolation],
    total_classrooms: int,
    *,
    violation_penalty: float = 10.0,
    working_days: Sequence[int] = WORKING_DAYS,
) -> float:
    return clamp_score(
        raw_score(
            entries,
            violations,
            total_classrooms,
            violation_penalty=violation_penalty,
            working_days=working_days,
        )
    )


def rank_candidates(candidates: Sequence[CandidateTimetable]) -> list[CandidateTimetable]:
    """Best unclamped score first; equal scores keep generation order."""

    def ranking_key(candidate: CandidateTimetable) -> float:
        return candidate.score if candidate.raw_score is None else candidate.raw_score

    return sorted(candidates, key=ranking_key, reverse=True)
