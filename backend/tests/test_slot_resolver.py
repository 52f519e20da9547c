import random

from timetabler.schemas.classroom import Classroom, ClassroomType
from timetabler.schemas.common import AvailabilityWindow
from timetabler.schemas.faculty import Faculty
from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.schedule_index import ResourceKind, ScheduleIndex
from timetabler.services.slot_resolver import SlotResolver
from timetabler.services.time_grid import PRACTICAL_SLOTS, STANDARD_SLOTS


def build_resolver(classrooms=(), seed=1, enforce_weekly_load_limit=True):
    return SlotResolver(
        index=ScheduleIndex(),
        classrooms=classrooms,
        rng=random.Random(seed),
        enforce_weekly_load_limit=enforce_weekly_load_limit,
    )


def window(day, start, end):
    return AvailabilityWindow(day_of_week=day, start_time=start, end_time=end)


def room(room_id, capacity, room_type=ClassroomType.CLASSROOM, availability=()):
    return Classroom(id=room_id, room_id=room_id.upper(), capacity=capacity, type=room_type, availability=availability)


def commit_session(resolver, faculty_id, day, slot, classroom_id="r-x"):
    resolver.commit(
        TimetableEntry(
            batch_id="b-1",
            subject_id="s-1",
            faculty_id=faculty_id,
            classroom_id=classroom_id,
            day_of_week=day,
            start_time=slot.start_time,
            end_time=slot.end_time,
        )
    )


def test_faculty_without_windows_is_always_available():
    resolver = build_resolver()
    faculty = Faculty(id="f-1", name="Prof A")
    assert all(resolver.is_faculty_available(faculty, day, "16:15") for day in range(7))


def test_faculty_window_check_is_inclusive_on_start_time_only():
    resolver = build_resolver()
    faculty = Faculty(id="f-1", name="Prof A", availability=(window(1, "09:00", "12:15"),))

    assert resolver.is_faculty_available(faculty, 1, "09:00")
    # Starts on the closing boundary, so it counts as available even though it runs until 13:15.
    assert resolver.is_faculty_available(faculty, 1, "12:15")
    assert not resolver.is_faculty_available(faculty, 1, "14:00")
    assert not resolver.is_faculty_available(faculty, 2, "09:00")


def test_select_faculty_only_returns_available_candidates():
    resolver = build_resolver(seed=5)
    morning = Faculty(id="f-1", name="Morning", availability=(window(0, "09:00", "11:00"),))
    evening = Faculty(id="f-2", name="Evening", availability=(window(0, "14:00", "17:00"),))

    for _ in range(10):
        assert resolver.select_faculty([morning, evening], 0, "15:00").id == "f-2"
    assert resolver.select_faculty([morning, evening], 3, "09:00") is None


def test_pick_available_faculty_skips_faculty_outside_the_working_week():
    resolver = build_resolver()
    weekend_only = Faculty(id="f-1", name="Weekend", availability=(window(6, "09:00", "17:00"),))
    weekday = Faculty(id="f-2", name="Weekday", availability=(window(2, "09:00", "17:00"),))

    assert resolver.pick_available_faculty([weekend_only]) is None
    assert resolver.pick_available_faculty([weekend_only, weekday]).id == "f-2"


def test_find_classroom_prefers_smallest_room_of_preferred_type():
    rooms = [
        room("r-big", 120),
        room("r-fit", 60),
        room("r-small", 40),
        room("r-lab", 60, ClassroomType.LAB),
    ]
    resolver = build_resolver(rooms)

    chosen, mismatched = resolver.find_classroom(60, 0, STANDARD_SLOTS[0], ClassroomType.CLASSROOM)
    assert chosen.id == "r-fit"
    assert mismatched is False

    lab, mismatched = resolver.find_classroom(60, 0, PRACTICAL_SLOTS[0], ClassroomType.LAB)
    assert lab.id == "r-lab"
    assert mismatched is False


def test_find_classroom_falls_back_to_other_type():
    resolver = build_resolver([room("r-lab", 80, ClassroomType.LAB)])

    chosen, mismatched = resolver.find_classroom(60, 0, STANDARD_SLOTS[0], ClassroomType.CLASSROOM)

    assert chosen.id == "r-lab"
    assert mismatched is True


def test_find_classroom_returns_none_when_nothing_fits():
    resolver = build_resolver([room("r-1", 30), room("r-2", 30, ClassroomType.LAB)])

    chosen, mismatched = resolver.find_classroom(60, 0, STANDARD_SLOTS[0], ClassroomType.CLASSROOM)

    assert chosen is None
    assert mismatched is False


def test_find_classroom_skips_occupied_and_closed_rooms():
    rooms = [
        room("r-small", 60),
        room("r-closed", 70, availability=(window(0, "14:00", "17:00"),)),
        room("r-large", 90),
    ]
    resolver = build_resolver(rooms)
    resolver.index.reserve(ResourceKind.CLASSROOM, "r-small", 0, "10:00")

    # 09:00-11:00 needs the room free at 10:00 as well.
    chosen, _ = resolver.find_classroom(60, 0, PRACTICAL_SLOTS[0], ClassroomType.CLASSROOM)
    assert chosen.id == "r-large"

    chosen, _ = resolver.find_classroom(60, 0, STANDARD_SLOTS[4], ClassroomType.CLASSROOM)
    assert chosen.id == "r-small"


def test_consecutive_rule_only_extends_the_run():
    resolver = build_resolver()
    commit_session(resolver, "f-1", 0, STANDARD_SLOTS[2])

    assert resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[3])
    assert resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[1])
    assert not resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[5])
    assert not resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[0])
    # Other days and other faculty are unaffected.
    assert resolver.follows_consecutive_rule("f-1", 1, STANDARD_SLOTS[6])
    assert resolver.follows_consecutive_rule("f-2", 0, STANDARD_SLOTS[6])


def test_consecutive_rule_uses_lab_block_span():
    resolver = build_resolver()
    commit_session(resolver, "f-1", 0, PRACTICAL_SLOTS[1])  # positions 2 and 3

    assert resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[4])
    assert resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[1])
    assert resolver.follows_consecutive_rule("f-1", 0, PRACTICAL_SLOTS[2])
    assert resolver.follows_consecutive_rule("f-1", 0, PRACTICAL_SLOTS[0])
    assert not resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[6])


def test_daily_cap_and_weekly_load():
    resolver = build_resolver()
    faculty = Faculty(id="f-1", name="Prof A", max_classes_per_day=2, weekly_load_limit=3)

    commit_session(resolver, "f-1", 0, STANDARD_SLOTS[0])
    assert resolver.faculty_can_take(faculty, 0, STANDARD_SLOTS[1])
    commit_session(resolver, "f-1", 0, STANDARD_SLOTS[1])

    assert resolver.sessions_on_day("f-1", 0) == 2
    assert not resolver.within_daily_cap(faculty, 0)
    assert not resolver.faculty_can_take(faculty, 0, STANDARD_SLOTS[2])

    commit_session(resolver, "f-1", 1, STANDARD_SLOTS[0])
    assert not resolver.within_weekly_load(faculty)
    assert not resolver.faculty_can_take(faculty, 2, STANDARD_SLOTS[0])


def test_weekly_load_can_be_switched_off():
    resolver = build_resolver(enforce_weekly_load_limit=False)
    faculty = Faculty(id="f-1", name="Prof A", weekly_load_limit=1)

    commit_session(resolver, "f-1", 0, STANDARD_SLOTS[0])

    assert resolver.within_weekly_load(faculty)
    assert resolver.faculty_can_take(faculty, 1, STANDARD_SLOTS[0])


def test_consecutive_rule_after_off_grid_session():
    resolver = build_resolver()
    resolver.commit(
        TimetableEntry(
            batch_id="b-1",
            subject_id="s-1",
            faculty_id="f-1",
            classroom_id="r-1",
            day_of_week=0,
            start_time="09:30",
            end_time="10:30",
        )
    )

    # 09:30-10:30 cuts into the 09:00 and 10:00 periods, so the run ends at 10:00.
    assert resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[2])
    assert not resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[0])
    assert not resolver.follows_consecutive_rule("f-1", 0, STANDARD_SLOTS[3])
