from timetabler.models.timetable import Timetable, TimetableEntryRecord, TimetableStatus  # noqa: F401
