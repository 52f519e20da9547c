from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def is_time_in_range(time: str, start: str, end: str) -> bool:
    """Inclusive check of a start time against a window.

    Only the session start is compared; a session running past ``end`` still
    counts as inside the window. Zero-padded ``HH:MM`` strings order the same
    way as the times they encode, so plain string comparison is enough.
    """
    return start <= time <= end


class TimeWindow(BaseModel):
    day_of_week: int = Field(alias="dayOfWeek", ge=0, le=6)
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "TimeWindow":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityWindow(TimeWindow):
    pass


def windows_allow(windows: tuple[AvailabilityWindow, ...] | list[AvailabilityWindow], day: int, start_time: str) -> bool:
    """True when ``windows`` is empty or one of them admits ``start_time`` on ``day``."""
    if not windows:
        return True
    return any(
        window.day_of_week == day and is_time_in_range(start_time, window.start_time, window.end_time)
        for window in windows
    )
