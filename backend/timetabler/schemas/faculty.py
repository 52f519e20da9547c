from pydantic import BaseModel, Field

from timetabler.schemas.common import AvailabilityWindow


class Faculty(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    max_classes_per_day: int = Field(default=4, alias="maxClassesPerDay", ge=1, le=24)
    weekly_load_limit: int = Field(default=20, alias="weeklyLoadLimit", ge=1, le=100)
    availability: tuple[AvailabilityWindow, ...] = Field(default=(), max_length=100)

    model_config = {"populate_by_name": True, "frozen": True, "from_attributes": True}
