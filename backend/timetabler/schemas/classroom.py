from enum import Enum

from pydantic import BaseModel, Field

from timetabler.schemas.common import AvailabilityWindow


class ClassroomType(str, Enum):
    CLASSROOM = "CLASSROOM"
    LAB = "LAB"


class Classroom(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    room_id: str = Field(alias="roomId", min_length=1, max_length=50)
    capacity: int = Field(gt=0, le=5000)
    type: ClassroomType = ClassroomType.CLASSROOM
    # Empty means the room is open for the whole working grid.
    availability: tuple[AvailabilityWindow, ...] = Field(default=(), max_length=100)

    model_config = {"populate_by_name": True, "frozen": True, "from_attributes": True}
