from pydantic import BaseModel, Field

from timetabler.schemas.subject import Subject


class Batch(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    batch_size: int = Field(alias="batchSize", gt=0, le=5000)
    subjects: tuple[Subject, ...] = ()

    model_config = {"populate_by_name": True, "frozen": True, "from_attributes": True}
