from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NoteCreate(BaseModel):
    content: str


class NoteOut(BaseModel):
    id: int
    application_id: int
    content: str
    author: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TimelineEntryOut(BaseModel):
    id: str
    content: str
    created_at: datetime
    author: str

    model_config = ConfigDict(from_attributes=True)
