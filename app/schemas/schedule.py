from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.common import CamelModel
from app.utils.mapping import normalize_datetime


class ScheduleIn(CamelModel):
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _times(cls, v, info):
        return None if v in (None, "") else normalize_datetime(v, info.field_name)


class ScheduleOut(CamelModel):
    id: str
    title: str
    start_time: datetime
    end_time: Optional[datetime] = None
    description: str = ""
    location: str = ""
    category: str = ""
