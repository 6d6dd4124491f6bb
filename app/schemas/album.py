import datetime as dt
from typing import List, Optional

from pydantic import Field, field_validator

from app.models.base import MAX_ID_LENGTH
from app.schemas.common import CamelModel
from app.utils.mapping import normalize_date, parse_json_field


class AlbumIn(CamelModel):
    # Set on create to upsert a known album
    id: Optional[str] = Field(default=None, min_length=1, max_length=MAX_ID_LENGTH)
    title: Optional[str] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    tracks: Optional[List[str]] = None
    video_url: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        return None if v in (None, "") else normalize_date(v)

    @field_validator("tracks", mode="before")
    @classmethod
    def _tracks(cls, v):
        return parse_json_field(v, [], "tracks")


class AlbumOut(CamelModel):
    id: str
    title: str
    date: dt.date
    description: str = ""
    tracks: List[str] = []
    video_url: str = ""
    image: str = ""
    created_at: dt.datetime

    @field_validator("image", mode="before")
    @classmethod
    def _image(cls, v):
        return v or ""
