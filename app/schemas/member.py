from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator

from app.models.base import MAX_ID_LENGTH
from app.schemas.common import CamelModel
from app.utils.mapping import default_sns


class TextContent(CamelModel):
    type: Literal["text"]
    content: str = ""
    style: Optional[Dict[str, Union[str, int, float]]] = None


class ImageContent(CamelModel):
    type: Literal["image"]
    # A stored image URL, or "file_placeholder" for the next uploaded file
    content: str = ""
    style: Optional[Dict[str, Union[str, int, float]]] = None


ContentItem = Annotated[Union[TextContent, ImageContent], Field(discriminator="type")]


class MemberIn(CamelModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=MAX_ID_LENGTH)
    name: Optional[str] = None
    type: Optional[str] = None
    tracks: Optional[List[str]] = None
    contents: Optional[List[ContentItem]] = None
    sns: Optional[Dict[str, str]] = None

    @field_validator("sns", mode="before")
    @classmethod
    def _sns(cls, v):
        return None if v is None else default_sns(v)


class MemberOut(CamelModel):
    id: str
    name: str
    type: str = ""
    tracks: List[str] = []
    contents: List[ContentItem] = []
    sns: Dict[str, str] = {}

    @field_validator("sns", mode="before")
    @classmethod
    def _sns(cls, v):
        return default_sns(v)
