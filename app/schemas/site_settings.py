from typing import List

from pydantic import field_validator

from app.schemas.common import CamelModel, SnsLink
from app.utils.mapping import parse_json_field


class SettingsIn(CamelModel):
    sns_links: List[SnsLink] = []

    @field_validator("sns_links", mode="before")
    @classmethod
    def _links(cls, v):
        return parse_json_field(v, [], "snsLinks")


class SettingsOut(CamelModel):
    main_image: str = ""
    sns_links: List[SnsLink] = []

    @field_validator("main_image", mode="before")
    @classmethod
    def _image(cls, v):
        return v or ""

    @field_validator("sns_links", mode="before")
    @classmethod
    def _links(cls, v):
        return v or []
