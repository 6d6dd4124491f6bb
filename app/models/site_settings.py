from tortoise import fields
from .base import BaseModel

SETTINGS_ID = "1"


class SiteSettings(BaseModel):
    """Single-row table holding site-wide settings (id is always SETTINGS_ID)."""

    main_image = fields.CharField(max_length=1024, null=True, source_field="mainImage")
    sns_links = fields.JSONField(default=list, source_field="snsLinks")

    class Meta:
        table = "settings"
