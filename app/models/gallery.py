from tortoise import fields
from .base import BaseModel


class GalleryItem(BaseModel):
    url = fields.CharField(max_length=1024)

    class Meta:
        table = "gallery"
        ordering = ["-created_at"]
