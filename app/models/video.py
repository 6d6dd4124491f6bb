from tortoise import fields
from .base import BaseModel


class Video(BaseModel):
    title = fields.CharField(max_length=255)
    src = fields.CharField(max_length=1024)

    class Meta:
        table = "videos"
        ordering = ["-created_at"]
