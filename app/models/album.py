from tortoise import fields
from .base import BaseModel


class Album(BaseModel):
    title = fields.CharField(max_length=255)
    date = fields.DateField()
    description = fields.TextField(default="")
    tracks = fields.JSONField(default=list)
    video_url = fields.CharField(max_length=1024, default="", source_field="videoUrl")
    image = fields.CharField(max_length=1024, null=True)

    class Meta:
        table = "album"
        ordering = ["-date"]
