from tortoise import fields
from .base import BaseModel


class Notice(BaseModel):
    type = fields.CharField(max_length=64)
    title = fields.CharField(max_length=255)
    content = fields.TextField()

    class Meta:
        table = "notice"
        ordering = ["-created_at"]
