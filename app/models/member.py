from tortoise import fields
from .base import BaseModel


class Member(BaseModel):
    name = fields.CharField(max_length=255)
    type = fields.CharField(max_length=64, default="")
    tracks = fields.JSONField(default=list)
    contents = fields.JSONField(default=list)
    sns = fields.JSONField(default=dict)

    class Meta:
        table = "members"
        ordering = ["name"]
