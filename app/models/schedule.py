from tortoise import fields
from .base import BaseModel


class ScheduleEvent(BaseModel):
    title = fields.CharField(max_length=255)
    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField(null=True)
    description = fields.TextField(default="")
    location = fields.CharField(max_length=255, default="")
    category = fields.CharField(max_length=64, default="")

    class Meta:
        table = "schedules"
        ordering = ["start_time"]
