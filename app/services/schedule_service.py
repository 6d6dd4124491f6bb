from app.core.errors import ValidationError
from app.models.schedule import ScheduleEvent
from app.services.resource import CrudResource


class ScheduleService(CrudResource[ScheduleEvent]):
    model = ScheduleEvent
    name = "schedule"
    field_names = ("title", "start_time", "end_time", "description", "location", "category")
    required_fields = ("title", "start_time")

    def validate(self, fields) -> None:
        super().validate(fields)
        end = fields.get("end_time")
        if end is not None and end < fields["start_time"]:
            raise ValidationError("endTime must not be before startTime")
