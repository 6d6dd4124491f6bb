from app.models.video import Video
from app.services.resource import CrudResource


class VideoService(CrudResource[Video]):
    model = Video
    name = "video"
    field_names = ("title", "src")
    required_fields = ("title", "src")
