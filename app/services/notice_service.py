from app.models.notice import Notice
from app.services.resource import CrudResource


class NoticeService(CrudResource[Notice]):
    model = Notice
    name = "notice"
    field_names = ("type", "title", "content")
    required_fields = ("type", "title", "content")
