from datetime import datetime

from app.schemas.common import CamelModel


class GalleryItemOut(CamelModel):
    id: str
    url: str
    created_at: datetime
