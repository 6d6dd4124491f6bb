from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class VideoIn(CamelModel):
    title: Optional[str] = None
    src: Optional[str] = None


class VideoOut(CamelModel):
    id: str
    title: str
    src: str
    created_at: datetime
