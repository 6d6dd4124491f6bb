from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class NoticeIn(CamelModel):
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class NoticeOut(CamelModel):
    id: str
    type: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
