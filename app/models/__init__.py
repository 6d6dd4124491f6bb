# Import all models for Tortoise ORM registration
from .base import BaseModel
from .album import Album
from .gallery import GalleryItem
from .member import Member
from .notice import Notice
from .schedule import ScheduleEvent
from .site_settings import SiteSettings, SETTINGS_ID
from .video import Video

__all__ = [
    "BaseModel",
    "Album",
    "GalleryItem",
    "Member",
    "Notice",
    "ScheduleEvent",
    "SiteSettings",
    "SETTINGS_ID",
    "Video",
]
