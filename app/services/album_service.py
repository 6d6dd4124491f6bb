import asyncio
from typing import List

from app.config import settings
from app.models.album import Album
from app.services.resource import ImageBackedResource
from app.services.thumbs import fit_cover
from app.services.upload_validate import UploadedImage


class AlbumService(ImageBackedResource[Album]):
    """Albums with a cover image cropped to a fixed card size."""

    model = Album
    name = "album"
    namespace = "albums"
    image_field = "image"
    field_names = ("title", "date", "description", "tracks", "video_url", "image")
    required_fields = ("title", "date")

    async def prepare_uploads(self, uploads) -> List[UploadedImage]:
        return [
            await asyncio.to_thread(
                fit_cover, upload, settings.ALBUM_COVER_WIDTH, settings.ALBUM_COVER_HEIGHT
            )
            for upload in uploads
        ]
