import logging
from typing import List, Sequence

from app.core.errors import PersistenceFailure, ValidationError
from app.models.gallery import GalleryItem
from app.services.resource import ImageBackedResource
from app.services.upload_validate import UploadedImage

logger = logging.getLogger(__name__)


class GalleryService(ImageBackedResource[GalleryItem]):
    model = GalleryItem
    name = "gallery"
    namespace = "gallery"
    image_field = "url"
    field_names = ("url",)

    def owns(self, key: str, record_id) -> bool:
        # Bulk uploads sit directly under "gallery/" before their rows exist
        prefix = self.namespace + "/"
        rest = key[len(prefix):] if key.startswith(prefix) else ""
        if rest and "/" not in rest and rest != "..":
            return True
        return super().owns(key, record_id)

    def check_uploads(self, fields, uploads: Sequence[UploadedImage]) -> None:
        super().check_uploads(fields, uploads)
        if not uploads and not fields.get("url"):
            raise ValidationError("No files uploaded")

    async def upload_many(self, uploads: Sequence[UploadedImage]) -> List[GalleryItem]:
        """Upload every file, then insert all rows in one transaction."""
        if not uploads:
            raise ValidationError("No files uploaded")

        urls = await self.upload_all(None, uploads)
        try:
            async with self.atomic() as conn:
                items = [
                    await self.model.create(id=self.new_id(), url=url, using_db=conn)
                    for url in urls
                ]
        except PersistenceFailure:
            logger.error(
                "Gallery insert failed; %d uploaded object(s) left orphaned",
                len(urls),
                extra={"resource": self.name, "targets": urls},
            )
            raise
        return items
