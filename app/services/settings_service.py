from typing import Optional, Sequence

from app.models.site_settings import SETTINGS_ID, SiteSettings
from app.services.resource import ImageBackedResource
from app.services.upload_validate import UploadedImage


class SettingsService(ImageBackedResource[SiteSettings]):
    model = SiteSettings
    name = "settings"
    namespace = "settings"
    image_field = "main_image"
    field_names = ("main_image", "sns_links")

    async def current(self) -> Optional[SiteSettings]:
        """The settings row, or None before the first save."""
        return await self.load(SETTINGS_ID)

    async def save_settings(self, fields: dict, upload: Optional[UploadedImage] = None) -> SiteSettings:
        uploads: Sequence[UploadedImage] = [upload] if upload else []
        return await self.save(SETTINGS_ID, fields, uploads)

    async def delete_main_image(self) -> bool:
        return await self.clear_image(SETTINGS_ID)
