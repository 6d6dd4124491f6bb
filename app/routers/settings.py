from fastapi import APIRouter, Depends

from app.config import settings as app_settings
from app.routers.deps import RequestPayload, read_payload, settings_service
from app.schemas.common import Envelope, input_fields, parse_model
from app.schemas.site_settings import SettingsIn, SettingsOut
from app.services.settings_service import SettingsService
from app.services.upload_validate import read_image_upload

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=Envelope[SettingsOut])
async def get_settings(service: SettingsService = Depends(settings_service)):
    row = await service.current()
    # No row yet: the well-defined empty settings object
    return Envelope(data=SettingsOut.model_validate(row) if row else SettingsOut())


@router.post("", response_model=Envelope[SettingsOut])
async def save_settings(
    payload: RequestPayload = Depends(read_payload),
    service: SettingsService = Depends(settings_service),
):
    data = parse_model(SettingsIn, payload.fields)
    upload = await read_image_upload(payload.file("image"), app_settings.SETTINGS_MAX_UPLOAD)
    row = await service.save_settings(input_fields(data), upload)
    return Envelope(data=SettingsOut.model_validate(row))


@router.delete("/image", response_model=Envelope[bool])
async def delete_main_image(service: SettingsService = Depends(settings_service)):
    deleted = await service.delete_main_image()
    return Envelope(data=deleted, message="Main image deleted" if deleted else "No main image to delete")
