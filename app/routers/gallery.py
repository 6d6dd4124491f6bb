from typing import List

from fastapi import APIRouter, Depends

from app.config import settings
from app.core.errors import ValidationError
from app.routers.deps import RequestPayload, gallery_service, read_payload
from app.schemas.common import DeleteMany, DeleteManyResult, Envelope
from app.schemas.gallery import GalleryItemOut
from app.services.gallery_service import GalleryService
from app.services.upload_validate import read_image_upload, read_image_uploads

router = APIRouter(prefix="/gallery", tags=["gallery"])


@router.get("", response_model=Envelope[List[GalleryItemOut]])
async def list_gallery(service: GalleryService = Depends(gallery_service)):
    items = await service.list()
    return Envelope(data=[GalleryItemOut.model_validate(i) for i in items])


@router.post("/upload", status_code=201, response_model=Envelope[List[GalleryItemOut]])
async def upload_gallery(
    payload: RequestPayload = Depends(read_payload),
    service: GalleryService = Depends(gallery_service),
):
    uploads = await read_image_uploads(payload.file_list("images"), settings.GALLERY_MAX_UPLOAD)
    if not uploads:
        raise ValidationError("No files uploaded")
    items = await service.upload_many(uploads)
    return Envelope(data=[GalleryItemOut.model_validate(i) for i in items])


@router.put("/{item_id}", response_model=Envelope[GalleryItemOut])
async def replace_gallery_image(
    item_id: str,
    payload: RequestPayload = Depends(read_payload),
    service: GalleryService = Depends(gallery_service),
):
    upload = await read_image_upload(payload.file("image"), settings.GALLERY_MAX_UPLOAD)
    if upload is None:
        raise ValidationError("No file uploaded")
    item = await service.update(item_id, {}, [upload])
    return Envelope(data=GalleryItemOut.model_validate(item))


@router.delete("/{item_id}", response_model=Envelope[dict])
async def delete_gallery_item(item_id: str, service: GalleryService = Depends(gallery_service)):
    await service.delete(item_id)
    return Envelope(data={"deletedId": item_id}, message="Gallery item deleted successfully")


@router.delete("", response_model=Envelope[DeleteManyResult])
async def delete_gallery_items(body: DeleteMany, service: GalleryService = Depends(gallery_service)):
    if not body.ids:
        raise ValidationError("No gallery IDs provided")
    deleted = await service.delete_many(body.ids)
    return Envelope(
        data=DeleteManyResult(deleted_count=len(deleted), deleted_ids=deleted),
        message=f"{len(deleted)} items deleted successfully",
    )
