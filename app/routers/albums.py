from typing import List

from fastapi import APIRouter, Depends

from app.config import settings
from app.routers.deps import RequestPayload, album_service, read_payload
from app.schemas.album import AlbumIn, AlbumOut
from app.schemas.common import Envelope, input_fields, parse_model, require
from app.services.album_service import AlbumService
from app.services.upload_validate import read_image_upload

router = APIRouter(prefix="/albums", tags=["albums"])


async def _cover(payload: RequestPayload):
    upload = await read_image_upload(payload.file("image"), settings.ALBUM_MAX_UPLOAD)
    return [upload] if upload else []


def _album_fields(data: AlbumIn) -> dict:
    fields = input_fields(data)
    fields.pop("id", None)
    return fields


@router.get("", response_model=Envelope[List[AlbumOut]])
async def list_albums(service: AlbumService = Depends(album_service)):
    albums = await service.list()
    return Envelope(data=[AlbumOut.model_validate(a) for a in albums])


@router.get("/{album_id}", response_model=Envelope[AlbumOut])
async def get_album(album_id: str, service: AlbumService = Depends(album_service)):
    return Envelope(data=AlbumOut.model_validate(await service.get(album_id)))


@router.post("", status_code=201, response_model=Envelope[AlbumOut])
async def create_album(
    payload: RequestPayload = Depends(read_payload),
    service: AlbumService = Depends(album_service),
):
    """Create an album. An ``id`` in the payload upserts that album instead."""
    data = parse_model(AlbumIn, payload.fields)
    require(data, "title", "date")
    album = await service.save(data.id, _album_fields(data), await _cover(payload))
    return Envelope(data=AlbumOut.model_validate(album))


@router.put("/{album_id}", response_model=Envelope[AlbumOut])
async def update_album(
    album_id: str,
    payload: RequestPayload = Depends(read_payload),
    service: AlbumService = Depends(album_service),
):
    data = parse_model(AlbumIn, payload.fields)
    album = await service.update(album_id, _album_fields(data), await _cover(payload))
    return Envelope(data=AlbumOut.model_validate(album))


@router.delete("/{album_id}", response_model=Envelope[dict])
async def delete_album(album_id: str, service: AlbumService = Depends(album_service)):
    await service.delete(album_id)
    return Envelope(data={"deletedId": album_id}, message="Album deleted")
