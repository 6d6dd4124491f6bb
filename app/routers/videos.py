from typing import List

from fastapi import APIRouter, Depends

from app.routers.deps import video_service
from app.schemas.common import Envelope, input_fields, require
from app.schemas.video import VideoIn, VideoOut
from app.services.video_service import VideoService

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=Envelope[List[VideoOut]])
async def list_videos(service: VideoService = Depends(video_service)):
    return Envelope(data=[VideoOut.model_validate(v) for v in await service.list()])


@router.get("/{video_id}", response_model=Envelope[VideoOut])
async def get_video(video_id: str, service: VideoService = Depends(video_service)):
    return Envelope(data=VideoOut.model_validate(await service.get(video_id)))


@router.post("", status_code=201, response_model=Envelope[VideoOut])
async def create_video(body: VideoIn, service: VideoService = Depends(video_service)):
    require(body, "title", "src")
    video = await service.create(input_fields(body))
    return Envelope(data=VideoOut.model_validate(video))


@router.put("/{video_id}", response_model=Envelope[VideoOut])
async def update_video(video_id: str, body: VideoIn, service: VideoService = Depends(video_service)):
    video = await service.update(video_id, input_fields(body))
    return Envelope(data=VideoOut.model_validate(video))


@router.delete("/{video_id}", response_model=Envelope[dict])
async def delete_video(video_id: str, service: VideoService = Depends(video_service)):
    await service.delete(video_id)
    return Envelope(data={"deletedId": video_id}, message="Video deleted")
