from typing import List

from fastapi import APIRouter, Depends

from app.routers.deps import notice_service
from app.schemas.common import Envelope, input_fields, require
from app.schemas.notice import NoticeIn, NoticeOut
from app.services.notice_service import NoticeService

router = APIRouter(prefix="/notices", tags=["notices"])


@router.get("", response_model=Envelope[List[NoticeOut]])
async def list_notices(service: NoticeService = Depends(notice_service)):
    return Envelope(data=[NoticeOut.model_validate(n) for n in await service.list()])


@router.get("/{notice_id}", response_model=Envelope[NoticeOut])
async def get_notice(notice_id: str, service: NoticeService = Depends(notice_service)):
    return Envelope(data=NoticeOut.model_validate(await service.get(notice_id)))


@router.post("", status_code=201, response_model=Envelope[NoticeOut])
async def create_notice(body: NoticeIn, service: NoticeService = Depends(notice_service)):
    require(body, "type", "title", "content")
    notice = await service.create(input_fields(body))
    return Envelope(data=NoticeOut.model_validate(notice))


@router.put("/{notice_id}", response_model=Envelope[NoticeOut])
async def update_notice(notice_id: str, body: NoticeIn, service: NoticeService = Depends(notice_service)):
    notice = await service.update(notice_id, input_fields(body))
    return Envelope(data=NoticeOut.model_validate(notice), message="Notice updated")


@router.delete("/{notice_id}", response_model=Envelope[dict])
async def delete_notice(notice_id: str, service: NoticeService = Depends(notice_service)):
    await service.delete(notice_id)
    return Envelope(data={"deletedId": notice_id}, message="Notice deleted")
