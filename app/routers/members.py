from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.routers.deps import RequestPayload, member_service, read_payload
from app.schemas.common import Envelope, input_fields, parse_model, require
from app.schemas.member import MemberIn, MemberOut
from app.services.member_service import MemberService
from app.services.upload_validate import read_image_uploads

router = APIRouter(prefix="/members", tags=["members"])


async def _save(
    service: MemberService, member_id: str, data: MemberIn, payload: RequestPayload, require_existing: bool
):
    fields = input_fields(data)
    fields.pop("id", None)
    uploads = await read_image_uploads(payload.file_list("images"), settings.MEMBER_MAX_UPLOAD)
    member = await service.save(member_id, fields, uploads, require_existing=require_existing)
    return Envelope(data=MemberOut.model_validate(member))


@router.get("", response_model=Envelope[List[MemberOut]])
async def list_members(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    service: MemberService = Depends(member_service),
):
    members = await service.list(limit=limit)
    return Envelope(data=[MemberOut.model_validate(m) for m in members])


@router.get("/{member_id}", response_model=Envelope[MemberOut])
async def get_member(member_id: str, service: MemberService = Depends(member_service)):
    return Envelope(data=MemberOut.model_validate(await service.get(member_id)))


@router.post("", response_model=Envelope[MemberOut])
async def save_member(
    payload: RequestPayload = Depends(read_payload),
    service: MemberService = Depends(member_service),
):
    """Create or update the profile named by ``payload.id`` (upsert)."""
    data = parse_model(MemberIn, payload.fields)
    require(data, "id", "name")
    return await _save(service, data.id, data, payload, require_existing=False)


@router.put("/{member_id}", response_model=Envelope[MemberOut])
async def update_member(
    member_id: str,
    payload: RequestPayload = Depends(read_payload),
    service: MemberService = Depends(member_service),
):
    data = parse_model(MemberIn, payload.fields)
    return await _save(service, member_id, data, payload, require_existing=True)


@router.delete("/{member_id}", response_model=Envelope[dict])
async def delete_member(member_id: str, service: MemberService = Depends(member_service)):
    await service.delete(member_id)
    return Envelope(data={"deletedId": member_id}, message="Member deleted")
