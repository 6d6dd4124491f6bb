from typing import List

from fastapi import APIRouter, Depends

from app.routers.deps import schedule_service
from app.schemas.common import Envelope, input_fields, require
from app.schemas.schedule import ScheduleIn, ScheduleOut
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", response_model=Envelope[List[ScheduleOut]])
async def list_schedules(service: ScheduleService = Depends(schedule_service)):
    return Envelope(data=[ScheduleOut.model_validate(s) for s in await service.list()])


@router.get("/{schedule_id}", response_model=Envelope[ScheduleOut])
async def get_schedule(schedule_id: str, service: ScheduleService = Depends(schedule_service)):
    return Envelope(data=ScheduleOut.model_validate(await service.get(schedule_id)))


@router.post("", status_code=201, response_model=Envelope[ScheduleOut])
async def create_schedule(body: ScheduleIn, service: ScheduleService = Depends(schedule_service)):
    require(body, "title", "start_time")
    event = await service.create(input_fields(body))
    return Envelope(data=ScheduleOut.model_validate(event))


@router.put("/{schedule_id}", response_model=Envelope[ScheduleOut])
async def update_schedule(schedule_id: str, body: ScheduleIn, service: ScheduleService = Depends(schedule_service)):
    event = await service.update(schedule_id, input_fields(body))
    return Envelope(data=ScheduleOut.model_validate(event), message="Schedule updated")


@router.delete("/{schedule_id}", response_model=Envelope[dict])
async def delete_schedule(schedule_id: str, service: ScheduleService = Depends(schedule_service)):
    await service.delete(schedule_id)
    return Envelope(data={"deletedId": schedule_id}, message="Schedule deleted")
