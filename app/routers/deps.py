"""Request-scoped dependencies: service construction and payload parsing."""

import json
from dataclasses import dataclass, field
from typing import Dict, List

from fastapi import Depends, Request
from starlette.datastructures import UploadFile

from app.core.errors import ValidationError
from app.db import Database
from app.services.album_service import AlbumService
from app.services.gallery_service import GalleryService
from app.services.member_service import MemberService
from app.services.notice_service import NoticeService
from app.services.schedule_service import ScheduleService
from app.services.settings_service import SettingsService
from app.services.storage import ObjectStorage
from app.services.video_service import VideoService
from app.utils.mapping import parse_json_field


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def album_service(db: Database = Depends(get_database), storage: ObjectStorage = Depends(get_storage)) -> AlbumService:
    return AlbumService(db, storage)


def gallery_service(db: Database = Depends(get_database), storage: ObjectStorage = Depends(get_storage)) -> GalleryService:
    return GalleryService(db, storage)


def settings_service(db: Database = Depends(get_database), storage: ObjectStorage = Depends(get_storage)) -> SettingsService:
    return SettingsService(db, storage)


def member_service(db: Database = Depends(get_database), storage: ObjectStorage = Depends(get_storage)) -> MemberService:
    return MemberService(db, storage)


def notice_service(db: Database = Depends(get_database)) -> NoticeService:
    return NoticeService(db)


def schedule_service(db: Database = Depends(get_database)) -> ScheduleService:
    return ScheduleService(db)


def video_service(db: Database = Depends(get_database)) -> VideoService:
    return VideoService(db)


@dataclass
class RequestPayload:
    fields: Dict[str, object] = field(default_factory=dict)
    files: Dict[str, List[UploadFile]] = field(default_factory=dict)

    def file(self, name: str):
        found = self.files.get(name) or []
        if len(found) > 1:
            raise ValidationError(f"Only one '{name}' file is allowed")
        return found[0] if found else None

    def file_list(self, name: str) -> List[UploadFile]:
        return self.files.get(name) or []


async def read_payload(request: Request) -> RequestPayload:
    """Accept either a JSON body or multipart/urlencoded form data.

    Multipart metadata may come as separate text fields, as one JSON text
    field named ``payload``, or both (separate fields win).
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        payload = RequestPayload()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                # Browsers send an empty part for an untouched file input
                if value.filename:
                    payload.files.setdefault(key, []).append(value)
            else:
                payload.fields[key] = value
        if "payload" in payload.fields:
            decoded = parse_json_field(payload.fields.pop("payload"), {}, "payload")
            if not isinstance(decoded, dict):
                raise ValidationError("payload must be a JSON object")
            payload.fields = {**decoded, **payload.fields}
        return payload

    body = await request.body()
    if not body:
        return RequestPayload()
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ValidationError("Request body must be valid JSON") from exc
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return RequestPayload(fields=data)
