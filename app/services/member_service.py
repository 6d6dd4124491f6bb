from typing import Any, Dict, List, Sequence

from app.core.errors import ValidationError
from app.models.member import Member
from app.services.resource import ImageBackedResource
from app.services.upload_validate import UploadedImage

IMAGE_PLACEHOLDER = "file_placeholder"


def _is_placeholder(item: Dict[str, Any]) -> bool:
    return item.get("type") == "image" and item.get("content") in (None, "", IMAGE_PLACEHOLDER)


class MemberService(ImageBackedResource[Member]):
    """Member profiles. Every image item in ``contents`` is an image slot.

    New files fill the placeholder image items in order; placeholders left
    without a file are dropped, and images removed from ``contents`` are
    deleted from storage after the row is saved.
    """

    model = Member
    name = "member"
    namespace = "members"
    field_names = ("name", "type", "tracks", "contents", "sns")
    required_fields = ("name",)

    def check_uploads(self, fields: Dict[str, Any], uploads: Sequence[UploadedImage]) -> None:
        slots = sum(1 for item in fields.get("contents") or [] if _is_placeholder(item))
        if len(uploads) > slots:
            raise ValidationError(f"{len(uploads)} file(s) uploaded for {slots} image placeholder(s)")

    def apply_uploads(self, fields: Dict[str, Any], urls: List[str]) -> Dict[str, Any]:
        pending = iter(urls)
        contents = []
        for item in fields.get("contents") or []:
            if _is_placeholder(item):
                item = {**item, "content": next(pending, "")}
            contents.append(item)
        return {**fields, "contents": contents}

    def image_refs(self, fields: Dict[str, Any]) -> List[str]:
        return [
            item["content"]
            for item in fields.get("contents") or []
            if item.get("type") == "image" and item.get("content") and not _is_placeholder(item)
        ]

    async def persist(self, conn, record_id: str, fields: Dict[str, Any]) -> Member:
        # Unfilled placeholders are not stored
        fields = {
            **fields,
            "contents": [item for item in fields.get("contents") or [] if not _is_placeholder(item)],
        }
        return await super().persist(conn, record_id, fields)
