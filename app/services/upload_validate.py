from dataclasses import dataclass
from typing import List, Optional

from fastapi import UploadFile

from app.core.errors import PayloadTooLarge, ValidationError


@dataclass
class UploadedImage:
    data: bytes
    content_type: str
    filename: str = ""


def check_image(data: bytes, content_type: str | None, max_size: int, filename: str = "") -> UploadedImage:
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError(f"Only image files are allowed ({filename or 'upload'}: {content_type})")
    if not data:
        raise ValidationError(f"Empty file: {filename or 'upload'}")
    if len(data) > max_size:
        raise PayloadTooLarge(f"File too large: max {max_size // (1024 * 1024)}MB")
    return UploadedImage(data=data, content_type=content_type, filename=filename)


async def read_image_upload(file: Optional[UploadFile], max_size: int) -> Optional[UploadedImage]:
    """Read and check one optional multipart image part."""
    if file is None:
        return None
    data = await file.read()
    return check_image(data, file.content_type, max_size, file.filename or "")


async def read_image_uploads(files: Optional[List[UploadFile]], max_size: int) -> List[UploadedImage]:
    """Every part is checked before any of them is used."""
    uploads = []
    for file in files or []:
        uploads.append(await read_image_upload(file, max_size))
    return uploads
