"""
Cover image resizing
"""

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from app.core.errors import ValidationError
from app.services.upload_validate import UploadedImage


def fit_cover(upload: UploadedImage, width: int, height: int) -> UploadedImage:
    """
    Resize and center-crop an image to exactly ``width`` x ``height``.

    The output keeps the source format (JPEG output is flattened to RGB).
    Undecodable input is a ValidationError so nothing gets uploaded.
    """
    try:
        with Image.open(BytesIO(upload.data)) as im:
            fmt = im.format or "PNG"
            fitted = ImageOps.fit(im, (width, height), Image.Resampling.LANCZOS)
            if fmt == "JPEG" and fitted.mode not in ("RGB", "L"):
                fitted = fitted.convert("RGB")
            buf = BytesIO()
            fitted.save(buf, format=fmt)
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError(f"Could not decode image {upload.filename or ''}".strip()) from exc

    content_type = Image.MIME.get(fmt, upload.content_type)
    return UploadedImage(data=buf.getvalue(), content_type=content_type, filename=upload.filename)
