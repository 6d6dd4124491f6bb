import asyncio
import logging
import os
import tempfile
import uuid
from abc import ABCMeta, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from slugify import slugify

from app.config import Settings
from app.core.errors import StorageDeleteFailure, StorageWriteFailure
from app.utils.mapping import clean_url

logger = logging.getLogger(__name__)


def extension_for(content_type: str | None) -> str:
    """'image/png' -> 'png', 'image/svg+xml' -> 'svg'; defaults to 'png'."""
    subtype = (content_type or "").split("/")[-1].split(";")[0].split("+")[0].strip().lower()
    return subtype or "png"


def namespace_for(prefix: str, *parts: str) -> str:
    """Build a key namespace such as 'members/<member-id>' from untrusted parts."""
    return "/".join([prefix, *(slugify(p) for p in parts if p)])


class ObjectStorage(metaclass=ABCMeta):
    """Upload/delete binary objects and map keys to public URLs and back.

    ``url_for`` and ``key_from_url`` are exact inverses for every key this
    adapter produces. URLs from anywhere else resolve to ``None`` and are
    never deleted.
    """

    def __init__(self, public_base_url: str):
        self.public_base_url = public_base_url.rstrip("/")

    def new_key(self, namespace: str, content_type: str | None) -> str:
        # Always a fresh token: a replaced image never shares a key with the live one.
        return f"{namespace.strip('/')}/{uuid.uuid4()}.{extension_for(content_type)}"

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, url: str | None) -> Optional[str]:
        if not url:
            return None
        url = clean_url(url)
        prefix = self.public_base_url + "/"
        if not url.startswith(prefix):
            return None
        key = unquote(url[len(prefix):])
        if not key or key.startswith("/") or ".." in key.split("/"):
            return None
        return key

    def resolve_key(self, key_or_url: str | None) -> Optional[str]:
        if not key_or_url:
            return None
        if "://" in key_or_url:
            return self.key_from_url(key_or_url)
        return key_or_url

    async def upload(self, data: bytes, key: str, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        await self._put(key, data, content_type)
        logger.info("Uploaded object %s (%d bytes)", key, len(data))
        return self.url_for(key)

    async def delete(self, key_or_url: str) -> None:
        """Remove an object. Missing objects and foreign URLs are not errors."""
        key = self.resolve_key(key_or_url)
        if key is None:
            logger.warning("Could not derive storage key from %r; skipping delete", key_or_url)
            return
        await self._remove(key)
        logger.info("Deleted object %s", key)

    @abstractmethod
    async def _put(self, key: str, data: bytes, content_type: str) -> None:
        return NotImplemented

    @abstractmethod
    async def _remove(self, key: str) -> None:
        return NotImplemented

    @abstractmethod
    async def exists(self, key: str) -> bool:
        return NotImplemented


class LocalStorage(ObjectStorage):
    """Files under ``base_dir``; the app serves them at ``<public_base_url>``."""

    def __init__(self, base_dir: str | Path, public_base_url: str):
        super().__init__(public_base_url)
        self.base = Path(base_dir).resolve()
        self.base.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.base / key).resolve()
        if self.base not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the target then rename, so readers never see a partial file
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def _put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, data)
        except (OSError, ValueError) as exc:
            logger.error("Local upload failed for %s: %s", key, exc)
            raise StorageWriteFailure() from exc

    async def _remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._path(key).unlink, missing_ok=True)
        except (OSError, ValueError) as exc:
            logger.error("Local delete failed for %s: %s", key, exc)
            raise StorageDeleteFailure(f"Failed to delete file from storage: {key}") from exc

    async def exists(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except ValueError:
            return False

    def read(self, key: str) -> bytes:
        return self._path(key).read_bytes()


class S3Storage(ObjectStorage):
    """S3 (or S3-compatible) bucket. boto3 is blocking, so calls run in a thread."""

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client=None,
    ):
        super().__init__(public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com")
        self.bucket = bucket
        # Credentials come from the environment or the instance role
        self._client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    async def _put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageWriteFailure() from exc

    async def _remove(self, key: str) -> None:
        # delete_object succeeds for keys that do not exist
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 delete failed for %s: %s", key, exc)
            raise StorageDeleteFailure(f"Failed to delete file from storage: {key}") from exc

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=self.bucket, Key=key)
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise


MEDIA_PATH = "/media"


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.STORAGE_DRIVER == "s3":
        return S3Storage(
            bucket=settings.AWS_S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )
    return LocalStorage(
        settings.STORAGE_DIR,
        public_base_url=settings.PUBLIC_BASE_URL.rstrip("/") + MEDIA_PATH,
    )
