"""
Shared data-access protocol for every resource.

``CrudResource`` covers plain rows (notices, schedules, videos).
``ImageBackedResource`` adds stored images (albums, gallery, settings, members)
and owns the write ordering that keeps rows and objects consistent:

    load -> validate -> upload new objects -> commit row -> delete replaced objects

A row never references an object that is gone. The worst case after a failure
is an unreferenced object in storage, which is logged and counted.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from tortoise.exceptions import BaseORMException

from app.core.errors import (
    AppError,
    NotFoundError,
    PersistenceFailure,
    StorageDeleteFailure,
    StorageWriteFailure,
    ValidationError,
)
from app.db import Database
from app.models.base import MAX_ID_LENGTH, BaseModel
from app.services.metrics import record_cleanup_failure, record_upload
from app.services.storage import ObjectStorage, namespace_for
from app.services.upload_validate import UploadedImage
from app.utils.mapping import clean_url

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class CleanupResult:
    """Outcome of removing one stored object: 'deleted', 'skipped' or 'failed'."""

    target: str
    status: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class CrudResource(Generic[ModelT]):
    model: Type[ModelT]
    name: str = "resource"
    field_names: Sequence[str] = ()
    required_fields: Sequence[str] = ()

    def __init__(self, database: Database):
        self.database = database

    # ---- hooks -------------------------------------------------------

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def fields_of(self, row: ModelT) -> Dict[str, Any]:
        return {name: getattr(row, name) for name in self.field_names}

    def merge(self, existing: Optional[ModelT], fields: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update: supplied fields win over stored ones."""
        unknown = set(fields) - set(self.field_names)
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")
        if existing is None:
            return dict(fields)
        return {**self.fields_of(existing), **fields}

    def validate(self, fields: Dict[str, Any]) -> None:
        missing = [f for f in self.required_fields if fields.get(f) in (None, "", [])]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    def check_uploads(self, fields: Dict[str, Any], uploads: Sequence[UploadedImage]) -> None:
        if uploads:
            raise ValidationError(f"{self.name} does not accept files")

    async def prepare_uploads(self, uploads: Sequence[UploadedImage]) -> List[UploadedImage]:
        return list(uploads)

    async def upload_all(self, record_id: Optional[str], uploads: Sequence[UploadedImage]) -> List[str]:
        return []

    def apply_uploads(self, fields: Dict[str, Any], urls: List[str]) -> Dict[str, Any]:
        return fields

    def image_refs(self, fields: Dict[str, Any]) -> List[str]:
        return []

    async def release(
        self, refs: Iterable[str], record_id: Optional[str] = None, reason: str = "replaced"
    ) -> List[CleanupResult]:
        return []

    async def persist(self, conn, record_id: str, fields: Dict[str, Any]) -> ModelT:
        row, created = await self.model.update_or_create(defaults=fields, using_db=conn, id=record_id)
        logger.debug("%s %s %s", self.name, record_id, "created" if created else "updated")
        return row

    # ---- reads -------------------------------------------------------

    @asynccontextmanager
    async def atomic(self):
        try:
            async with self.database.transaction() as conn:
                yield conn
        except BaseORMException as exc:
            logger.exception("%s transaction failed", self.name)
            raise PersistenceFailure() from exc

    async def load(self, record_id: str) -> Optional[ModelT]:
        return await self.model.filter(id=record_id).first()

    async def get(self, record_id: str) -> ModelT:
        row = await self.load(record_id)
        if row is None:
            raise NotFoundError(f"{self.name} not found: {record_id}")
        return row

    async def list(self, limit: Optional[int] = None) -> List[ModelT]:
        query = self.model.all()
        if limit:
            query = query.limit(limit)
        return await query

    # ---- writes ------------------------------------------------------

    async def create(self, fields: Dict[str, Any], uploads: Sequence[UploadedImage] = ()) -> ModelT:
        return await self.save(None, fields, uploads)

    async def update(self, record_id: str, fields: Dict[str, Any], uploads: Sequence[UploadedImage] = ()) -> ModelT:
        return await self.save(record_id, fields, uploads, require_existing=True)

    async def save(
        self,
        record_id: Optional[str],
        fields: Dict[str, Any],
        uploads: Sequence[UploadedImage] = (),
        *,
        require_existing: bool = False,
    ) -> ModelT:
        """Insert or update ``record_id`` with ``fields``, replacing images from ``uploads``."""
        if record_id is not None and not (isinstance(record_id, str) and 0 < len(record_id) <= MAX_ID_LENGTH):
            raise ValidationError(f"id must be a string of 1 to {MAX_ID_LENGTH} characters")
        existing = await self.load(record_id) if record_id else None
        if existing is None and require_existing:
            raise NotFoundError(f"{self.name} not found: {record_id}")
        record_id = record_id or self.new_id()

        candidate = self.merge(existing, fields)
        self.validate(candidate)
        self.check_uploads(candidate, uploads)
        prepared = await self.prepare_uploads(uploads)

        new_urls = await self.upload_all(record_id, prepared)
        if new_urls:
            candidate = self.apply_uploads(candidate, new_urls)

        try:
            async with self.atomic() as conn:
                row = await self.persist(conn, record_id, candidate)
        except PersistenceFailure:
            for url in new_urls:
                logger.error(
                    "Row commit failed; uploaded object left orphaned",
                    extra={"resource": self.name, "record_id": record_id, "target": url},
                )
                record_cleanup_failure(self.name, "commit_failed")
            raise

        if existing is not None:
            kept = set(self.image_refs(candidate))
            stale = [ref for ref in self.image_refs(self.fields_of(existing)) if ref not in kept]
            await self.release(stale, record_id)
        return row

    async def delete(self, record_id: str) -> List[CleanupResult]:
        existing = await self.load(record_id)
        if existing is None:
            raise NotFoundError(f"{self.name} not found: {record_id}")

        async with self.atomic() as conn:
            deleted = await self.model.filter(id=record_id).using_db(conn).delete()
        if not deleted:
            logger.info("%s %s already deleted by a concurrent request", self.name, record_id)

        # Objects go only after the row is gone
        return await self.release(self.image_refs(self.fields_of(existing)), record_id, reason="deleted")

    async def delete_many(self, ids: Iterable[str]) -> List[str]:
        """Delete each id independently; returns the ids actually removed."""
        removed = []
        for record_id in dict.fromkeys(ids):
            try:
                await self.delete(record_id)
            except NotFoundError:
                logger.info("%s %s not found during batch delete", self.name, record_id)
                continue
            except AppError as exc:
                logger.warning("Batch delete of %s %s failed: %s", self.name, record_id, exc.message)
                continue
            removed.append(record_id)
        return removed


class ImageBackedResource(CrudResource[ModelT]):
    namespace: str = ""
    image_field: str = "image"

    def __init__(self, database: Database, storage: ObjectStorage):
        super().__init__(database)
        self.storage = storage

    def key_namespace(self, record_id: Optional[str]) -> str:
        # Objects of one record share a prefix, e.g. "albums/<album-id>/"
        return namespace_for(self.namespace, record_id or "")

    def check_uploads(self, fields: Dict[str, Any], uploads: Sequence[UploadedImage]) -> None:
        if len(uploads) > 1:
            raise ValidationError(f"{self.name} accepts a single image")

    def apply_uploads(self, fields: Dict[str, Any], urls: List[str]) -> Dict[str, Any]:
        return {**fields, self.image_field: urls[0]}

    def image_refs(self, fields: Dict[str, Any]) -> List[str]:
        ref = fields.get(self.image_field)
        return [ref] if ref else []

    async def upload_all(self, record_id: Optional[str], uploads: Sequence[UploadedImage]) -> List[str]:
        urls: List[str] = []
        for upload in uploads:
            # Fresh key per upload; the live object is never overwritten in place
            key = self.storage.new_key(self.key_namespace(record_id), upload.content_type)
            try:
                url = await self.storage.upload(upload.data, key, upload.content_type)
            except StorageWriteFailure:
                record_upload(self.name, "failed")
                await self.release(urls, record_id, reason="aborted")
                raise
            record_upload(self.name, "ok")
            urls.append(clean_url(url))
        return urls

    def owns(self, key: str, record_id: Optional[str]) -> bool:
        """Whether ``key`` was uploaded for ``record_id`` and may be deleted with it."""
        if ".." in key.split("/"):
            return False
        return key.startswith(self.key_namespace(record_id) + "/")

    async def release(
        self, refs: Iterable[str], record_id: Optional[str] = None, reason: str = "replaced"
    ) -> List[CleanupResult]:
        """Best-effort removal of objects no row refers to any more.

        Image references can come from clients, so only objects under the
        record's own key prefix are deleted; anything else is skipped.
        """
        results = []
        for ref in dict.fromkeys(refs):
            key = self.storage.resolve_key(ref)
            if key is None or not self.owns(key, record_id):
                logger.warning(
                    "Not an object of this record; skipping cleanup",
                    extra={"resource": self.name, "record_id": record_id, "target": ref, "reason": reason},
                )
                results.append(CleanupResult(ref, "skipped"))
                continue
            try:
                await self.storage.delete(key)
            except StorageDeleteFailure as exc:
                logger.warning(
                    "Storage cleanup failed; object left orphaned",
                    extra={"resource": self.name, "target": ref, "reason": reason},
                    exc_info=exc,
                )
                record_cleanup_failure(self.name, reason)
                results.append(CleanupResult(ref, "failed", exc.message))
                continue
            results.append(CleanupResult(ref, "deleted"))
        return results

    async def clear_image(self, record_id: str) -> bool:
        """Drop the image from a record. Returns False when there was none."""
        existing = await self.load(record_id)
        if existing is None:
            return False
        refs = self.image_refs(self.fields_of(existing))
        if not refs:
            return False
        async with self.atomic() as conn:
            await self.model.filter(id=record_id).using_db(conn).update(**{self.image_field: None})
        await self.release(refs, record_id, reason="cleared")
        return True
