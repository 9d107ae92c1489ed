"""Media commit workflow: blob upload, metadata insert and compensation."""

import logging
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from photo_share.domain.errors import (
    AuthorizationError,
    ConflictError,
    ErrorKind,
    PersistenceError,
    StorageError,
)
from photo_share.domain.photos import BlobUpload, Photo, parse_photo_row
from photo_share.services.audit import AuditService
from photo_share.services.stores import (
    ObjectStore,
    ObjectStoreError,
    RecordStore,
    RecordStoreError,
)
from photo_share.services.validation import ValidationGate

PHOTOS_TABLE = "photos"

_logger = logging.getLogger(__name__)


def build_storage_key(owner_identity: str, blob: BlobUpload) -> str:
    """Build an owner-scoped, time-unique object key for an upload."""
    millis = int(datetime.now(tz=UTC).timestamp() * 1000)
    nonce = uuid4().hex[:8]
    return f"{owner_identity}/{millis}-{nonce}.{_extension_for(blob)}"


def _extension_for(blob: BlobUpload) -> str:
    """Return the file extension from the original name or the content type."""
    _, dot, suffix = blob.filename.rpartition(".")
    if dot and suffix and "/" not in suffix:
        return suffix.lower()
    guessed = mimetypes.guess_extension(blob.content_type)
    if guessed:
        return guessed.lstrip(".")
    return "bin"


@dataclass
class MediaCommitCoordinator:
    """Associates an uploaded blob with a photo row, undoing the blob on failure.

    A returned Photo implies both blob and row exist. A raised error implies no
    row exists; the blob is removed on a best-effort basis only. Nothing here
    is retried: retry policy belongs to the caller.
    """

    object_store: ObjectStore
    record_store: RecordStore
    gate: ValidationGate = field(default_factory=ValidationGate)
    audit_service: AuditService | None = None
    key_builder: Callable[[str, BlobUpload], str] = build_storage_key

    def commit(
        self,
        owner_identity: str,
        blob: BlobUpload,
        title: str,
        description: str | None = None,
    ) -> Photo:
        """Upload a blob and persist its photo row."""
        if not owner_identity:
            raise AuthorizationError(
                "User not authenticated", ErrorKind.NOT_AUTHENTICATED
            )
        self.gate.validate(blob)
        metadata = self.gate.validate_metadata(title, description)

        key = self.key_builder(owner_identity, blob)
        try:
            self.object_store.put(
                key, blob.data, content_type=blob.content_type, allow_overwrite=False
            )
        except ObjectStoreError as exc:
            if exc.is_conflict:
                raise ConflictError(
                    f"Storage key already exists: {key}",
                    ErrorKind.STORAGE_CONFLICT,
                    exc,
                ) from exc
            raise StorageError(
                f"Upload failed: {exc}", ErrorKind.UPLOAD_FAILED, exc
            ) from exc

        blob_ref = self.object_store.public_url(key)
        try:
            row = self.record_store.insert(
                PHOTOS_TABLE,
                {
                    "user_id": owner_identity,
                    "image_url": blob_ref,
                    "title": metadata.title,
                    "description": metadata.description,
                },
            )
        except RecordStoreError as exc:
            compensated = self._compensate(owner_identity, key, exc)
            raise PersistenceError(
                f"Failed to save photo metadata: {exc}",
                ErrorKind.METADATA_PERSIST_FAILED,
                exc,
                compensated=compensated,
            ) from exc

        photo = parse_photo_row(row)
        _logger.info("Committed photo: photo_id=%s key=%s", photo.id, key)
        return photo

    def _compensate(
        self, owner_identity: str, key: str, original: RecordStoreError
    ) -> bool:
        """Delete the blob written for a failed commit; return True on success."""
        try:
            self.object_store.delete(key)
        except ObjectStoreError:
            _logger.exception(
                "Compensating delete failed, blob left unreferenced: key=%s", key
            )
            self._report_orphan(owner_identity, key, original)
            return False
        _logger.warning("Removed blob after metadata insert failed: key=%s", key)
        return True

    def _report_orphan(
        self, owner_identity: str, key: str, original: RecordStoreError
    ) -> None:
        if self.audit_service is None:
            return
        try:
            self.audit_service.record_event(
                owner_identity=owner_identity,
                entity_type="blob",
                entity_ref=key,
                event_type="orphaned_blob",
                details={"insert_error": str(original)},
            )
        except RecordStoreError:
            _logger.exception("Failed to record orphaned blob: key=%s", key)
