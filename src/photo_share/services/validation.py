"""Pre-flight checks shared by the media commit workflow."""

from dataclasses import dataclass

import pydantic
from pydantic import BaseModel, Field, field_validator

from photo_share.domain.errors import ErrorKind, ValidationError
from photo_share.domain.photos import BlobUpload

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class PhotoMetadata(BaseModel):
    """Title and description attached to a committed photo."""

    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value:
            return None
        return value


@dataclass(frozen=True)
class ValidationGate:
    """Pure checks on an upload, applied in order; the first failure wins."""

    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def check(self, blob: BlobUpload) -> ErrorKind | None:
        """Return the rejection reason for a blob, or None when it is acceptable."""
        if not blob.content_type.startswith("image/"):
            return ErrorKind.UNSUPPORTED_MEDIA_TYPE
        if blob.byte_size > self.max_bytes:
            return ErrorKind.PAYLOAD_TOO_LARGE
        return None

    def validate(self, blob: BlobUpload) -> None:
        """Raise ValidationError when the blob is rejected."""
        reason = self.check(blob)
        if reason is ErrorKind.UNSUPPORTED_MEDIA_TYPE:
            raise ValidationError(
                f"File must be an image, got {blob.content_type!r}", reason
            )
        if reason is ErrorKind.PAYLOAD_TOO_LARGE:
            raise ValidationError(
                f"File size {blob.byte_size} exceeds the {self.max_bytes} byte limit",
                reason,
            )

    @staticmethod
    def validate_metadata(title: str, description: str | None) -> PhotoMetadata:
        """Re-validate caller-supplied metadata lengths."""
        try:
            return PhotoMetadata(title=title, description=description)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Invalid photo metadata", ErrorKind.INVALID_METADATA, exc
            ) from exc
