"""Error taxonomy for the photo sharing core.

Every error carries a machine-readable kind and a human-readable message so
the caller layer can render a specific message. The core itself performs no
formatting or localisation.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Specific failure reasons surfaced to callers."""

    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INVALID_METADATA = "invalid_metadata"
    INVALID_PAGE_REQUEST = "invalid_page_request"
    UPLOAD_FAILED = "upload_failed"
    STORAGE_CONFLICT = "storage_conflict"
    METADATA_PERSIST_FAILED = "metadata_persist_failed"
    PROFILE_LOOKUP_FAILED = "profile_lookup_failed"
    PROFILE_CREATE_FAILED = "profile_create_failed"
    PROFILE_UPDATE_FAILED = "profile_update_failed"
    FEED_READ_FAILED = "feed_read_failed"
    NO_SUCH_PROFILE = "no_such_profile"
    NOT_OWNER = "not_owner"
    NOT_AUTHENTICATED = "not_authenticated"


class PhotoShareError(Exception):
    """Base exception for all core failures."""

    category = "internal"

    def __init__(
        self, message: str, kind: ErrorKind, cause: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.cause = cause

    def to_dict(self) -> dict[str, object]:
        """Return a structured representation for the caller layer."""
        payload: dict[str, object] = {
            "kind": self.kind.value,
            "category": self.category,
            "message": self.message,
        }
        if self.cause is not None:
            payload["cause"] = str(self.cause)
        return payload


class ValidationError(PhotoShareError):
    """Bad input shape or size; nothing was written."""

    category = "validation"


class StorageError(PhotoShareError):
    """Blob layer failure; nothing was persisted."""

    category = "storage"


class PersistenceError(PhotoShareError):
    """Row layer failure."""

    category = "persistence"

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        cause: Exception | None = None,
        compensated: bool | None = None,
    ) -> None:
        super().__init__(message, kind, cause)
        self.compensated = compensated

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        if self.compensated is not None:
            payload["compensated"] = self.compensated
        return payload


class ConflictError(PhotoShareError):
    """Uniqueness violation that could not be resolved internally."""

    category = "conflict"


class NotFoundError(PhotoShareError):
    """Lookup miss that is not remediated automatically."""

    category = "not_found"


class AuthorizationError(PhotoShareError):
    """Caller identity is missing or does not own the target."""

    category = "authorization"
