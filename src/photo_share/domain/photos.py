"""Domain models for committed photos and feed pages."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from photo_share.domain.profiles import Profile, parse_profile_row


@dataclass(frozen=True)
class BlobUpload:
    """An uploaded binary plus the metadata the client declared for it."""

    filename: str
    content_type: str
    data: bytes

    @property
    def byte_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Photo:
    """A committed media item, optionally joined with its owner's profile."""

    id: UUID
    owner_identity: str
    blob_ref: str
    title: str | None
    description: str | None
    created_at: datetime
    profile: Profile | None = None


@dataclass(frozen=True)
class Page:
    """A window of photos plus the count of every matching row."""

    items: list[Photo]
    total_count: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        """Return True when rows exist beyond this window."""
        seen = (self.page - 1) * self.limit + len(self.items)
        return seen < self.total_count


def parse_photo_row(row: dict[str, object]) -> Photo:
    """Parse a photos row, with an optional embedded profile, into a Photo."""
    created_raw = row["created_at"]
    embedded = row.get("profiles")
    return Photo(
        id=UUID(str(row["id"])),
        owner_identity=str(row["user_id"]),
        blob_ref=str(row["image_url"]),
        title=row.get("title"),
        description=row.get("description"),
        created_at=(
            created_raw
            if isinstance(created_raw, datetime)
            else datetime.fromisoformat(str(created_raw))
        ),
        profile=parse_profile_row(embedded) if isinstance(embedded, dict) else None,
    )
