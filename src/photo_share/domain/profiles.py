"""Domain models for user profiles."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Identity:
    """Caller identity supplied by the authentication layer."""

    owner_identity: str
    is_authenticated: bool = True


@dataclass(frozen=True)
class Profile:
    """Represents the single profile row owned by an identity."""

    id: UUID
    owner_identity: str
    display_name: str | None
    avatar_url: str | None
    created_at: datetime


class ProfileUpdate(BaseModel):
    """Partial profile changes; only explicitly set fields are written."""

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = None


class ProvisionOutcome(StrEnum):
    """How a profile was obtained by get-or-create."""

    FOUND = "found"
    CREATED = "created"
    CONFLICT_RETRIED = "conflict_retried"


@dataclass(frozen=True)
class ProvisionResult:
    """Profile plus the path that produced it."""

    profile: Profile
    outcome: ProvisionOutcome


def parse_profile_row(row: dict[str, object]) -> Profile:
    """Parse a profiles row into a domain model."""
    return Profile(
        id=UUID(str(row["id"])),
        owner_identity=str(row["user_id"]),
        display_name=row.get("display_name"),
        avatar_url=row.get("avatar_url"),
        created_at=_parse_timestamp(row["created_at"]),
    )


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
