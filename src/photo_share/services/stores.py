"""Collaborator interfaces for the object store and the record store."""

from collections.abc import Sequence
from typing import Protocol


class ObjectStoreError(Exception):
    """Failure reported by the object store."""

    def __init__(self, message: str, *, is_conflict: bool = False) -> None:
        super().__init__(message)
        self.is_conflict = is_conflict


class RecordStoreError(Exception):
    """Failure reported by the record store, with structured reason flags."""

    def __init__(
        self,
        message: str,
        *,
        is_unique_violation: bool = False,
        is_not_found: bool = False,
    ) -> None:
        super().__init__(message)
        self.is_unique_violation = is_unique_violation
        self.is_not_found = is_not_found


class ObjectStore(Protocol):
    """Binary blob storage addressed by key."""

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> None:
        """Store bytes under a key; raise ObjectStoreError on failure."""

    def public_url(self, key: str) -> str:
        """Return a durable public URI for a stored key."""

    def delete(self, key: str) -> None:
        """Delete a stored key; raise ObjectStoreError on failure."""


class RecordStore(Protocol):
    """Relational row storage used by the core services."""

    def insert(self, table: str, row: dict[str, object]) -> dict[str, object]:
        """Insert a row and return it as stored."""

    def select_one(
        self, table: str, filters: dict[str, object]
    ) -> dict[str, object]:
        """Return the row matching all equality filters.

        Raises RecordStoreError with is_not_found set when nothing matches.
        """

    def select_range(  # noqa: PLR0913
        self,
        table: str,
        *,
        filters: dict[str, object],
        order: Sequence[tuple[str, bool]],
        offset: int,
        limit: int,
        embed: Sequence[str] = (),
    ) -> tuple[list[dict[str, object]], int]:
        """Return an ordered window of matching rows and the exact match count.

        ``order`` holds ``(column, descending)`` pairs applied in sequence.
        ``embed`` names related tables to attach to each row under their name.
        """

    def update(
        self, table: str, filters: dict[str, object], fields: dict[str, object]
    ) -> dict[str, object]:
        """Update the matching row and return it.

        Raises RecordStoreError with is_not_found set when nothing matches.
        """
