"""Shared test fixtures."""

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from photo_share.config import Settings
from photo_share.containers import AppContainer, wire_services
from photo_share.domain.photos import BlobUpload
from photo_share.services.stores import (
    ObjectStore,
    ObjectStoreError,
    RecordStore,
    RecordStoreError,
)

# Embedded relations: name -> (local column, remote column).
_RELATIONS = {"profiles": ("user_id", "user_id")}


@dataclass
class InMemoryRecordStore(RecordStore):
    """In-memory record store enforcing unique columns, for tests."""

    tables: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    unique_columns: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {"profiles": ("user_id",)}
    )
    insert_errors: dict[str, RecordStoreError] = field(default_factory=dict)
    select_errors: dict[str, RecordStoreError] = field(default_factory=dict)
    update_errors: dict[str, RecordStoreError] = field(default_factory=dict)
    on_select: Callable[[str], None] | None = None
    insert_calls: int = 0
    update_calls: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def rows(self, table: str) -> list[dict[str, object]]:
        return self.tables.setdefault(table, [])

    def insert(self, table: str, row: dict[str, object]) -> dict[str, object]:
        with self._lock:
            self.insert_calls += 1
            if table in self.insert_errors:
                raise self.insert_errors[table]
            for column in self.unique_columns.get(table, ()):
                if any(
                    existing.get(column) == row.get(column)
                    for existing in self.rows(table)
                ):
                    raise RecordStoreError(
                        f"duplicate key value violates unique constraint on {column}",
                        is_unique_violation=True,
                    )
            stored = {
                "id": str(uuid4()),
                "created_at": datetime.now(tz=UTC).isoformat(),
                **row,
            }
            self.rows(table).append(stored)
            return dict(stored)

    def select_one(
        self, table: str, filters: dict[str, object]
    ) -> dict[str, object]:
        with self._lock:
            if table in self.select_errors:
                raise self.select_errors[table]
            matches = self._matching(table, filters)
        if self.on_select is not None:
            self.on_select(table)
        if not matches:
            raise RecordStoreError("no rows", is_not_found=True)
        return dict(matches[0])

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
        with self._lock:
            if table in self.select_errors:
                raise self.select_errors[table]
            matches = [dict(row) for row in self._matching(table, filters)]
            for column, descending in reversed(order):
                matches.sort(key=lambda row: str(row[column]), reverse=descending)
            window = matches[offset : offset + limit]
            for row in window:
                for name in embed:
                    local, remote = _RELATIONS[name]
                    related = [
                        other
                        for other in self.rows(name)
                        if other.get(remote) == row.get(local)
                    ]
                    row[name] = dict(related[0]) if related else None
            return window, len(matches)

    def update(
        self, table: str, filters: dict[str, object], fields: dict[str, object]
    ) -> dict[str, object]:
        with self._lock:
            self.update_calls += 1
            if table in self.update_errors:
                raise self.update_errors[table]
            matches = self._matching(table, filters)
            if not matches:
                raise RecordStoreError("no rows", is_not_found=True)
            matches[0].update(fields)
            return dict(matches[0])

    def _matching(
        self, table: str, filters: dict[str, object]
    ) -> list[dict[str, object]]:
        return [
            row
            for row in self.rows(table)
            if all(row.get(column) == value for column, value in filters.items())
        ]


@dataclass
class InMemoryObjectStore(ObjectStore):
    """In-memory object store that refuses overwrites unless asked, for tests."""

    blobs: dict[str, bytes] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    put_error: ObjectStoreError | None = None
    delete_error: ObjectStoreError | None = None
    base_url: str = "https://cdn.example.test/storage/v1/object/public/photos"

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> None:
        if self.put_error is not None:
            raise self.put_error
        if key in self.blobs and not allow_overwrite:
            raise ObjectStoreError("The resource already exists", is_conflict=True)
        self.blobs[key] = data

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def delete(self, key: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(key)
        self.blobs.pop(key, None)


def make_blob(
    filename: str = "sunset.JPG",
    content_type: str = "image/jpeg",
    data: bytes = b"\xff\xd8\xff-fake-jpeg",
) -> BlobUpload:
    return BlobUpload(filename=filename, content_type=content_type, data=data)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def container(
    settings: Settings,
    record_store: InMemoryRecordStore,
    object_store: InMemoryObjectStore,
) -> AppContainer:
    return wire_services(settings, record_store, object_store)
