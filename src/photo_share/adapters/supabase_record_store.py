"""Supabase-backed record store."""

from collections.abc import Sequence
from dataclasses import dataclass

import httpx
from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from supabase import Client

from photo_share.services.stores import RecordStore, RecordStoreError

_UNIQUE_VIOLATION = "23505"
_NO_ROWS = "PGRST116"
_RANGE_NOT_SATISFIABLE = "PGRST103"

_EMBEDS = {
    "profiles": "profiles(id, user_id, display_name, avatar_url, created_at)",
}


@dataclass
class SupabaseRecordStore(RecordStore):
    """PostgREST implementation of the record store interface."""

    client: Client

    def insert(self, table: str, row: dict[str, object]) -> dict[str, object]:
        """Insert a row and return it as stored."""
        response = _execute(self.client.table(table).insert(row))
        if not response.data:
            raise RecordStoreError(f"Insert into {table} returned no rows")
        return response.data[0]

    def select_one(
        self, table: str, filters: dict[str, object]
    ) -> dict[str, object]:
        """Return the first row matching the filters."""
        query = _apply_filters(self.client.table(table).select("*"), filters)
        response = _execute(query.limit(1))
        if not response.data:
            raise RecordStoreError(f"No matching row in {table}", is_not_found=True)
        return response.data[0]

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
        """Return an ordered window of rows and the exact count of matches."""
        columns = ", ".join(["*", *(_EMBEDS.get(name, f"{name}(*)") for name in embed)])
        query = _apply_filters(
            self.client.table(table).select(columns, count=CountMethod.exact), filters
        )
        for column, descending in order:
            query = query.order(column, desc=descending)
        try:
            response = query.range(offset, offset + limit - 1).execute()
        except APIError as exc:
            if exc.code != _RANGE_NOT_SATISFIABLE:
                raise _translate(exc) from exc
            # Offset lies past the last row: empty window, count still exact.
            return [], self._count(table, filters)
        except httpx.HTTPError as exc:
            raise RecordStoreError(f"Record store unreachable: {exc}") from exc
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return rows, total

    def update(
        self, table: str, filters: dict[str, object], fields: dict[str, object]
    ) -> dict[str, object]:
        """Update the matching row and return it."""
        query = _apply_filters(self.client.table(table).update(fields), filters)
        response = _execute(query)
        if not response.data:
            raise RecordStoreError(f"No matching row in {table}", is_not_found=True)
        return response.data[0]

    def _count(self, table: str, filters: dict[str, object]) -> int:
        query = _apply_filters(
            self.client.table(table).select("id", count=CountMethod.exact, head=True),
            filters,
        )
        response = _execute(query)
        return response.count or 0


def _apply_filters(query, filters: dict[str, object]):  # type: ignore[no-untyped-def]
    """Apply equality filters to a PostgREST query builder."""
    for column, value in filters.items():
        query = query.eq(column, value)
    return query


def _execute(query):  # type: ignore[no-untyped-def]
    """Execute a query, translating backend failures into RecordStoreError."""
    try:
        return query.execute()
    except APIError as exc:
        raise _translate(exc) from exc
    except httpx.HTTPError as exc:
        raise RecordStoreError(f"Record store unreachable: {exc}") from exc


def _translate(exc: APIError) -> RecordStoreError:
    return RecordStoreError(
        exc.message or str(exc),
        is_unique_violation=exc.code == _UNIQUE_VIOLATION,
        is_not_found=exc.code == _NO_ROWS,
    )
