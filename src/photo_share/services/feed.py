"""Paginated photo retrieval for the global feed and owner galleries."""

from dataclasses import dataclass

from photo_share.domain.errors import ErrorKind, PersistenceError, ValidationError
from photo_share.domain.photos import Page, parse_photo_row
from photo_share.services.media import PHOTOS_TABLE
from photo_share.services.profiles import PROFILES_TABLE
from photo_share.services.stores import RecordStore, RecordStoreError

# created_at alone is not unique at the store's timestamp resolution.
FEED_ORDER: tuple[tuple[str, bool], ...] = (("created_at", True), ("id", True))

DEFAULT_PAGE_SIZE = 20


@dataclass
class FeedPaginator:
    """Stateless range reads over photos, newest first."""

    record_store: RecordStore
    default_limit: int = DEFAULT_PAGE_SIZE

    def fetch_page(
        self,
        owner_identity: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Page:
        """Return one window of photos and the total count under the same filter."""
        resolved_limit = self.default_limit if limit is None else limit
        if page < 1 or resolved_limit < 1:
            raise ValidationError(
                f"Invalid page request: page={page} limit={resolved_limit}",
                ErrorKind.INVALID_PAGE_REQUEST,
            )

        filters: dict[str, object] = {}
        if owner_identity:
            filters["user_id"] = owner_identity
        try:
            rows, total = self.record_store.select_range(
                PHOTOS_TABLE,
                filters=filters,
                order=FEED_ORDER,
                offset=(page - 1) * resolved_limit,
                limit=resolved_limit,
                embed=(PROFILES_TABLE,),
            )
        except RecordStoreError as exc:
            raise PersistenceError(
                f"Failed to fetch photos: {exc}", ErrorKind.FEED_READ_FAILED, exc
            ) from exc

        return Page(
            items=[parse_photo_row(row) for row in rows],
            total_count=total,
            page=page,
            limit=resolved_limit,
        )
