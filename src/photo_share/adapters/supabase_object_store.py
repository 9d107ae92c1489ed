"""Supabase Storage-backed object store."""

from dataclasses import dataclass

import httpx
from storage3.exceptions import StorageApiError, StorageException
from supabase import Client

from photo_share.services.stores import ObjectStore, ObjectStoreError


@dataclass
class SupabaseObjectStore(ObjectStore):
    """Stores photo blobs in a Supabase Storage bucket."""

    client: Client
    bucket: str = "photos"
    cache_control: str = "3600"

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> None:
        """Upload bytes under a key."""
        try:
            self.client.storage.from_(self.bucket).upload(
                path=key,
                file=data,
                file_options={
                    "content-type": content_type,
                    "cache-control": self.cache_control,
                    "upsert": "true" if allow_overwrite else "false",
                },
            )
        except StorageApiError as exc:
            raise ObjectStoreError(
                f"Upload of {key} failed: {exc}", is_conflict=_is_conflict(exc)
            ) from exc
        except StorageException as exc:
            raise ObjectStoreError(f"Upload of {key} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ObjectStoreError(f"Object store unreachable: {exc}") from exc

    def public_url(self, key: str) -> str:
        """Return the public URL for a stored key."""
        return self.client.storage.from_(self.bucket).get_public_url(key)

    def delete(self, key: str) -> None:
        """Remove a stored key."""
        try:
            self.client.storage.from_(self.bucket).remove([key])
        except StorageException as exc:
            raise ObjectStoreError(f"Delete of {key} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ObjectStoreError(f"Object store unreachable: {exc}") from exc


def _is_conflict(exc: StorageApiError) -> bool:
    """Return True when storage rejected the upload because the key exists."""
    status = getattr(exc, "status", None)
    code = getattr(exc, "code", None)
    return str(status) == "409" or code == "Duplicate"
