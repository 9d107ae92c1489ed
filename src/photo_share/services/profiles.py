"""Lazy profile provisioning and owner-scoped profile updates."""

import logging
from dataclasses import dataclass

import pydantic

from photo_share.domain.errors import (
    AuthorizationError,
    ErrorKind,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from photo_share.domain.profiles import (
    Identity,
    Profile,
    ProfileUpdate,
    ProvisionOutcome,
    ProvisionResult,
    parse_profile_row,
)
from photo_share.services.stores import RecordStore, RecordStoreError

PROFILES_TABLE = "profiles"

_logger = logging.getLogger(__name__)


@dataclass
class ProfileProvisioner:
    """Guarantees exactly one profile row per identity.

    Two first lookups for the same identity may both miss and both insert.
    The record store's uniqueness constraint on ``user_id`` rejects the
    second insert, which is answered with a re-read of the winning row.
    """

    record_store: RecordStore

    def get_or_create(self, owner_identity: str) -> Profile:
        """Return the identity's profile, creating it on first use."""
        return self.provision(owner_identity).profile

    def provision(self, owner_identity: str) -> ProvisionResult:
        """Return the profile plus whether it was found, created or re-read."""
        existing = self._lookup(owner_identity)
        if existing is not None:
            return ProvisionResult(existing, ProvisionOutcome.FOUND)

        try:
            row = self.record_store.insert(
                PROFILES_TABLE, {"user_id": owner_identity}
            )
        except RecordStoreError as exc:
            if not exc.is_unique_violation:
                raise PersistenceError(
                    f"Failed to create profile: {exc}",
                    ErrorKind.PROFILE_CREATE_FAILED,
                    exc,
                ) from exc
            _logger.warning(
                "Profile created concurrently, re-reading: owner=%s", owner_identity
            )
            winner = self._lookup(owner_identity)
            if winner is None:
                raise PersistenceError(
                    "Profile vanished after a conflicting insert",
                    ErrorKind.PROFILE_LOOKUP_FAILED,
                    exc,
                ) from exc
            return ProvisionResult(winner, ProvisionOutcome.CONFLICT_RETRIED)

        _logger.info("Created profile: owner=%s", owner_identity)
        return ProvisionResult(parse_profile_row(row), ProvisionOutcome.CREATED)

    def update(
        self,
        caller: Identity,
        owner_identity: str,
        fields: ProfileUpdate | dict[str, object],
    ) -> Profile:
        """Write the supplied fields to the owner's profile and return it."""
        if not caller.is_authenticated or caller.owner_identity != owner_identity:
            raise AuthorizationError(
                "Only the owner may update this profile", ErrorKind.NOT_OWNER
            )
        changes = _coerce_update(fields).model_dump(exclude_unset=True)
        filters = {"user_id": owner_identity}
        try:
            if not changes:
                row = self.record_store.select_one(PROFILES_TABLE, filters)
            else:
                row = self.record_store.update(PROFILES_TABLE, filters, changes)
        except RecordStoreError as exc:
            if exc.is_not_found:
                raise NotFoundError(
                    f"No profile for {owner_identity}", ErrorKind.NO_SUCH_PROFILE, exc
                ) from exc
            raise PersistenceError(
                f"Failed to update profile: {exc}",
                ErrorKind.PROFILE_UPDATE_FAILED,
                exc,
            ) from exc
        return parse_profile_row(row)

    def _lookup(self, owner_identity: str) -> Profile | None:
        """Return the profile, None on a clean miss, or raise on read failure."""
        try:
            row = self.record_store.select_one(
                PROFILES_TABLE, {"user_id": owner_identity}
            )
        except RecordStoreError as exc:
            if exc.is_not_found:
                return None
            raise PersistenceError(
                f"Failed to fetch profile: {exc}",
                ErrorKind.PROFILE_LOOKUP_FAILED,
                exc,
            ) from exc
        return parse_profile_row(row)


def _coerce_update(fields: ProfileUpdate | dict[str, object]) -> ProfileUpdate:
    if isinstance(fields, ProfileUpdate):
        return fields
    try:
        return ProfileUpdate.model_validate(fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            "Invalid profile fields", ErrorKind.INVALID_METADATA, exc
        ) from exc
