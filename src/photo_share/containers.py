"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from photo_share.adapters.supabase_object_store import SupabaseObjectStore
from photo_share.adapters.supabase_record_store import SupabaseRecordStore
from photo_share.app_logging import configure_logging
from photo_share.config import Settings
from photo_share.services.audit import AuditService
from photo_share.services.feed import FeedPaginator
from photo_share.services.media import MediaCommitCoordinator
from photo_share.services.profiles import ProfileProvisioner
from photo_share.services.stores import ObjectStore, RecordStore
from photo_share.services.validation import ValidationGate


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    object_store: ObjectStore
    audit_service: AuditService
    media_commit: MediaCommitCoordinator
    profile_provisioner: ProfileProvisioner
    feed_paginator: FeedPaginator


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    record_store = SupabaseRecordStore(supabase_client)
    object_store = SupabaseObjectStore(
        supabase_client,
        bucket=resolved_settings.storage_bucket,
        cache_control=resolved_settings.storage_cache_control,
    )
    return wire_services(resolved_settings, record_store, object_store)


def wire_services(
    settings: Settings, record_store: RecordStore, object_store: ObjectStore
) -> AppContainer:
    """Build the core services on top of the given stores."""
    audit_service = AuditService(record_store)
    media_commit = MediaCommitCoordinator(
        object_store=object_store,
        record_store=record_store,
        gate=ValidationGate(max_bytes=settings.max_upload_bytes),
        audit_service=audit_service,
    )
    return AppContainer(
        settings=settings,
        record_store=record_store,
        object_store=object_store,
        audit_service=audit_service,
        media_commit=media_commit,
        profile_provisioner=ProfileProvisioner(record_store),
        feed_paginator=FeedPaginator(
            record_store, default_limit=settings.feed_page_size
        ),
    )
