"""Audit logging service."""

from dataclasses import dataclass

from photo_share.services.stores import RecordStore

AUDIT_TABLE = "audit_events"


@dataclass
class AuditService:
    """Service for recording operator-visible events."""

    record_store: RecordStore

    def record_event(  # noqa: PLR0913
        self,
        owner_identity: str,
        entity_type: str,
        entity_ref: str,
        event_type: str,
        details: dict[str, object] | None = None,
    ) -> None:
        """Persist an audit event."""
        self.record_store.insert(
            AUDIT_TABLE,
            {
                "user_id": owner_identity,
                "entity_type": entity_type,
                "entity_ref": entity_ref,
                "event_type": event_type,
                "details_json": details,
            },
        )
