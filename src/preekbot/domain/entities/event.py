"""Event entity for event-driven architecture."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventType(Enum):
    """Event types for the event-driven system."""

    CONTENT_READY = "content_ready"
    SIGNAL_MESSAGE_RECEIVED = "signal_message_received"


@dataclass(frozen=True)
class Event:
    """Domain event.

    Attributes:
        type: Event type.
        payload: Event-specific data.
        created_at: Event creation time.
        attempt: Number of earlier delivery attempts.
    """

    type: EventType
    payload: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attempt: int = 0

    def get_identity_key(self) -> str:
        """Get identity key for duplicate detection.

        A repeated content-ready event for the same sermon and church replaces
        the pending one. Inbound messages are never collapsed.

        Returns:
            Unique key based on event type and payload.
        """
        if self.type == EventType.CONTENT_READY:
            church_id = self.payload.get("church_id", "")
            sermon_id = self.payload.get("sermon_id", "")
            return f"content_ready:{church_id}:{sermon_id}"
        elif self.type == EventType.SIGNAL_MESSAGE_RECEIVED:
            sender = self.payload.get("sender", "")
            timestamp = self.payload.get("timestamp", "")
            return f"signal_message:{sender}:{timestamp}:{id(self)}"
        return f"{self.type.value}:unknown"
