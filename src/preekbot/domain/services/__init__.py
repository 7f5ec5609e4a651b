"""Domain services."""

from preekbot.domain.services.church_hold import has_multiple_churches
from preekbot.domain.services.message_formatter import (
    find_summary_audience,
    format_content_message,
)
from preekbot.domain.services.phone import normalize_phone_number
from preekbot.domain.services.protocols import (
    ContentDetailService,
    ConversationService,
    NotificationChannel,
    NotificationResult,
)

__all__ = [
    "ContentDetailService",
    "ConversationService",
    "NotificationChannel",
    "NotificationResult",
    "find_summary_audience",
    "format_content_message",
    "has_multiple_churches",
    "normalize_phone_number",
]
