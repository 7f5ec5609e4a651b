"""Event handlers package."""

from preekbot.application.handlers.content_ready_handler import (
    ContentReadyEventHandler,
)
from preekbot.application.handlers.signal_message_handler import (
    SignalMessageEventHandler,
)

__all__ = [
    "ContentReadyEventHandler",
    "SignalMessageEventHandler",
]
