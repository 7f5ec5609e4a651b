"""Domain entities."""

from preekbot.domain.entities.chat_history import ChatHistoryEntry, ChatRole
from preekbot.domain.entities.content import ContentReady
from preekbot.domain.entities.content_status import (
    ContentStatus,
    ContentStatusType,
    create_content_status,
)
from preekbot.domain.entities.event import Event, EventType
from preekbot.domain.entities.llm_response import (
    LLMResponse,
    OutputItem,
    OutputItemType,
)
from preekbot.domain.entities.member import (
    Member,
    NotificationFrequency,
    TargetGroup,
)
from preekbot.domain.entities.tool import ToolKind, ToolResult

__all__ = [
    "ChatHistoryEntry",
    "ChatRole",
    "ContentReady",
    "ContentStatus",
    "ContentStatusType",
    "Event",
    "EventType",
    "LLMResponse",
    "Member",
    "NotificationFrequency",
    "OutputItem",
    "OutputItemType",
    "TargetGroup",
    "ToolKind",
    "ToolResult",
    "create_content_status",
]
