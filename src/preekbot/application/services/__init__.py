"""Application services."""

from preekbot.application.services.conversation_session import (
    ConversationSession,
    ConversationSessionManager,
)
from preekbot.application.services.member_service import MemberService
from preekbot.application.services.queue_runner import QueueRunner
from preekbot.application.services.tool_dispatcher import (
    DispatchOutcome,
    ToolCallDispatcher,
)

__all__ = [
    "ConversationSession",
    "ConversationSessionManager",
    "DispatchOutcome",
    "MemberService",
    "QueueRunner",
    "ToolCallDispatcher",
]
