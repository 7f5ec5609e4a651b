"""Domain repositories."""

from preekbot.domain.repositories.chat_history_repository import (
    ChatHistoryRepository,
)
from preekbot.domain.repositories.content_status_repository import (
    ContentStatusRepository,
)
from preekbot.domain.repositories.member_repository import MemberRepository

__all__ = [
    "ChatHistoryRepository",
    "ContentStatusRepository",
    "MemberRepository",
]
