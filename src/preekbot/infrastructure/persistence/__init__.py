"""Persistence infrastructure."""

from preekbot.infrastructure.persistence.chat_history_repository import (
    SQLiteChatHistoryRepository,
)
from preekbot.infrastructure.persistence.content_status_repository import (
    SQLiteContentStatusRepository,
)
from preekbot.infrastructure.persistence.database import DatabaseManager
from preekbot.infrastructure.persistence.exceptions import (
    DatabaseError,
    DuplicatePhoneNumberError,
    PersistenceError,
)
from preekbot.infrastructure.persistence.member_repository import (
    SQLiteMemberRepository,
)
from preekbot.infrastructure.persistence.models import (
    ChatHistoryModel,
    ContentStatusModel,
    MemberModel,
)

__all__ = [
    "ChatHistoryModel",
    "ContentStatusModel",
    "DatabaseError",
    "DuplicatePhoneNumberError",
    "DatabaseManager",
    "MemberModel",
    "PersistenceError",
    "SQLiteChatHistoryRepository",
    "SQLiteContentStatusRepository",
    "SQLiteMemberRepository",
]
