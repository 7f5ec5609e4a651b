"""Chat history entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class ChatRole(Enum):
    """発言者の役割"""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ChatHistoryEntry:
    """会話の1ターン（追記のみ）

    Attributes:
        member_id: メンバー ID
        conversation_id: LLM 会話ハンドル
        role: 発言者の役割
        content: 本文
        response_id: LLM のレスポンス ID
        tool_calls: ツール呼び出しのペイロード
        id: エントリ ID
        created_at: 作成日時
    """

    member_id: str
    conversation_id: str
    role: ChatRole
    content: str
    response_id: str | None = None
    tool_calls: list[dict[str, Any]] | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """バリデーション"""
        if not self.content.strip():
            raise ValueError("Content cannot be empty")
