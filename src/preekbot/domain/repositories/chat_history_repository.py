"""Chat history repository protocol."""

from typing import Protocol

from preekbot.domain.entities import ChatHistoryEntry


class ChatHistoryRepository(Protocol):
    """会話履歴リポジトリ（追記のみ）"""

    async def append(self, entry: ChatHistoryEntry) -> None:
        """会話履歴を追記する

        Args:
            entry: 追記するエントリ
        """
        ...

    async def find_by_conversation(
        self,
        conversation_id: str,
        limit: int = 50,
    ) -> list[ChatHistoryEntry]:
        """会話の履歴を取得する

        Args:
            conversation_id: LLM 会話ハンドル
            limit: 取得する最大件数

        Returns:
            エントリのリスト（古い順）
        """
        ...
