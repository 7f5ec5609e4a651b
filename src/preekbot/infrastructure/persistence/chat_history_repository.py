"""SQLite implementation of ChatHistoryRepository."""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from preekbot.domain.entities import ChatHistoryEntry, ChatRole
from preekbot.infrastructure.persistence.datetime_utils import normalize_to_utc
from preekbot.infrastructure.persistence.models import ChatHistoryModel


class SQLiteChatHistoryRepository:
    """SQLite 版 ChatHistoryRepository 実装（追記のみ）"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def append(self, entry: ChatHistoryEntry) -> None:
        """会話履歴を追記する

        Args:
            entry: 追記するエントリ
        """
        async with self._session_factory() as session:
            session.add(
                ChatHistoryModel(
                    id=entry.id,
                    member_id=entry.member_id,
                    conversation_id=entry.conversation_id,
                    role=entry.role.value,
                    content=entry.content,
                    response_id=entry.response_id,
                    tool_calls=(
                        json.dumps(entry.tool_calls, ensure_ascii=False)
                        if entry.tool_calls is not None
                        else None
                    ),
                    created_at=normalize_to_utc(entry.created_at),
                )
            )
            await session.commit()

    async def find_by_conversation(
        self,
        conversation_id: str,
        limit: int = 50,
    ) -> list[ChatHistoryEntry]:
        """会話の履歴を取得する

        直近 limit 件を古い順に返す。
        """
        async with self._session_factory() as session:
            statement = (
                select(ChatHistoryModel)
                .where(ChatHistoryModel.conversation_id == conversation_id)
                .order_by(col(ChatHistoryModel.created_at).desc())
                .limit(limit)
            )
            result = await session.exec(statement)
            models = list(result.all())

        # 新しい順で取得したので古い順に戻す
        models.reverse()
        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: ChatHistoryModel) -> ChatHistoryEntry:
        return ChatHistoryEntry(
            id=model.id,
            member_id=model.member_id,
            conversation_id=model.conversation_id,
            role=ChatRole(model.role),
            content=model.content,
            response_id=model.response_id,
            tool_calls=json.loads(model.tool_calls) if model.tool_calls else None,
            created_at=normalize_to_utc(model.created_at),
        )
