"""SQLite implementation of ContentStatusRepository."""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from preekbot.domain.entities import ContentStatus, ContentStatusType, Member
from preekbot.domain.exceptions import DuplicateTicketError
from preekbot.infrastructure.persistence.datetime_utils import (
    normalize_optional,
    normalize_to_utc,
)
from preekbot.infrastructure.persistence.exceptions import DatabaseError
from preekbot.infrastructure.persistence.member_repository import member_to_model
from preekbot.infrastructure.persistence.models import ContentStatusModel


class SQLiteContentStatusRepository:
    """SQLite 版 ContentStatusRepository 実装

    (member_id, content_id) の一意制約により、同じ組のチケットは1件のみ。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def save(self, ticket: ContentStatus, member: Member | None = None) -> None:
        """チケットを保存する（upsert）

        member を指定した場合はチケットとメンバーを同一トランザクションで保存する。

        Args:
            ticket: 保存するチケット
            member: 同時に保存するメンバー

        Raises:
            DuplicateTicketError: 別 ID で同じ組のチケットが既に存在する場合
        """
        async with self._session_factory() as session:
            try:
                await session.merge(self._to_model(ticket))
                if member is not None:
                    await session.merge(member_to_model(member))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateTicketError(ticket.member_id, ticket.content_id) from e

    async def save_all(self, tickets: list[ContentStatus]) -> None:
        """複数のチケットを1回のコミットで保存する

        Args:
            tickets: 保存するチケット

        Raises:
            DatabaseError: コミットに失敗した場合（全件ロールバック）
        """
        if not tickets:
            return
        async with self._session_factory() as session:
            try:
                for ticket in tickets:
                    await session.merge(self._to_model(ticket))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to save {len(tickets)} tickets") from e

    async def find_by_id(self, ticket_id: str) -> ContentStatus | None:
        """ID でチケットを検索する"""
        async with self._session_factory() as session:
            model = await session.get(ContentStatusModel, ticket_id)
            if model is None:
                return None
            return self._to_entity(model)

    async def find_by_status(
        self,
        status: ContentStatusType,
        limit: int | None = None,
    ) -> list[ContentStatus]:
        """状態でチケットを検索する

        作成日時の昇順（古い順）で返す。

        Args:
            status: 状態
            limit: 取得する最大件数（None の場合は全件）

        Returns:
            チケットのリスト
        """
        async with self._session_factory() as session:
            statement = (
                select(ContentStatusModel)
                .where(ContentStatusModel.status == status.value)
                .order_by(col(ContentStatusModel.created_at))
            )
            if limit is not None:
                statement = statement.limit(limit)
            result = await session.exec(statement)
            return [self._to_entity(model) for model in result.all()]

    async def find_by_member_and_content(
        self,
        member_id: str,
        content_id: str,
    ) -> ContentStatus | None:
        """メンバーとコンテンツの組でチケットを検索する"""
        async with self._session_factory() as session:
            statement = (
                select(ContentStatusModel)
                .where(ContentStatusModel.member_id == member_id)
                .where(ContentStatusModel.content_id == content_id)
            )
            result = await session.exec(statement)
            model = result.first()
            if model is None:
                return None
            return self._to_entity(model)

    async def find_scheduled_due(self, now: datetime) -> list[ContentStatus]:
        """配信予定日時を過ぎた SCHEDULED のチケットを取得する

        Args:
            now: 現在時刻

        Returns:
            チケットのリスト（配信予定日時の昇順、未設定が先）
        """
        # 保存時と同じく aware UTC で比較する
        threshold = normalize_to_utc(now)
        async with self._session_factory() as session:
            statement = (
                select(ContentStatusModel)
                .where(ContentStatusModel.status == ContentStatusType.SCHEDULED.value)
                .where(
                    or_(
                        col(ContentStatusModel.schedule_date).is_(None),
                        col(ContentStatusModel.schedule_date) <= threshold,
                    )
                )
                .order_by(
                    col(ContentStatusModel.schedule_date),
                    col(ContentStatusModel.created_at),
                )
            )
            result = await session.exec(statement)
            return [self._to_entity(model) for model in result.all()]

    def _to_entity(self, model: ContentStatusModel) -> ContentStatus:
        """モデルをエンティティに変換する

        Args:
            model: ContentStatusModel インスタンス

        Returns:
            ContentStatus エンティティ
        """
        return ContentStatus(
            id=model.id,
            content_id=model.content_id,
            member_id=model.member_id,
            church_id=model.church_id,
            status=ContentStatusType(model.status),
            metadata=json.loads(model.content_metadata) if model.content_metadata else {},
            schedule_date=normalize_optional(model.schedule_date),
            sent_date=normalize_optional(model.sent_date),
            error_message=model.error_message,
            retry_count=model.retry_count,
            created_at=normalize_to_utc(model.created_at),
            updated_at=normalize_to_utc(model.updated_at),
        )

    def _to_model(self, entity: ContentStatus) -> ContentStatusModel:
        """エンティティをモデルに変換する

        Args:
            entity: ContentStatus エンティティ

        Returns:
            ContentStatusModel インスタンス
        """
        return ContentStatusModel(
            id=entity.id,
            content_id=entity.content_id,
            member_id=entity.member_id,
            church_id=entity.church_id,
            status=entity.status.value,
            content_metadata=json.dumps(entity.metadata, ensure_ascii=False),
            schedule_date=normalize_optional(entity.schedule_date),
            sent_date=normalize_optional(entity.sent_date),
            error_message=entity.error_message,
            retry_count=entity.retry_count,
            created_at=normalize_to_utc(entity.created_at),
            updated_at=normalize_to_utc(entity.updated_at),
        )
