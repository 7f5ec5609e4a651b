"""SQLite implementation of MemberRepository."""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from preekbot.domain.entities import Member, NotificationFrequency, TargetGroup
from preekbot.infrastructure.persistence.datetime_utils import (
    normalize_optional,
    normalize_to_utc,
)
from preekbot.infrastructure.persistence.exceptions import DuplicatePhoneNumberError
from preekbot.infrastructure.persistence.models import MemberModel


def member_to_model(entity: Member) -> MemberModel:
    """エンティティをモデルに変換する

    Args:
        entity: Member エンティティ

    Returns:
        MemberModel インスタンス
    """
    return MemberModel(
        id=entity.id,
        phone_number=entity.phone_number,
        first_name=entity.first_name,
        age=entity.age,
        target_group=entity.target_group.value if entity.target_group else None,
        church_ids=json.dumps(list(entity.church_ids)),
        conversation_id=entity.conversation_id,
        active_content_id=entity.active_content_id,
        intake_completed=entity.intake_completed,
        notifications_new_service=entity.notifications_new_service,
        notifications_reflection=entity.notifications_reflection,
        notification_frequency=(
            entity.notification_frequency.value
            if entity.notification_frequency
            else None
        ),
        notifications_paused_until=entity.notifications_paused_until,
        last_attendance_date=normalize_optional(entity.last_attendance_date),
        last_attendance_online=entity.last_attendance_online,
        last_alternative_church=entity.last_alternative_church,
        unsubscribe_reason=entity.unsubscribe_reason,
        unsubscribe_date=entity.unsubscribe_date,
        last_question=entity.last_question,
        last_question_category=entity.last_question_category,
        last_feedback_ticket_id=entity.last_feedback_ticket_id,
        last_activity=normalize_to_utc(entity.last_activity),
        created_at=normalize_to_utc(entity.created_at),
        updated_at=datetime.now(timezone.utc),
    )


def member_to_entity(model: MemberModel) -> Member:
    """モデルをエンティティに変換する

    Args:
        model: MemberModel インスタンス

    Returns:
        Member エンティティ
    """
    return Member(
        id=model.id,
        phone_number=model.phone_number,
        first_name=model.first_name,
        age=model.age,
        target_group=TargetGroup(model.target_group) if model.target_group else None,
        church_ids=tuple(int(church_id) for church_id in json.loads(model.church_ids)),
        conversation_id=model.conversation_id,
        active_content_id=model.active_content_id,
        intake_completed=model.intake_completed,
        notifications_new_service=model.notifications_new_service,
        notifications_reflection=model.notifications_reflection,
        notification_frequency=(
            NotificationFrequency(model.notification_frequency)
            if model.notification_frequency
            else None
        ),
        notifications_paused_until=model.notifications_paused_until,
        last_attendance_date=normalize_optional(model.last_attendance_date),
        last_attendance_online=model.last_attendance_online,
        last_alternative_church=model.last_alternative_church,
        unsubscribe_reason=model.unsubscribe_reason,
        unsubscribe_date=model.unsubscribe_date,
        last_question=model.last_question,
        last_question_category=model.last_question_category,
        last_feedback_ticket_id=model.last_feedback_ticket_id,
        last_activity=normalize_to_utc(model.last_activity),
        created_at=normalize_to_utc(model.created_at),
    )


class SQLiteMemberRepository:
    """SQLite 版 MemberRepository 実装

    メンバー情報の CRUD 操作を SQLite データベースに対して行う。
    非同期セッションを使用した非同期操作をサポート。
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

    async def save(self, member: Member) -> None:
        """メンバーを保存する（upsert）

        同じ ID のメンバーが存在する場合は更新する。

        Args:
            member: 保存するメンバー

        Raises:
            DuplicatePhoneNumberError: 別 ID のメンバーが同じ電話番号を持つ場合
        """
        async with self._session_factory() as session:
            try:
                await session.merge(member_to_model(member))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicatePhoneNumberError(member.phone_number) from e

    async def find_by_id(self, member_id: str) -> Member | None:
        """ID でメンバーを検索する

        Args:
            member_id: メンバー ID

        Returns:
            メンバー（存在しない場合は None）
        """
        async with self._session_factory() as session:
            model = await session.get(MemberModel, member_id)
            if model is None:
                return None
            return member_to_entity(model)

    async def find_by_phone(self, phone_number: str) -> Member | None:
        """電話番号でメンバーを検索する

        Args:
            phone_number: E.164 形式の電話番号

        Returns:
            メンバー（存在しない場合は None）
        """
        async with self._session_factory() as session:
            statement = select(MemberModel).where(
                MemberModel.phone_number == phone_number
            )
            result = await session.exec(statement)
            model = result.first()
            if model is None:
                return None
            return member_to_entity(model)

    async def find_active_by_church(self, church_id: int) -> list[Member]:
        """教会の配信対象メンバーを取得する

        インテーク完了かつ新しい礼拝の通知を受け取るメンバーを SQL で絞り込み、
        教会への所属は church_ids（JSON）を読み込んで判定する。

        Args:
            church_id: 教会 ID

        Returns:
            メンバーのリスト（名前順）
        """
        async with self._session_factory() as session:
            statement = (
                select(MemberModel)
                .where(col(MemberModel.intake_completed).is_(True))
                .where(col(MemberModel.notifications_new_service).is_(True))
                .order_by(col(MemberModel.first_name), col(MemberModel.created_at))
            )
            result = await session.exec(statement)
            members = [member_to_entity(model) for model in result.all()]
        return [member for member in members if member.is_member_of(church_id)]
