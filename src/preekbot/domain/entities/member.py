"""Member entity."""

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from uuid import uuid4

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


class TargetGroup(Enum):
    """コンテンツの対象グループ"""

    ADULT = "volwassen"
    DEEPENING = "verdieping"
    YOUTH = "jongeren"


class NotificationFrequency(Enum):
    """通知頻度"""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    NEVER = "never"


@dataclass(frozen=True)
class Member:
    """教会メンバー

    Attributes:
        id: メンバー ID（UUID 文字列）
        phone_number: 電話番号（E.164 形式）
        first_name: 表示名
        age: 年齢
        target_group: 対象グループ
        church_ids: 所属教会 ID のリスト（空・複数あり）
        conversation_id: LLM 会話ハンドル
        active_content_id: 現在の会話の対象コンテンツ ID
        intake_completed: インテーク完了フラグ
        notifications_new_service: 新しい礼拝の通知を受け取るか
        notifications_reflection: 振り返りの通知を受け取るか
        notification_frequency: 通知頻度
        notifications_paused_until: 通知一時停止の期限
        last_attendance_date: 最後に出欠を登録した日時
        last_attendance_online: 最後の出席がオンラインだったか
        last_alternative_church: 最後に訪れた別の教会
        unsubscribe_reason: 配信停止理由
        unsubscribe_date: 配信停止日
        last_question: 最後に記録した質問
        last_question_category: 最後に記録した質問のカテゴリ
        last_feedback_ticket_id: 最後に作成したフィードバックチケット ID
        last_activity: 最終アクティビティ日時
        created_at: 作成日時
    """

    phone_number: str
    id: str = field(default_factory=lambda: str(uuid4()))
    first_name: str | None = None
    age: int | None = None
    target_group: TargetGroup | None = None
    church_ids: tuple[int, ...] = ()
    conversation_id: str | None = None
    active_content_id: str | None = None
    intake_completed: bool = False
    notifications_new_service: bool = True
    notifications_reflection: bool = True
    notification_frequency: NotificationFrequency | None = None
    notifications_paused_until: date | None = None
    last_attendance_date: datetime | None = None
    last_attendance_online: bool | None = None
    last_alternative_church: str | None = None
    unsubscribe_reason: str | None = None
    unsubscribe_date: date | None = None
    last_question: str | None = None
    last_question_category: str | None = None
    last_feedback_ticket_id: str | None = None
    last_activity: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """バリデーション"""
        if not E164_PATTERN.match(self.phone_number):
            raise ValueError("Phone number must be in E.164 format")
        if self.age is not None and not 1 <= self.age <= 120:
            raise ValueError("Age must be between 1 and 120")

    @property
    def has_multiple_churches(self) -> bool:
        """複数の教会に所属しているかどうか"""
        return len(self.church_ids) > 1

    @property
    def primary_church_id(self) -> int:
        """最初の所属教会 ID（所属なしの場合は 0）"""
        return self.church_ids[0] if self.church_ids else 0

    def is_member_of(self, church_id: int) -> bool:
        """指定した教会に所属しているかどうか"""
        return church_id in self.church_ids

    def with_conversation(self, conversation_id: str, content_id: str) -> "Member":
        """会話ハンドルと対象コンテンツを同時に差し替えたメンバーを返す"""
        return replace(
            self, conversation_id=conversation_id, active_content_id=content_id
        )

    def reset_conversation(self) -> "Member":
        """会話ハンドルと対象コンテンツを消去したメンバーを返す"""
        return replace(self, conversation_id=None, active_content_id=None)

    def touch(self, now: datetime | None = None) -> "Member":
        """最終アクティビティを更新したメンバーを返す"""
        return replace(self, last_activity=now or datetime.now(timezone.utc))
