"""Content status (delivery ticket) entity."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from preekbot.domain.exceptions import InvalidStatusTransitionError

DEFAULT_MAX_RETRIES = 3


class ContentStatusType(Enum):
    """配信チケットの状態

    SCHEDULED -> QUEUED -> SENT が通常の流れ。
    WAITING は複数教会所属による保留、ERROR は失敗の終端（再キュー可能）。
    """

    SCHEDULED = "scheduled"
    WAITING = "waiting"
    QUEUED = "queued"
    SENT = "sent"
    ERROR = "error"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ContentStatus:
    """1メンバーに1コンテンツを届ける配信チケット

    Attributes:
        content_id: 外部コンテンツ ID
        member_id: 配信先メンバー ID
        church_id: 配信元の教会 ID
        status: 状態
        metadata: コンテンツのメタデータ（作成時に設定し、以後変更しない）
        schedule_date: 配信予定日時（SCHEDULED の場合）
        sent_date: 送信日時
        error_message: 最後のエラーメッセージ
        retry_count: 失敗・リトライの回数
        id: チケット ID
        created_at: 作成日時
        updated_at: 更新日時
    """

    content_id: str
    member_id: str
    church_id: int
    status: ContentStatusType = ContentStatusType.QUEUED
    metadata: dict[str, Any] = field(default_factory=dict)
    schedule_date: datetime | None = None
    sent_date: datetime | None = None
    error_message: str | None = None
    retry_count: int = 0
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        """バリデーション"""
        if not self.content_id:
            raise ValueError("Content id cannot be empty")
        if self.retry_count < 0:
            raise ValueError("Retry count cannot be negative")

    def is_due(self, now: datetime | None = None) -> bool:
        """SCHEDULED かつ配信予定日時を過ぎているかどうか

        配信予定日時が未設定の場合は即時配信可能とみなす。
        """
        if self.status != ContentStatusType.SCHEDULED:
            return False
        if self.schedule_date is None:
            return True
        return self.schedule_date <= (now or _now())

    def _transition(
        self, allowed: tuple[ContentStatusType, ...], target: ContentStatusType
    ) -> None:
        if self.status not in allowed:
            raise InvalidStatusTransitionError(self.id, self.status.value, target.value)

    def promote(self, now: datetime | None = None) -> "ContentStatus":
        """SCHEDULED -> QUEUED"""
        self._transition((ContentStatusType.SCHEDULED,), ContentStatusType.QUEUED)
        return replace(self, status=ContentStatusType.QUEUED, updated_at=now or _now())

    def mark_waiting(self, now: datetime | None = None) -> "ContentStatus":
        """複数教会所属のため保留にする"""
        self._transition(
            (ContentStatusType.QUEUED, ContentStatusType.SCHEDULED),
            ContentStatusType.WAITING,
        )
        return replace(self, status=ContentStatusType.WAITING, updated_at=now or _now())

    def mark_sent(self, now: datetime | None = None) -> "ContentStatus":
        """送信完了にする（エラーメッセージは消去）"""
        self._transition((ContentStatusType.QUEUED,), ContentStatusType.SENT)
        timestamp = now or _now()
        return replace(
            self,
            status=ContentStatusType.SENT,
            sent_date=timestamp,
            error_message=None,
            updated_at=timestamp,
        )

    def mark_failed(
        self,
        error_message: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        now: datetime | None = None,
    ) -> "ContentStatus":
        """処理失敗を記録する

        retry_count を増やし、上限に達した場合は ERROR、それ以外は QUEUED に戻す。
        """
        self._transition((ContentStatusType.QUEUED,), ContentStatusType.ERROR)
        retry_count = self.retry_count + 1
        status = (
            ContentStatusType.ERROR
            if retry_count >= max_retries
            else ContentStatusType.QUEUED
        )
        return replace(
            self,
            status=status,
            error_message=error_message,
            retry_count=retry_count,
            updated_at=now or _now(),
        )

    def retry(self, now: datetime | None = None) -> "ContentStatus":
        """ERROR のチケットを手動で QUEUED に戻す

        retry_count は増やす（リセットしない）。エラーメッセージはそのまま残す。
        """
        self._transition((ContentStatusType.ERROR,), ContentStatusType.QUEUED)
        return replace(
            self,
            status=ContentStatusType.QUEUED,
            retry_count=self.retry_count + 1,
            updated_at=now or _now(),
        )

    def release(self, now: datetime | None = None) -> "ContentStatus":
        """WAITING のチケットを外部からの指示で QUEUED に戻す"""
        self._transition((ContentStatusType.WAITING,), ContentStatusType.QUEUED)
        return replace(self, status=ContentStatusType.QUEUED, updated_at=now or _now())


def create_content_status(
    content_id: str,
    member_id: str,
    church_id: int,
    *,
    has_multiple_churches: bool,
    metadata: dict[str, Any] | None = None,
    schedule_date: datetime | None = None,
    now: datetime | None = None,
) -> ContentStatus:
    """作成時の状態ルールを適用してチケットを生成する

    - 複数教会所属 -> WAITING
    - 未来の配信予定日時 -> SCHEDULED
    - それ以外 -> QUEUED

    Args:
        content_id: コンテンツ ID
        member_id: メンバー ID
        church_id: 教会 ID
        has_multiple_churches: メンバーが複数の教会に所属しているか
        metadata: コンテンツのメタデータ
        schedule_date: 配信予定日時
        now: 現在時刻（テスト用）

    Returns:
        ContentStatus エンティティ
    """
    timestamp = now or _now()
    if has_multiple_churches:
        status = ContentStatusType.WAITING
    elif schedule_date is not None and schedule_date > timestamp:
        status = ContentStatusType.SCHEDULED
    else:
        status = ContentStatusType.QUEUED

    return ContentStatus(
        content_id=content_id,
        member_id=member_id,
        church_id=church_id,
        status=status,
        metadata=dict(metadata or {}),
        schedule_date=schedule_date,
        created_at=timestamp,
        updated_at=timestamp,
    )
