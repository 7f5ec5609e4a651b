"""Content-ready entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ContentReady:
    """配信可能になったコンテンツ（説教）

    Attributes:
        sermon_id: コンテンツ ID
        church_id: 配信元の教会 ID
        title: タイトル
        uuid: コンテンツサービス側の UUID
        speaker: 説教者
        service_date: 礼拝日
        content_types: 利用可能なコンテンツ種別（type / audience）
        openai_file_id: LLM 側のファイル ID
        metadata: その他のメタデータ
        schedule_date: 配信予定日時（未来の場合は SCHEDULED になる）
    """

    sermon_id: str
    church_id: int
    title: str
    uuid: str | None = None
    speaker: str | None = None
    service_date: str | None = None
    content_types: list[dict[str, Any]] = field(default_factory=list)
    openai_file_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    schedule_date: datetime | None = None

    def to_ticket_metadata(self) -> dict[str, Any]:
        """チケットに保存するメタデータを返す"""
        return {
            "sermon_id": self.sermon_id,
            "uuid": self.uuid,
            "title": self.title,
            "speaker": self.speaker,
            "service_date": self.service_date,
            "content_types": [dict(item) for item in self.content_types],
            "openai_file_id": self.openai_file_id,
            "metadata": dict(self.metadata),
        }
