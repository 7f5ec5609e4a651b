"""Content status repository protocol."""

from datetime import datetime
from typing import Protocol

from preekbot.domain.entities import ContentStatus, ContentStatusType, Member


class ContentStatusRepository(Protocol):
    """配信チケットリポジトリの抽象インターフェース"""

    async def save(self, ticket: ContentStatus, member: Member | None = None) -> None:
        """チケットを保存する（upsert）

        member を指定した場合はチケットとメンバーを同一トランザクションで保存する。

        Args:
            ticket: 保存するチケット
            member: 同時に保存するメンバー
        """
        ...

    async def save_all(self, tickets: list[ContentStatus]) -> None:
        """複数のチケットを1回のコミットで保存する

        Args:
            tickets: 保存するチケット
        """
        ...

    async def find_by_id(self, ticket_id: str) -> ContentStatus | None:
        """ID でチケットを検索する"""
        ...

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
        ...

    async def find_by_member_and_content(
        self,
        member_id: str,
        content_id: str,
    ) -> ContentStatus | None:
        """メンバーとコンテンツの組でチケットを検索する"""
        ...

    async def find_scheduled_due(self, now: datetime) -> list[ContentStatus]:
        """配信予定日時を過ぎた SCHEDULED のチケットを取得する

        配信予定日時が未設定のものも含む。配信予定日時の昇順で返す。

        Args:
            now: 現在時刻

        Returns:
            チケットのリスト
        """
        ...
