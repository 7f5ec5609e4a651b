"""Member repository protocol."""

from typing import Protocol

from preekbot.domain.entities import Member


class MemberRepository(Protocol):
    """メンバーリポジトリの抽象インターフェース

    メンバー情報の保存・取得を抽象化し、
    永続化層の実装詳細を隠蔽する。
    """

    async def save(self, member: Member) -> None:
        """メンバーを保存する（upsert）

        Args:
            member: 保存するメンバー
        """
        ...

    async def find_by_id(self, member_id: str) -> Member | None:
        """ID でメンバーを検索する

        Args:
            member_id: メンバー ID

        Returns:
            メンバー（存在しない場合は None）
        """
        ...

    async def find_by_phone(self, phone_number: str) -> Member | None:
        """電話番号でメンバーを検索する

        Args:
            phone_number: E.164 形式の電話番号

        Returns:
            メンバー（存在しない場合は None）
        """
        ...

    async def find_active_by_church(self, church_id: int) -> list[Member]:
        """教会の配信対象メンバーを取得する

        教会に所属し、インテーク完了かつ新しい礼拝の通知を受け取る
        メンバーのみを返す。

        Args:
            church_id: 教会 ID

        Returns:
            メンバーのリスト（名前順）
        """
        ...
