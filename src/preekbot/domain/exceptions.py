"""Domain exceptions."""


class InvalidStatusTransitionError(Exception):
    """配信チケットの状態遷移が許可されていない場合に発生する例外"""

    def __init__(self, ticket_id: str, current: str, target: str) -> None:
        """初期化

        Args:
            ticket_id: チケット ID
            current: 現在の状態
            target: 遷移しようとした状態
        """
        self.ticket_id = ticket_id
        self.current = current
        self.target = target
        super().__init__(
            f"Ticket {ticket_id} cannot move from {current} to {target}"
        )


class MemberNotFoundError(Exception):
    """メンバーが見つからない場合に発生する例外"""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Member not found: {key}")


class NoActiveConversationError(Exception):
    """メンバーにアクティブな会話がない場合に発生する例外"""

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(f"Member {member_id} has no active conversation")


class NotificationDeliveryError(Exception):
    """通知の送信に失敗した場合に発生する例外"""

    def __init__(self, recipient: str, error: str | None = None) -> None:
        self.recipient = recipient
        self.error = error
        super().__init__(
            f"Notification to {recipient} failed: {error or 'unknown error'}"
        )


class DuplicateTicketError(Exception):
    """同じメンバーとコンテンツの組のチケットが既に存在する場合に発生する例外"""

    def __init__(self, member_id: str, content_id: str) -> None:
        self.member_id = member_id
        self.content_id = content_id
        super().__init__(
            f"Ticket for member {member_id} and content {content_id} already exists"
        )


class TicketNotFoundError(Exception):
    """チケットが見つからない場合に発生する例外"""

    def __init__(self, ticket_id: str) -> None:
        self.ticket_id = ticket_id
        super().__init__(f"Ticket not found: {ticket_id}")
