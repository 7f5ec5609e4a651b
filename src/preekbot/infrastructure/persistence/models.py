"""SQLModel table definitions."""

from datetime import date, datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class MemberModel(SQLModel, table=True):
    """メンバーテーブル"""

    __tablename__ = "members"

    id: str = Field(primary_key=True)
    phone_number: str = Field(unique=True, index=True)
    first_name: str | None = None
    age: int | None = None
    target_group: str | None = None
    church_ids: str = "[]"  # JSON format: [1, 2]
    conversation_id: str | None = None
    active_content_id: str | None = None
    intake_completed: bool = False
    notifications_new_service: bool = True
    notifications_reflection: bool = True
    notification_frequency: str | None = None
    notifications_paused_until: date | None = None
    last_attendance_date: datetime | None = None
    last_attendance_online: bool | None = None
    last_alternative_church: str | None = None
    unsubscribe_reason: str | None = None
    unsubscribe_date: date | None = None
    last_question: str | None = None
    last_question_category: str | None = None
    last_feedback_ticket_id: str | None = None
    last_activity: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ContentStatusModel(SQLModel, table=True):
    """配信チケットテーブル"""

    __tablename__ = "content_statuses"

    id: str = Field(primary_key=True)
    content_id: str = Field(index=True)
    member_id: str = Field(index=True)
    church_id: int = Field(index=True)
    status: str = Field(index=True)
    content_metadata: str = "{}"  # JSON format
    schedule_date: datetime | None = Field(default=None, index=True)
    sent_date: datetime | None = None
    error_message: str | None = None
    retry_count: int = 0
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("member_id", "content_id", name="uq_member_content"),
    )


class ChatHistoryModel(SQLModel, table=True):
    """会話履歴テーブル"""

    __tablename__ = "chat_history"

    id: str = Field(primary_key=True)
    member_id: str = Field(index=True)
    conversation_id: str = Field(index=True)
    role: str
    content: str
    response_id: str | None = None
    tool_calls: str | None = None  # JSON format
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )
