"""Tool entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ToolKind(Enum):
    """LLM が呼び出せるツールの種類"""

    MANAGE_USER = "manage_user"
    HANDLE_SERMON = "handle_sermon"
    MANAGE_SUBSCRIPTION = "manage_subscription"
    ANSWER_QUESTION = "answer_question"
    PROCESS_FEEDBACK = "process_feedback"

    @classmethod
    def parse(cls, name: str | None) -> "ToolKind | None":
        """ツール名から種類を解決する（未知の名前は None）"""
        for kind in cls:
            if kind.value == name:
                return kind
        return None


@dataclass(frozen=True)
class ToolResult:
    """ツール実行結果

    LLM には to_output() の dict が JSON として返される。

    Attributes:
        success: 成功したかどうか
        message: 利用者向けのメッセージ
        error: エラー内容（失敗時）
        extra: ツール固有の追加情報
    """

    success: bool
    message: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **extra: Any) -> "ToolResult":
        return cls(success=True, message=message, extra=extra)

    @classmethod
    def fail(
        cls, *, message: str | None = None, error: str | None = None, **extra: Any
    ) -> "ToolResult":
        return cls(success=False, message=message, error=error, extra=extra)

    def to_output(self) -> dict[str, Any]:
        output: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            output["message"] = self.message
        if self.error is not None:
            output["error"] = self.error
        output.update(self.extra)
        return output
