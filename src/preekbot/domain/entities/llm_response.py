"""LLM response entities."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutputItemType(Enum):
    """LLM レスポンスの出力要素の種類"""

    MESSAGE = "message"
    FUNCTION_CALL = "function_call"


@dataclass(frozen=True)
class OutputItem:
    """LLM レスポンスの出力要素

    Attributes:
        type: 要素の種類
        text: メッセージ本文（MESSAGE の場合）
        name: ツール名（FUNCTION_CALL の場合）
        call_id: ツール呼び出し ID（FUNCTION_CALL の場合）
        arguments: ツール引数（JSON 文字列または dict）
    """

    type: OutputItemType
    text: str | None = None
    name: str | None = None
    call_id: str | None = None
    arguments: str | dict[str, Any] | None = None

    @property
    def is_function_call(self) -> bool:
        return self.type == OutputItemType.FUNCTION_CALL

    def parsed_arguments(self) -> dict[str, Any]:
        """ツール引数を dict として返す

        JSON として解釈できない場合は空の dict を返す。
        """
        if self.arguments is None:
            return {}
        if isinstance(self.arguments, dict):
            return dict(self.arguments)
        try:
            parsed = json.loads(self.arguments)
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}


@dataclass(frozen=True)
class LLMResponse:
    """LLM からのレスポンス

    Attributes:
        id: レスポンス ID
        items: 出力要素（順序どおり）
    """

    id: str | None = None
    items: list[OutputItem] = field(default_factory=list)

    @property
    def tool_calls(self) -> list[OutputItem]:
        """ツール呼び出しのみを順序どおりに返す"""
        return [item for item in self.items if item.is_function_call]

    @property
    def has_tool_calls(self) -> bool:
        return any(item.is_function_call for item in self.items)

    @property
    def text(self) -> str | None:
        """最初のメッセージ本文を返す（なければ None）"""
        for item in self.items:
            if item.type == OutputItemType.MESSAGE and item.text:
                return item.text
        return None
