"""Tests for LLMResponse entities."""

from preekbot.domain.entities import LLMResponse, OutputItem, OutputItemType


def message(text: str) -> OutputItem:
    return OutputItem(type=OutputItemType.MESSAGE, text=text)


def call(name: str, call_id: str, arguments: str | dict | None = None) -> OutputItem:
    return OutputItem(
        type=OutputItemType.FUNCTION_CALL,
        name=name,
        call_id=call_id,
        arguments=arguments,
    )


class TestOutputItem:
    """OutputItem tests."""

    def test_parsed_arguments_from_json(self) -> None:
        item = call("manage_user", "c1", '{"action": "update_name", "name": "Piet"}')
        assert item.parsed_arguments() == {"action": "update_name", "name": "Piet"}

    def test_parsed_arguments_from_dict(self) -> None:
        item = call("manage_user", "c1", {"action": "complete_intake"})
        assert item.parsed_arguments() == {"action": "complete_intake"}

    def test_invalid_json_gives_empty_dict(self) -> None:
        assert call("manage_user", "c1", "{not json").parsed_arguments() == {}

    def test_non_object_json_gives_empty_dict(self) -> None:
        assert call("manage_user", "c1", "[1, 2]").parsed_arguments() == {}

    def test_missing_arguments(self) -> None:
        assert call("manage_user", "c1").parsed_arguments() == {}


class TestLLMResponse:
    """LLMResponse tests."""

    def test_tool_calls_keep_order(self) -> None:
        response = LLMResponse(
            items=[call("a", "1"), message("hi"), call("b", "2")]
        )
        assert [item.name for item in response.tool_calls] == ["a", "b"]
        assert response.has_tool_calls

    def test_text_is_first_message(self) -> None:
        response = LLMResponse(items=[message("first"), message("second")])
        assert response.text == "first"
        assert not response.has_tool_calls

    def test_empty_response(self) -> None:
        response = LLMResponse()
        assert response.text is None
        assert response.tool_calls == []
