"""Tests for ResponsesConversationService."""

import json
from unittest.mock import AsyncMock

import pytest

from preekbot.domain.entities import ChatRole, Member, OutputItemType, TargetGroup
from preekbot.infrastructure.llm import (
    LLMError,
    ResponsesConversationService,
    create_jinja_env,
    parse_response,
    render_instructions,
)

TOOLS = [{"type": "function", "name": "manage_user"}]


@pytest.fixture
def member() -> Member:
    return Member(
        phone_number="+31612345678",
        first_name="Renko",
        target_group=TargetGroup.YOUTH,
        church_ids=(1,),
        conversation_id="conv_1",
    )


@pytest.fixture
def client() -> AsyncMock:
    client = AsyncMock()
    client.respond.return_value = {
        "id": "resp_1",
        "output": [
            {
                "type": "message",
                "status": "completed",
                "content": [{"type": "output_text", "text": "Hoi Renko!"}],
            }
        ],
    }
    client.create_conversation.return_value = {"id": "conv_new"}
    return client


@pytest.fixture
def content_service() -> AsyncMock:
    service = AsyncMock()
    service.get_vector_store.return_value = None
    return service


@pytest.fixture
def history() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(
    client: AsyncMock, content_service: AsyncMock, history: AsyncMock
) -> ResponsesConversationService:
    return ResponsesConversationService(client, TOOLS, content_service, history)


class TestParseResponse:
    """parse_response tests."""

    def test_messages_and_calls_in_order(self) -> None:
        response = parse_response(
            {
                "id": "resp_1",
                "output": [
                    {
                        "type": "function_call",
                        "status": "completed",
                        "name": "manage_user",
                        "call_id": "call_1",
                        "arguments": '{"action": "update_name"}',
                    },
                    {
                        "type": "message",
                        "content": [{"type": "output_text", "text": "Klaar"}],
                    },
                ],
            }
        )

        assert response.id == "resp_1"
        assert [item.type for item in response.items] == [
            OutputItemType.FUNCTION_CALL,
            OutputItemType.MESSAGE,
        ]
        assert response.tool_calls[0].call_id == "call_1"
        assert response.text == "Klaar"

    def test_incomplete_and_unknown_items_skipped(self) -> None:
        response = parse_response(
            {
                "output": [
                    {"type": "message", "status": "in_progress", "content": []},
                    {"type": "file_search_call", "status": "completed"},
                    {"type": "message", "content": [{"type": "refusal"}]},
                ]
            }
        )

        assert response.items == []


class TestInstructions:
    """render_instructions tests."""

    def test_name_and_tone(self, member: Member) -> None:
        text = render_instructions(create_jinja_env(), member)

        assert "De gebruiker heet Renko." in text
        assert "informele, moderne toon" in text

    def test_without_name_or_group(self) -> None:
        text = render_instructions(
            create_jinja_env(), Member(phone_number="+31612345678")
        )

        assert "De gebruiker heet" not in text
        assert text.endswith("TAAL: Persoonlijk (je/jij), warm, bondig.")


class TestCreateConversation:
    """create_conversation tests."""

    async def test_seeds_conversation(
        self,
        service: ResponsesConversationService,
        client: AsyncMock,
        history: AsyncMock,
        member: Member,
    ) -> None:
        conversation_id = await service.create_conversation(member, "Nieuwe preek!")

        assert conversation_id == "conv_new"
        kwargs = client.create_conversation.call_args.kwargs
        assert kwargs["items"] == [
            {"type": "message", "role": "assistant", "content": "Nieuwe preek!"}
        ]
        entry = history.append.call_args.args[0]
        assert entry.role is ChatRole.ASSISTANT
        assert entry.conversation_id == "conv_new"

    async def test_missing_id(
        self, service: ResponsesConversationService, client: AsyncMock, member: Member
    ) -> None:
        client.create_conversation.return_value = {}

        with pytest.raises(LLMError):
            await service.create_conversation(member, "Nieuwe preek!")


class TestSendMessage:
    """send_message tests."""

    async def test_records_user_and_assistant(
        self,
        service: ResponsesConversationService,
        client: AsyncMock,
        history: AsyncMock,
        member: Member,
    ) -> None:
        response = await service.send_message("conv_1", "Hallo", 1, member)

        assert response.text == "Hoi Renko!"
        kwargs = client.respond.call_args.kwargs
        assert kwargs["conversation_id"] == "conv_1"
        assert kwargs["input_items"][0]["content"][0]["text"] == "Hallo"
        assert kwargs["tools"] == TOOLS
        assert "Renko" in kwargs["instructions"]
        roles = [call.args[0].role for call in history.append.call_args_list]
        assert roles == [ChatRole.USER, ChatRole.ASSISTANT]

    async def test_file_search_with_vector_store(
        self,
        service: ResponsesConversationService,
        client: AsyncMock,
        content_service: AsyncMock,
        member: Member,
    ) -> None:
        content_service.get_vector_store.return_value = "vs_42"

        await service.send_message("conv_1", "Wat betekent genade?", 1, member)

        tools = client.respond.call_args.kwargs["tools"]
        assert tools[-1] == {"type": "file_search", "vector_store_ids": ["vs_42"]}
        content_service.get_vector_store.assert_awaited_once_with(1)


class TestSendToolOutput:
    """send_tool_output tests."""

    async def test_function_call_output(
        self,
        service: ResponsesConversationService,
        client: AsyncMock,
        history: AsyncMock,
        member: Member,
    ) -> None:
        client.respond.return_value = {
            "id": "resp_2",
            "output": [
                {
                    "type": "function_call",
                    "name": "handle_sermon",
                    "call_id": "call_2",
                    "arguments": "{}",
                }
            ],
        }

        response = await service.send_tool_output(
            "conv_1", "call_1", {"success": True, "message": "Opgeslagen"}, member, 1
        )

        [item] = client.respond.call_args.kwargs["input_items"]
        assert item["type"] == "function_call_output"
        assert item["call_id"] == "call_1"
        assert json.loads(item["output"]) == {"success": True, "message": "Opgeslagen"}
        assert response.has_tool_calls
        entry = history.append.call_args.args[0]
        assert entry.content == "Tool call: handle_sermon"
        assert entry.tool_calls[0]["call_id"] == "call_2"
