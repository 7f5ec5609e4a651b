"""Responses API implementation of ConversationService."""

import json
import logging
from typing import Any

from jinja2 import Environment

from preekbot.domain.entities import (
    ChatHistoryEntry,
    ChatRole,
    LLMResponse,
    Member,
    OutputItem,
    OutputItemType,
)
from preekbot.domain.repositories import ChatHistoryRepository
from preekbot.domain.services import ContentDetailService
from preekbot.infrastructure.llm.client import LLMClient
from preekbot.infrastructure.llm.exceptions import LLMError
from preekbot.infrastructure.llm.templates import create_jinja_env, render_instructions

logger = logging.getLogger(__name__)


class ResponsesConversationService:
    """Conversation service backed by the OpenAI Responses API.

    Every completed output item is recorded in the chat history. The toolset
    is the fixed function set plus a file_search tool when the church has a
    vector store.
    """

    def __init__(
        self,
        client: LLMClient,
        tool_definitions: list[dict[str, Any]],
        content_service: ContentDetailService,
        chat_history_repository: ChatHistoryRepository,
        jinja_env: Environment | None = None,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the service.

        Args:
            client: LLM client.
            tool_definitions: Function tool definitions.
            content_service: Content service (vector store lookup).
            chat_history_repository: Chat history repository.
            jinja_env: Jinja2 environment (created if omitted).
            debug_llm_messages: If True, log LLM messages at INFO level.
        """
        self._client = client
        self._tool_definitions = tool_definitions
        self._content_service = content_service
        self._chat_history_repository = chat_history_repository
        self._jinja_env = jinja_env or create_jinja_env()
        self._debug_llm_messages = debug_llm_messages

    async def create_conversation(self, member: Member, opening_message: str) -> str:
        """Create a conversation seeded with an assistant opening message."""
        result = await self._client.create_conversation(
            metadata={"topic": member.phone_number},
            items=[
                {
                    "type": "message",
                    "role": "assistant",
                    "content": opening_message,
                }
            ],
        )
        conversation_id = result.get("id")
        if not conversation_id:
            raise LLMError("Conversation response did not contain an id")

        await self._chat_history_repository.append(
            ChatHistoryEntry(
                member_id=member.id,
                conversation_id=conversation_id,
                role=ChatRole.ASSISTANT,
                content=opening_message,
            )
        )
        logger.info(
            "Created conversation %s for member %s", conversation_id, member.id
        )
        return conversation_id

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        church_id: int,
        member: Member,
    ) -> LLMResponse:
        """Send a user message into an existing conversation."""
        await self._chat_history_repository.append(
            ChatHistoryEntry(
                member_id=member.id,
                conversation_id=conversation_id,
                role=ChatRole.USER,
                content=text,
            )
        )
        input_items = [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": text}],
            }
        ]
        return await self._respond(conversation_id, input_items, church_id, member)

    async def send_tool_output(
        self,
        conversation_id: str,
        call_id: str,
        result: dict[str, Any],
        member: Member,
        church_id: int,
    ) -> LLMResponse:
        """Return a tool result to the model."""
        input_items = [
            {
                "type": "function_call_output",
                "call_id": call_id,
                "output": json.dumps(result, ensure_ascii=False),
            }
        ]
        return await self._respond(conversation_id, input_items, church_id, member)

    async def _respond(
        self,
        conversation_id: str,
        input_items: list[dict[str, Any]],
        church_id: int,
        member: Member,
    ) -> LLMResponse:
        tools = await self._build_tools(church_id)
        instructions = render_instructions(self._jinja_env, member)

        if self._should_log():
            self._log_request(conversation_id, input_items)

        raw = await self._client.respond(
            conversation_id=conversation_id,
            input_items=input_items,
            tools=tools,
            instructions=instructions,
        )
        response = parse_response(raw)

        if self._should_log():
            self._log_response(response)

        await self._record(response, member, conversation_id)
        return response

    async def _build_tools(self, church_id: int) -> list[dict[str, Any]]:
        tools = list(self._tool_definitions)
        vector_store_id = await self._content_service.get_vector_store(church_id)
        if vector_store_id:
            tools.append({"type": "file_search", "vector_store_ids": [vector_store_id]})
        return tools

    async def _record(
        self, response: LLMResponse, member: Member, conversation_id: str
    ) -> None:
        """Append completed output items to the chat history."""
        for item in response.items:
            if item.type == OutputItemType.MESSAGE and item.text:
                entry = ChatHistoryEntry(
                    member_id=member.id,
                    conversation_id=conversation_id,
                    role=ChatRole.ASSISTANT,
                    content=item.text,
                    response_id=response.id,
                )
            elif item.is_function_call:
                entry = ChatHistoryEntry(
                    member_id=member.id,
                    conversation_id=conversation_id,
                    role=ChatRole.ASSISTANT,
                    content=f"Tool call: {item.name or 'unknown'}",
                    response_id=response.id,
                    tool_calls=[
                        {
                            "call_id": item.call_id,
                            "name": item.name,
                            "arguments": item.arguments,
                        }
                    ],
                )
            else:
                continue
            await self._chat_history_repository.append(entry)

    def _should_log(self) -> bool:
        return self._debug_llm_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_request(
        self, conversation_id: str, input_items: list[dict[str, Any]]
    ) -> None:
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Request (conversation=%s) ===", conversation_id)
        for item in input_items:
            log_func("%s", json.dumps(item, ensure_ascii=False))
        log_func("=== End of Request ===")

    def _log_response(self, response: LLMResponse) -> None:
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Response (id=%s) ===", response.id)
        for item in response.items:
            if item.is_function_call:
                log_func("function_call %s: %s", item.name, item.arguments)
            else:
                log_func("message: %s", item.text)
        log_func("=== End of Response ===")


def parse_response(raw: dict[str, Any]) -> LLMResponse:
    """Convert a raw Responses API payload to an LLMResponse.

    Only completed message and function_call items are kept. Items without a
    status are treated as completed.

    Args:
        raw: Response payload.

    Returns:
        LLMResponse.
    """
    items: list[OutputItem] = []
    for output in raw.get("output") or []:
        if not isinstance(output, dict):
            continue
        if output.get("status") not in (None, "completed"):
            continue
        if output.get("type") == "message":
            text = _extract_text(output)
            if text:
                items.append(OutputItem(type=OutputItemType.MESSAGE, text=text))
        elif output.get("type") == "function_call":
            items.append(
                OutputItem(
                    type=OutputItemType.FUNCTION_CALL,
                    name=output.get("name"),
                    call_id=output.get("call_id"),
                    arguments=output.get("arguments"),
                )
            )
    return LLMResponse(id=raw.get("id"), items=items)


def _extract_text(message: dict[str, Any]) -> str | None:
    for content in message.get("content") or []:
        if (
            isinstance(content, dict)
            and content.get("type") == "output_text"
            and content.get("text")
        ):
            return content["text"]
    return None
