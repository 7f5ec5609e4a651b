"""Tool-call dispatcher."""

import logging
from dataclasses import dataclass

from preekbot.application.tools import ToolExecutor
from preekbot.domain.entities import LLMResponse, Member, ToolResult
from preekbot.domain.exceptions import NoActiveConversationError
from preekbot.domain.services import ConversationService

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_DEPTH = 5


@dataclass(frozen=True)
class DispatchOutcome:
    """Final text of a tool-call chain and the member after all tool updates."""

    text: str | None
    member: Member


class ToolCallDispatcher:
    """Runs the model's function calls until it answers with plain text.

    Calls are handled strictly in order; each call's recursive chain finishes
    before the next call of the same response starts. The final answer is
    the text of the last response that carried no function calls.
    """

    def __init__(
        self,
        conversation_service: ConversationService,
        tool_executor: ToolExecutor,
        max_depth: int = DEFAULT_MAX_TOOL_DEPTH,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            conversation_service: Service used to return tool outputs.
            tool_executor: Executes individual tool calls.
            max_depth: Maximum nesting of tool-output round trips.
        """
        self._conversation_service = conversation_service
        self._tool_executor = tool_executor
        self._max_depth = max_depth

    async def dispatch(
        self, response: LLMResponse, member: Member, church_id: int
    ) -> DispatchOutcome:
        """Dispatch the function calls of a response.

        Args:
            response: Model response to process.
            member: Member the conversation belongs to.
            church_id: Church the conversation is about.

        Returns:
            DispatchOutcome with the final text (None if the model gave none).

        Raises:
            NoActiveConversationError: The member has no conversation handle.
        """
        if not member.conversation_id:
            raise NoActiveConversationError(member.id)
        return await self._dispatch(response, member, church_id, depth=0)

    async def _dispatch(
        self, response: LLMResponse, member: Member, church_id: int, depth: int
    ) -> DispatchOutcome:
        tool_calls = response.tool_calls
        if not tool_calls:
            return DispatchOutcome(response.text, member)

        if depth >= self._max_depth:
            logger.warning(
                "Tool call depth limit (%d) reached for member %s; "
                "rejecting %d pending call(s)",
                self._max_depth,
                member.id,
                len(tool_calls),
            )
            return await self._reject_pending(response, member, church_id)

        logger.info(
            "Processing %d tool call(s) at depth %d for member %s",
            len(tool_calls),
            depth,
            member.id,
        )
        final_text = response.text
        for call in tool_calls:
            if not call.call_id:
                logger.warning("Skipping tool call without call_id: %s", call.name)
                continue

            outcome = await self._tool_executor.execute(
                call.name, call.parsed_arguments(), member
            )
            member = outcome.member

            assert member.conversation_id is not None
            next_response = await self._conversation_service.send_tool_output(
                member.conversation_id,
                call.call_id,
                outcome.result.to_output(),
                member,
                church_id,
            )
            chained = await self._dispatch(next_response, member, church_id, depth + 1)
            member = chained.member
            if chained.text:
                final_text = chained.text

        return DispatchOutcome(final_text, member)

    async def _reject_pending(
        self, response: LLMResponse, member: Member, church_id: int
    ) -> DispatchOutcome:
        """Answer every pending call with a failure output without executing it.

        Responses to these outputs are not dispatched further.
        """
        assert member.conversation_id is not None
        rejection = ToolResult.fail(error="Tool call depth limit reached").to_output()
        final_text = response.text
        for call in response.tool_calls:
            if not call.call_id:
                logger.warning("Skipping tool call without call_id: %s", call.name)
                continue
            next_response = await self._conversation_service.send_tool_output(
                member.conversation_id, call.call_id, rejection, member, church_id
            )
            if next_response.text:
                final_text = next_response.text
        return DispatchOutcome(final_text, member)
