"""Domain service protocols."""

from dataclasses import dataclass
from typing import Any, Protocol

from preekbot.domain.entities import LLMResponse, Member


class ConversationService(Protocol):
    """LLM conversation abstraction.

    Conversations are created server-side and referenced by an opaque handle.
    Implementations retry transient failures internally and raise on
    exhaustion.
    """

    async def create_conversation(self, member: Member, opening_message: str) -> str:
        """Create a conversation seeded with an assistant opening message.

        Args:
            member: Member the conversation belongs to.
            opening_message: First assistant message.

        Returns:
            Conversation handle.
        """
        ...

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        church_id: int,
        member: Member,
    ) -> LLMResponse:
        """Send a message into an existing conversation.

        Args:
            conversation_id: Conversation handle.
            text: Message text.
            church_id: Church the message is about.
            member: Member the conversation belongs to.

        Returns:
            The model response.
        """
        ...

    async def send_tool_output(
        self,
        conversation_id: str,
        call_id: str,
        result: dict[str, Any],
        member: Member,
        church_id: int,
    ) -> LLMResponse:
        """Return a tool result to the model.

        Args:
            conversation_id: Conversation handle.
            call_id: Function call id the result belongs to.
            result: Tool result payload.
            member: Member the conversation belongs to.
            church_id: Church the conversation is about.

        Returns:
            The model response.
        """
        ...


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of an outbound notification."""

    success: bool
    error: str | None = None


class NotificationChannel(Protocol):
    """Outbound notification abstraction.

    Implementations never raise; failures are reported in the result.
    """

    async def send_message(
        self,
        recipient: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> NotificationResult:
        """Send a text to a recipient.

        Args:
            recipient: Phone number in E.164 format.
            text: Message text.
            metadata: Extra context for logging / routing.

        Returns:
            NotificationResult.
        """
        ...


class ContentDetailService(Protocol):
    """Content service abstraction used by distribution and tools."""

    async def get_content_details(
        self, content_id: str, audience: str = "general"
    ) -> str | None:
        """Get the rich message for a content item (None if unavailable)."""
        ...

    async def get_vector_store(self, church_id: int) -> str | None:
        """Get the church's vector store id (None if unavailable)."""
        ...

    async def get_church_by_name(self, name: str) -> dict[str, Any] | None:
        """Find a church by (partial) name."""
        ...

    async def get_sermon_summary(
        self, sermon_id: str, audience: str = "general"
    ) -> str | None:
        """Get the summary text of a sermon."""
        ...

    async def submit_feedback(self, payload: dict[str, Any]) -> bool:
        """Forward feedback to the content service."""
        ...
