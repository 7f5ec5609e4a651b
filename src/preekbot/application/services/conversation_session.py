"""Conversation session manager."""

import logging
from dataclasses import dataclass

from preekbot.domain.entities import LLMResponse, Member
from preekbot.domain.repositories import MemberRepository
from preekbot.domain.services import ConversationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationSession:
    """Result of ensure_conversation.

    Attributes:
        member: Member with the current conversation handle.
        conversation_id: Conversation handle.
        created: True if a new conversation was created.
        response: Model response when the message was sent into a reused
            conversation; None for a new conversation (the message seeds it).
    """

    member: Member
    conversation_id: str
    created: bool
    response: LLMResponse | None = None


class ConversationSessionManager:
    """Keeps one conversation per member per content item.

    A different content item (or no conversation yet) starts a new
    conversation seeded with the message; the same content item reuses the
    stored handle and sends the message into it.
    """

    def __init__(
        self,
        conversation_service: ConversationService,
        member_repository: MemberRepository,
    ) -> None:
        self._conversation_service = conversation_service
        self._member_repository = member_repository

    async def ensure_conversation(
        self,
        member: Member,
        new_content_id: str,
        opening_message: str,
        church_id: int,
    ) -> ConversationSession:
        """Resolve the conversation for a content item.

        Args:
            member: Member to deliver to.
            new_content_id: Content item being delivered.
            opening_message: Message for the content item.
            church_id: Church the content belongs to.

        Returns:
            ConversationSession.
        """
        if (
            member.conversation_id
            and member.active_content_id
            and member.active_content_id == new_content_id
        ):
            logger.info(
                "Reusing conversation %s for member %s (content %s)",
                member.conversation_id,
                member.id,
                new_content_id,
            )
            response = await self._conversation_service.send_message(
                member.conversation_id, opening_message, church_id, member
            )
            return ConversationSession(
                member=member,
                conversation_id=member.conversation_id,
                created=False,
                response=response,
            )

        conversation_id = await self._conversation_service.create_conversation(
            member, opening_message
        )
        previous = member.conversation_id
        member = member.with_conversation(conversation_id, new_content_id)
        await self._member_repository.save(member)
        logger.info(
            "Started conversation %s for member %s (content %s, previous %s)",
            conversation_id,
            member.id,
            new_content_id,
            previous,
        )
        return ConversationSession(
            member=member, conversation_id=conversation_id, created=True
        )
