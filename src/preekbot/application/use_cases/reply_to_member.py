"""Reply to an inbound member message."""

import logging
from datetime import datetime, timezone

from preekbot.application.services.tool_dispatcher import ToolCallDispatcher
from preekbot.domain.repositories import MemberRepository
from preekbot.domain.services import (
    ConversationService,
    NotificationChannel,
    normalize_phone_number,
)

logger = logging.getLogger(__name__)

NOT_REGISTERED_NOTICE = (
    "Je bent nog niet geregistreerd. Neem contact op met je kerk voor registratie."
)
NO_CONVERSATION_NOTICE = (
    "Je hebt nog geen actieve conversatie. Wacht tot de volgende preek beschikbaar is."
)
ERROR_NOTICE = (
    "Er is een fout opgetreden bij het verwerken van je bericht. "
    "Probeer het later opnieuw."
)


class ReplyToMemberUseCase:
    """Answers a Signal message from a member through their conversation."""

    def __init__(
        self,
        member_repository: MemberRepository,
        conversation_service: ConversationService,
        dispatcher: ToolCallDispatcher,
        notification_channel: NotificationChannel,
    ) -> None:
        self._member_repository = member_repository
        self._conversation_service = conversation_service
        self._dispatcher = dispatcher
        self._notification_channel = notification_channel

    async def execute(self, sender: str, text: str) -> bool:
        """Handle one inbound message.

        Unknown senders and members without a conversation get a fixed notice.
        Any failure while talking to the model results in the generic error
        notice; nothing is raised.

        Args:
            sender: Sender phone number as received.
            text: Message text.

        Returns:
            True if an assistant reply was sent.
        """
        phone = normalize_phone_number(sender)
        try:
            member = await self._member_repository.find_by_phone(phone)
            if member is None:
                logger.warning("Member not found for phone number %s", phone)
                await self._notify(sender, NOT_REGISTERED_NOTICE, "not_registered")
                return False

            if not member.conversation_id:
                logger.warning("Member %s has no active conversation", member.id)
                await self._notify(sender, NO_CONVERSATION_NOTICE, "no_conversation")
                return False

            church_id = member.primary_church_id
            response = await self._conversation_service.send_message(
                member.conversation_id, text, church_id, member
            )
            outcome = await self._dispatcher.dispatch(response, member, church_id)
            member = outcome.member

            if outcome.text:
                await self._notify(
                    member.phone_number,
                    outcome.text,
                    "assistant_message",
                    conversation_id=member.conversation_id,
                )

            await self._member_repository.save(
                member.touch(datetime.now(timezone.utc))
            )
            logger.info(
                "Signal message processed for member %s (conversation %s)",
                member.id,
                member.conversation_id,
            )
            return bool(outcome.text)
        except Exception:
            logger.exception("Failed to process signal message from %s", sender)
            await self._notify(sender, ERROR_NOTICE, "error")
            return False

    async def _notify(self, recipient: str, text: str, kind: str, **extra: object) -> None:
        result = await self._notification_channel.send_message(
            recipient, text, {"type": kind, **extra}
        )
        if not result.success:
            logger.error(
                "Could not send %s message to %s: %s", kind, recipient, result.error
            )
