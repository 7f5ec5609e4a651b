"""Signal message event handler."""

import logging

from preekbot.application.use_cases.reply_to_member import ReplyToMemberUseCase
from preekbot.domain.entities import Event
from preekbot.domain.entities.event import EventType
from preekbot.infrastructure.events.dispatcher import event_handler

logger = logging.getLogger(__name__)


class SignalMessageEventHandler:
    """Handler for SIGNAL_MESSAGE_RECEIVED events."""

    def __init__(self, reply_use_case: ReplyToMemberUseCase) -> None:
        self._reply_use_case = reply_use_case

    @event_handler(EventType.SIGNAL_MESSAGE_RECEIVED)
    async def handle(self, event: Event) -> None:
        """Handle SIGNAL_MESSAGE_RECEIVED event.

        Args:
            event: Event with "sender" and "message" in its payload.
        """
        sender = event.payload.get("sender")
        text = event.payload.get("message")
        if not sender or not text:
            logger.warning("Ignoring incomplete signal message event: %s", event.payload)
            return

        logger.info("Handling SIGNAL_MESSAGE_RECEIVED event from %s", sender)
        await self._reply_use_case.execute(sender, text)
