"""Content ready event handler."""

import logging

from preekbot.application.use_cases.queue_content import QueueContentUseCase
from preekbot.domain.entities import ContentReady, Event
from preekbot.domain.entities.event import EventType
from preekbot.infrastructure.events.dispatcher import event_handler

logger = logging.getLogger(__name__)


class ContentReadyEventHandler:
    """Handler for CONTENT_READY events.

    Creates the delivery tickets for the new content. Errors are raised so
    the event loop can deliver the event again.
    """

    def __init__(self, queue_content_use_case: QueueContentUseCase) -> None:
        """Initialize the handler.

        Args:
            queue_content_use_case: Use case that creates delivery tickets.
        """
        self._queue_content_use_case = queue_content_use_case

    @event_handler(EventType.CONTENT_READY)
    async def handle(self, event: Event) -> None:
        """Handle CONTENT_READY event.

        Args:
            event: Event whose payload carries a ContentReady under "content".
        """
        content = event.payload.get("content")
        if not isinstance(content, ContentReady):
            logger.error("CONTENT_READY event without content: %s", event.payload)
            return

        logger.info(
            "Handling CONTENT_READY event: sermon=%s, church=%d",
            content.sermon_id,
            content.church_id,
        )
        created = await self._queue_content_use_case.execute(content)
        logger.info("CONTENT_READY event handled: %d ticket(s) created", created)
