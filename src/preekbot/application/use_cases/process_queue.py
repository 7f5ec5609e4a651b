"""Distribution queue processor."""

import asyncio
import logging
from datetime import datetime, timezone

from preekbot.application.services.conversation_session import (
    ConversationSessionManager,
)
from preekbot.application.services.tool_dispatcher import ToolCallDispatcher
from preekbot.domain.entities import ContentStatus, ContentStatusType
from preekbot.domain.entities.content_status import DEFAULT_MAX_RETRIES
from preekbot.domain.exceptions import MemberNotFoundError, NotificationDeliveryError
from preekbot.domain.repositories import ContentStatusRepository, MemberRepository
from preekbot.domain.services import (
    ContentDetailService,
    NotificationChannel,
    find_summary_audience,
    format_content_message,
    has_multiple_churches,
)

logger = logging.getLogger(__name__)


class ProcessQueueUseCase:
    """Drains QUEUED tickets, oldest first.

    Per ticket: hold members of several churches (WAITING), build the message,
    resolve the conversation, run the model's tool calls, deliver the final
    text and mark the ticket SENT. Any failure goes through the retry
    transition and never aborts the batch.
    """

    def __init__(
        self,
        content_status_repository: ContentStatusRepository,
        member_repository: MemberRepository,
        session_manager: ConversationSessionManager,
        dispatcher: ToolCallDispatcher,
        notification_channel: NotificationChannel,
        content_service: ContentDetailService,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_workers: int = 1,
    ) -> None:
        """Initialize the processor.

        Args:
            content_status_repository: Ticket repository.
            member_repository: Member repository.
            session_manager: Conversation session manager.
            dispatcher: Tool-call dispatcher.
            notification_channel: Outbound notification channel.
            content_service: Content service (rich messages).
            max_retries: Failures before a ticket moves to ERROR.
            max_workers: Tickets processed concurrently (1 = sequential).
        """
        self._content_status_repository = content_status_repository
        self._member_repository = member_repository
        self._session_manager = session_manager
        self._dispatcher = dispatcher
        self._notification_channel = notification_channel
        self._content_service = content_service
        self._max_retries = max_retries
        self._max_workers = max(1, max_workers)

    async def execute(self, limit: int = 10) -> int:
        """Process up to `limit` queued tickets.

        Args:
            limit: Maximum number of tickets in this pass.

        Returns:
            Number of tickets processed without error.
        """
        tickets = await self._content_status_repository.find_by_status(
            ContentStatusType.QUEUED, limit
        )
        if not tickets:
            return 0

        logger.info("Processing %d queued ticket(s)", len(tickets))

        if self._max_workers == 1:
            results = [await self._process_safely(ticket) for ticket in tickets]
        else:
            semaphore = asyncio.Semaphore(self._max_workers)

            async def limited(ticket: ContentStatus) -> bool:
                async with semaphore:
                    return await self._process_safely(ticket)

            results = await asyncio.gather(*(limited(ticket) for ticket in tickets))

        return sum(1 for ok in results if ok)

    async def _process_safely(self, ticket: ContentStatus) -> bool:
        try:
            await self._process(ticket)
            return True
        except Exception as e:
            await self._handle_failure(ticket, e)
            return False

    async def _process(self, ticket: ContentStatus) -> None:
        member = await self._member_repository.find_by_id(ticket.member_id)
        if member is None:
            raise MemberNotFoundError(ticket.member_id)

        if has_multiple_churches(member):
            await self._content_status_repository.save(ticket.mark_waiting())
            logger.info(
                "Member %s belongs to multiple churches; ticket %s set to WAITING",
                member.id,
                ticket.id,
            )
            return

        message = await self._build_message(ticket)

        session = await self._session_manager.ensure_conversation(
            member, ticket.content_id, message, ticket.church_id
        )
        member = session.member
        text = message
        if session.response is not None:
            outcome = await self._dispatcher.dispatch(
                session.response, member, ticket.church_id
            )
            member = outcome.member
            text = outcome.text or message

        result = await self._notification_channel.send_message(
            member.phone_number,
            text,
            {
                "content_id": ticket.content_id,
                "member_id": member.id,
                "ticket_id": ticket.id,
            },
        )
        if not result.success:
            raise NotificationDeliveryError(member.phone_number, result.error)

        now = datetime.now(timezone.utc)
        await self._content_status_repository.save(
            ticket.mark_sent(now), member=member.touch(now)
        )
        logger.info(
            "Content %s delivered to member %s (ticket %s)",
            ticket.content_id,
            member.id,
            ticket.id,
        )

    async def _build_message(self, ticket: ContentStatus) -> str:
        message = format_content_message(ticket.metadata)
        audience = find_summary_audience(ticket.metadata)
        if audience is None:
            return message

        try:
            details = await self._content_service.get_content_details(
                ticket.content_id, audience
            )
        except Exception as e:
            logger.warning(
                "Could not fetch content details for %s: %s", ticket.content_id, e
            )
            return message
        return details or message

    async def _handle_failure(self, ticket: ContentStatus, error: Exception) -> None:
        logger.error(
            "Failed to process ticket %s (member=%s, content=%s): %s",
            ticket.id,
            ticket.member_id,
            ticket.content_id,
            error,
        )
        try:
            current = await self._content_status_repository.find_by_id(ticket.id)
            if current is not None and current.status != ContentStatusType.QUEUED:
                logger.warning(
                    "Ticket %s is %s; failure not recorded",
                    ticket.id,
                    current.status.value,
                )
                return
            failed = (current or ticket).mark_failed(str(error), self._max_retries)
            await self._content_status_repository.save(failed)
        except Exception:
            logger.exception("Could not record failure of ticket %s", ticket.id)
            return
        if failed.status == ContentStatusType.ERROR:
            logger.error(
                "Ticket %s moved to ERROR after %d attempt(s)",
                ticket.id,
                failed.retry_count,
            )
