"""Manual retry / requeue use case."""

import logging

from preekbot.domain.entities import ContentStatus
from preekbot.domain.exceptions import TicketNotFoundError
from preekbot.domain.repositories import ContentStatusRepository

logger = logging.getLogger(__name__)


class RetryTicketUseCase:
    """Operator actions that put a ticket back in the queue."""

    def __init__(self, content_status_repository: ContentStatusRepository) -> None:
        self._content_status_repository = content_status_repository

    async def retry(self, ticket_id: str) -> ContentStatus:
        """Requeue an ERROR ticket.

        The retry count is incremented and the error message is kept.

        Raises:
            TicketNotFoundError: Unknown ticket.
            InvalidStatusTransitionError: The ticket is not in ERROR.
        """
        ticket = await self._get(ticket_id)
        retried = ticket.retry()
        await self._content_status_repository.save(retried)
        logger.info(
            "Ticket %s requeued after error (retry_count=%d)",
            ticket_id,
            retried.retry_count,
        )
        return retried

    async def release(self, ticket_id: str) -> ContentStatus:
        """Release a WAITING ticket back to the queue.

        Raises:
            TicketNotFoundError: Unknown ticket.
            InvalidStatusTransitionError: The ticket is not WAITING.
        """
        ticket = await self._get(ticket_id)
        released = ticket.release()
        await self._content_status_repository.save(released)
        logger.info("Waiting ticket %s released to the queue", ticket_id)
        return released

    async def _get(self, ticket_id: str) -> ContentStatus:
        ticket = await self._content_status_repository.find_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket
