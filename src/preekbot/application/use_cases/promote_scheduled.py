"""Promote scheduled content use case."""

import logging
from datetime import datetime, timezone

from preekbot.domain.repositories import ContentStatusRepository

logger = logging.getLogger(__name__)


class PromoteScheduledUseCase:
    """Moves due SCHEDULED tickets to QUEUED in a single batch."""

    def __init__(self, content_status_repository: ContentStatusRepository) -> None:
        self._content_status_repository = content_status_repository

    async def execute(self, now: datetime | None = None) -> int:
        """Promote every ticket whose schedule time has passed (or is unset).

        Args:
            now: Current time (defaults to now).

        Returns:
            Number of promoted tickets.
        """
        now = now or datetime.now(timezone.utc)
        due = await self._content_status_repository.find_scheduled_due(now)
        if not due:
            return 0

        # find_scheduled_due と同じ条件
        promoted = [ticket.promote(now) for ticket in due if ticket.is_due(now)]
        if not promoted:
            return 0
        await self._content_status_repository.save_all(promoted)
        logger.info("Moved %d scheduled ticket(s) to the queue", len(promoted))
        return len(promoted)
