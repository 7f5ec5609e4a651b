"""Queue content use case."""

import logging
from datetime import datetime, timezone

from preekbot.domain.entities import ContentReady, create_content_status
from preekbot.domain.exceptions import DuplicateTicketError
from preekbot.domain.repositories import ContentStatusRepository, MemberRepository
from preekbot.domain.services import has_multiple_churches

logger = logging.getLogger(__name__)


class QueueContentUseCase:
    """Creates one delivery ticket per eligible member for new content.

    Creation is idempotent: an existing ticket for the same member and content
    is left untouched.
    """

    def __init__(
        self,
        member_repository: MemberRepository,
        content_status_repository: ContentStatusRepository,
    ) -> None:
        self._member_repository = member_repository
        self._content_status_repository = content_status_repository

    async def execute(self, content: ContentReady, now: datetime | None = None) -> int:
        """Create tickets for a content item.

        Args:
            content: Content that became available.
            now: Current time (defaults to now).

        Returns:
            Number of tickets created.
        """
        now = now or datetime.now(timezone.utc)
        members = await self._member_repository.find_active_by_church(content.church_id)
        if not members:
            logger.warning("No active members found for church %d", content.church_id)
            return 0

        metadata = content.to_ticket_metadata()
        created = 0
        for member in members:
            existing = await self._content_status_repository.find_by_member_and_content(
                member.id, content.sermon_id
            )
            if existing is not None:
                logger.debug(
                    "Content %s already queued for member %s",
                    content.sermon_id,
                    member.id,
                )
                continue

            ticket = create_content_status(
                content.sermon_id,
                member.id,
                content.church_id,
                has_multiple_churches=has_multiple_churches(member),
                metadata=metadata,
                schedule_date=content.schedule_date,
                now=now,
            )
            try:
                await self._content_status_repository.save(ticket)
            except DuplicateTicketError:
                logger.debug(
                    "Ticket for member %s and content %s created concurrently",
                    member.id,
                    content.sermon_id,
                )
                continue

            created += 1
            logger.info(
                "Created %s ticket %s for member %s",
                ticket.status.value,
                ticket.id,
                member.id,
            )

        logger.info(
            "Content %s queued for distribution: %d ticket(s) for %d member(s)",
            content.sermon_id,
            created,
            len(members),
        )
        return created
