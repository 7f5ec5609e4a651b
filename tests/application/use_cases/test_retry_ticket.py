"""Tests for RetryTicketUseCase."""

import pytest

from preekbot.application.use_cases import RetryTicketUseCase
from preekbot.domain.entities import ContentStatus, ContentStatusType
from preekbot.domain.exceptions import InvalidStatusTransitionError, TicketNotFoundError
from preekbot.infrastructure.persistence import SQLiteContentStatusRepository


@pytest.fixture
def repository(session_factory) -> SQLiteContentStatusRepository:
    return SQLiteContentStatusRepository(session_factory)


@pytest.fixture
def usecase(repository: SQLiteContentStatusRepository) -> RetryTicketUseCase:
    return RetryTicketUseCase(repository)


def create_ticket(status: ContentStatusType, retry_count: int = 0) -> ContentStatus:
    return ContentStatus(
        content_id="sermon-1",
        member_id="member-1",
        church_id=1,
        status=status,
        retry_count=retry_count,
        error_message="boom" if status == ContentStatusType.ERROR else None,
    )


class TestRetry:
    """retry tests."""

    async def test_error_ticket_requeued(
        self, usecase: RetryTicketUseCase, repository: SQLiteContentStatusRepository
    ) -> None:
        ticket = create_ticket(ContentStatusType.ERROR, retry_count=3)
        await repository.save(ticket)

        retried = await usecase.retry(ticket.id)

        stored = await repository.find_by_id(ticket.id)
        assert stored == retried
        assert stored.status == ContentStatusType.QUEUED
        assert stored.retry_count == 4
        assert stored.error_message == "boom"

    async def test_not_in_error(
        self, usecase: RetryTicketUseCase, repository: SQLiteContentStatusRepository
    ) -> None:
        ticket = create_ticket(ContentStatusType.SENT)
        await repository.save(ticket)

        with pytest.raises(InvalidStatusTransitionError):
            await usecase.retry(ticket.id)

    async def test_unknown_ticket(self, usecase: RetryTicketUseCase) -> None:
        with pytest.raises(TicketNotFoundError):
            await usecase.retry("missing")


class TestRelease:
    """release tests."""

    async def test_waiting_ticket_released(
        self, usecase: RetryTicketUseCase, repository: SQLiteContentStatusRepository
    ) -> None:
        ticket = create_ticket(ContentStatusType.WAITING)
        await repository.save(ticket)

        released = await usecase.release(ticket.id)

        assert released.status == ContentStatusType.QUEUED
        stored = await repository.find_by_id(ticket.id)
        assert stored is not None and stored.status == ContentStatusType.QUEUED
