"""Tests for QueueContentUseCase."""

from datetime import datetime, timedelta, timezone

import pytest

from preekbot.application.use_cases import QueueContentUseCase
from preekbot.domain.entities import ContentReady, ContentStatusType, Member
from preekbot.infrastructure.persistence import (
    SQLiteContentStatusRepository,
    SQLiteMemberRepository,
)

NOW = datetime(2024, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def member_repository(session_factory) -> SQLiteMemberRepository:
    return SQLiteMemberRepository(session_factory)


@pytest.fixture
def ticket_repository(session_factory) -> SQLiteContentStatusRepository:
    return SQLiteContentStatusRepository(session_factory)


@pytest.fixture
def usecase(
    member_repository: SQLiteMemberRepository,
    ticket_repository: SQLiteContentStatusRepository,
) -> QueueContentUseCase:
    return QueueContentUseCase(member_repository, ticket_repository)


def create_member(phone: str, church_ids: tuple[int, ...]) -> Member:
    return Member(phone_number=phone, church_ids=church_ids, intake_completed=True)


def create_content(schedule_date: datetime | None = None) -> ContentReady:
    return ContentReady(
        sermon_id="sermon-1",
        church_id=1,
        title="Genade",
        speaker="Ds. Jansen",
        service_date="2024-03-10",
        content_types=[{"type": "summary", "audience": "volwassen"}],
        schedule_date=schedule_date,
    )


class TestQueueContent:
    """QueueContentUseCase tests."""

    async def test_one_ticket_per_eligible_member(
        self,
        usecase: QueueContentUseCase,
        member_repository: SQLiteMemberRepository,
        ticket_repository: SQLiteContentStatusRepository,
    ) -> None:
        single = create_member("+31600000001", (1,))
        multi = create_member("+31600000002", (1, 2))
        other = create_member("+31600000003", (2,))
        for member in (single, multi, other):
            await member_repository.save(member)

        created = await usecase.execute(create_content(), now=NOW)

        assert created == 2
        queued = await ticket_repository.find_by_member_and_content(
            single.id, "sermon-1"
        )
        waiting = await ticket_repository.find_by_member_and_content(
            multi.id, "sermon-1"
        )
        assert queued is not None and queued.status == ContentStatusType.QUEUED
        assert waiting is not None and waiting.status == ContentStatusType.WAITING
        assert queued.metadata["title"] == "Genade"
        assert queued.metadata["content_types"] == [
            {"type": "summary", "audience": "volwassen"}
        ]
        assert (
            await ticket_repository.find_by_member_and_content(other.id, "sermon-1")
            is None
        )

    async def test_future_schedule(
        self,
        usecase: QueueContentUseCase,
        member_repository: SQLiteMemberRepository,
        ticket_repository: SQLiteContentStatusRepository,
    ) -> None:
        member = create_member("+31600000001", (1,))
        await member_repository.save(member)

        await usecase.execute(create_content(NOW + timedelta(days=1)), now=NOW)

        ticket = await ticket_repository.find_by_member_and_content(
            member.id, "sermon-1"
        )
        assert ticket is not None
        assert ticket.status == ContentStatusType.SCHEDULED

    async def test_idempotent(
        self,
        usecase: QueueContentUseCase,
        member_repository: SQLiteMemberRepository,
        ticket_repository: SQLiteContentStatusRepository,
    ) -> None:
        """Test that repeated content-ready events create one ticket."""
        await member_repository.save(create_member("+31600000001", (1,)))

        assert await usecase.execute(create_content(), now=NOW) == 1
        assert await usecase.execute(create_content(), now=NOW) == 0

        assert len(await ticket_repository.find_by_status(ContentStatusType.QUEUED)) == 1

    async def test_no_members(self, usecase: QueueContentUseCase) -> None:
        assert await usecase.execute(create_content(), now=NOW) == 0
