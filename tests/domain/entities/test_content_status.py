"""Tests for ContentStatus entity."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from preekbot.domain.entities import (
    ContentStatus,
    ContentStatusType,
    create_content_status,
)
from preekbot.domain.exceptions import InvalidStatusTransitionError

NOW = datetime(2024, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


def create_ticket(
    status: ContentStatusType = ContentStatusType.QUEUED,
    retry_count: int = 0,
    schedule_date: datetime | None = None,
) -> ContentStatus:
    return ContentStatus(
        content_id="sermon-1",
        member_id="member-1",
        church_id=7,
        status=status,
        retry_count=retry_count,
        schedule_date=schedule_date,
        created_at=NOW,
        updated_at=NOW,
    )


class TestCreateContentStatus:
    """作成時の状態ルールのテスト"""

    def test_multiple_churches_is_waiting(self) -> None:
        """複数教会所属の場合は WAITING"""
        ticket = create_content_status(
            "sermon-1",
            "member-1",
            7,
            has_multiple_churches=True,
            schedule_date=NOW + timedelta(days=1),
            now=NOW,
        )
        assert ticket.status == ContentStatusType.WAITING

    def test_future_schedule_is_scheduled(self) -> None:
        """未来の配信予定日時は SCHEDULED"""
        ticket = create_content_status(
            "sermon-1",
            "member-1",
            7,
            has_multiple_churches=False,
            schedule_date=NOW + timedelta(hours=1),
            now=NOW,
        )
        assert ticket.status == ContentStatusType.SCHEDULED
        assert ticket.schedule_date == NOW + timedelta(hours=1)

    def test_past_schedule_is_queued(self) -> None:
        """過去の配信予定日時は QUEUED"""
        ticket = create_content_status(
            "sermon-1",
            "member-1",
            7,
            has_multiple_churches=False,
            schedule_date=NOW - timedelta(hours=1),
            now=NOW,
        )
        assert ticket.status == ContentStatusType.QUEUED

    def test_no_schedule_is_queued(self) -> None:
        """配信予定日時なしは QUEUED"""
        ticket = create_content_status(
            "sermon-1", "member-1", 7, has_multiple_churches=False, now=NOW
        )
        assert ticket.status == ContentStatusType.QUEUED
        assert ticket.retry_count == 0
        assert ticket.created_at == NOW

    def test_metadata_is_copied(self) -> None:
        """メタデータはコピーして保持する"""
        metadata = {"title": "Genade"}
        ticket = create_content_status(
            "sermon-1",
            "member-1",
            7,
            has_multiple_churches=False,
            metadata=metadata,
            now=NOW,
        )
        metadata["title"] = "changed"
        assert ticket.metadata == {"title": "Genade"}


class TestValidation:
    """バリデーションのテスト"""

    def test_empty_content_id(self) -> None:
        with pytest.raises(ValueError):
            ContentStatus(content_id="", member_id="m", church_id=1)

    def test_negative_retry_count(self) -> None:
        with pytest.raises(ValueError):
            ContentStatus(content_id="c", member_id="m", church_id=1, retry_count=-1)


class TestTransitions:
    """状態遷移のテスト"""

    def test_promote(self) -> None:
        ticket = create_ticket(ContentStatusType.SCHEDULED)
        later = NOW + timedelta(minutes=5)

        promoted = ticket.promote(later)

        assert promoted.status == ContentStatusType.QUEUED
        assert promoted.updated_at == later
        assert ticket.status == ContentStatusType.SCHEDULED

    def test_promote_requires_scheduled(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            create_ticket(ContentStatusType.QUEUED).promote()

    def test_mark_sent_clears_error(self) -> None:
        ticket = create_ticket().mark_failed("boom", max_retries=3, now=NOW)

        sent = ticket.mark_sent(NOW)

        assert sent.status == ContentStatusType.SENT
        assert sent.sent_date == NOW
        assert sent.error_message is None

    def test_mark_sent_requires_queued(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            create_ticket(ContentStatusType.WAITING).mark_sent()

    def test_mark_waiting_from_queued(self) -> None:
        assert (
            create_ticket().mark_waiting().status == ContentStatusType.WAITING
        )

    def test_mark_waiting_from_sent_rejected(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            create_ticket(ContentStatusType.SENT).mark_waiting()

    def test_release(self) -> None:
        released = create_ticket(ContentStatusType.WAITING).release()
        assert released.status == ContentStatusType.QUEUED

    def test_release_requires_waiting(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            create_ticket(ContentStatusType.ERROR).release()


class TestFailureHandling:
    """失敗とリトライのテスト"""

    def test_failure_requeues(self) -> None:
        failed = create_ticket().mark_failed("timeout", max_retries=3)

        assert failed.status == ContentStatusType.QUEUED
        assert failed.retry_count == 1
        assert failed.error_message == "timeout"

    def test_three_failures_move_to_error(self) -> None:
        """3回失敗で ERROR になり、それ以上自動リトライしない"""
        ticket = create_ticket()
        for _ in range(3):
            ticket = ticket.mark_failed("boom", max_retries=3)

        assert ticket.status == ContentStatusType.ERROR
        assert ticket.retry_count == 3
        with pytest.raises(InvalidStatusTransitionError):
            ticket.mark_failed("again", max_retries=3)

    def test_manual_retry_increments_count(self) -> None:
        ticket = create_ticket(ContentStatusType.ERROR, retry_count=3)
        ticket = replace(ticket, error_message="boom")

        retried = ticket.retry()

        assert retried.status == ContentStatusType.QUEUED
        assert retried.retry_count == 4
        assert retried.error_message == "boom"

    def test_manual_retry_requires_error(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            create_ticket(ContentStatusType.QUEUED).retry()


class TestIsDue:
    """is_due のテスト"""

    def test_past_schedule_is_due(self) -> None:
        ticket = create_ticket(
            ContentStatusType.SCHEDULED, schedule_date=NOW - timedelta(seconds=1)
        )
        assert ticket.is_due(NOW)

    def test_future_schedule_is_not_due(self) -> None:
        ticket = create_ticket(
            ContentStatusType.SCHEDULED, schedule_date=NOW + timedelta(seconds=1)
        )
        assert not ticket.is_due(NOW)

    def test_missing_schedule_is_due(self) -> None:
        assert create_ticket(ContentStatusType.SCHEDULED).is_due(NOW)

    def test_other_status_is_not_due(self) -> None:
        assert not create_ticket(ContentStatusType.QUEUED).is_due(NOW)
