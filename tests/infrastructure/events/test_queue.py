"""Tests for EventQueue."""

import asyncio

import pytest

from preekbot.domain.entities.event import Event, EventType
from preekbot.infrastructure.events.queue import EventQueue


def content_event(sermon_id: str = "s-1", title: str = "Genade") -> Event:
    return Event(
        type=EventType.CONTENT_READY,
        payload={"church_id": 1, "sermon_id": sermon_id, "title": title},
    )


class TestEventQueue:
    """Tests for EventQueue."""

    @pytest.fixture
    def queue(self) -> EventQueue:
        return EventQueue()

    async def test_enqueue_and_dequeue(self, queue: EventQueue) -> None:
        event = content_event()

        await queue.enqueue(event)

        assert queue.pending_count == 1
        assert await queue.dequeue() is event

    async def test_newer_event_supersedes_pending(self, queue: EventQueue) -> None:
        """Test that the newer event with the same key wins."""
        await queue.enqueue(content_event(title="oud"))
        newer = content_event(title="nieuw")
        await queue.enqueue(newer)
        marker = content_event(sermon_id="s-2")
        await queue.enqueue(marker)

        assert await queue.dequeue() is newer
        assert await queue.dequeue() is marker

    async def test_processing_tracked_separately(self, queue: EventQueue) -> None:
        event = content_event()
        await queue.enqueue(event)
        dequeued = await queue.dequeue()

        queue.mark_processing(dequeued)
        assert queue.pending_count == 0
        assert queue.processing_count == 1

        # Same key may be queued while the first one runs
        again = content_event()
        await queue.enqueue(again)
        assert queue.pending_count == 1

        queue.mark_done(dequeued)
        assert queue.processing_count == 0
        assert await queue.dequeue() is again

    async def test_delayed_enqueue(self, queue: EventQueue) -> None:
        event = content_event()

        await queue.enqueue(event, delay=0.05)
        assert queue.pending_count == 0

        result = await asyncio.wait_for(queue.dequeue(), timeout=1.0)
        assert result is event

    async def test_enqueue_cancels_delayed_event(self, queue: EventQueue) -> None:
        await queue.enqueue(content_event(title="later"), delay=10)
        immediate = content_event(title="now")

        await queue.enqueue(immediate)

        assert await asyncio.wait_for(queue.dequeue(), timeout=1.0) is immediate

    async def test_clear(self, queue: EventQueue) -> None:
        await queue.enqueue(content_event())
        await queue.enqueue(content_event(sermon_id="s-2"), delay=10)

        queue.clear()

        assert queue.pending_count == 0
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(queue.dequeue(), timeout=0.05)
