"""In-process event queue."""

import asyncio
import logging

from preekbot.domain.entities.event import Event

logger = logging.getLogger(__name__)


class EventQueue:
    """In-memory event queue keyed by event identity.

    - A newer event with the same identity key supersedes a pending one; the
      stale entry is skipped on dequeue.
    - Events can be enqueued after a delay (used for redelivery).
    - Events being processed are tracked separately, so an event with the
      same key may be queued again while the first one runs.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._pending: dict[str, Event] = {}
        self._processing: dict[str, Event] = {}
        self._delay_tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def pending_count(self) -> int:
        """Number of events waiting to be dequeued."""
        return len(self._pending)

    @property
    def processing_count(self) -> int:
        """Number of events currently being handled."""
        return len(self._processing)

    async def enqueue(self, event: Event, delay: float | None = None) -> None:
        """Add an event to the queue.

        A pending or delayed event with the same identity key is superseded.

        Args:
            event: The event to enqueue.
            delay: Optional delay in seconds before the event becomes visible.
        """
        identity_key = event.get_identity_key()

        task = self._delay_tasks.pop(identity_key, None)
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.debug("Cancelled delayed enqueue for %s", identity_key)

        if identity_key in self._pending:
            logger.info("Superseding pending event %s", identity_key)

        if delay is not None and delay > 0:
            self._delay_tasks[identity_key] = asyncio.create_task(
                self._delayed_enqueue(event, delay)
            )
            return

        self._pending[identity_key] = event
        await self._queue.put(event)

    async def _delayed_enqueue(self, event: Event, delay: float) -> None:
        identity_key = event.get_identity_key()
        try:
            await asyncio.sleep(delay)
            self._pending[identity_key] = event
            await self._queue.put(event)
            logger.debug("Delayed enqueue completed for %s", identity_key)
        finally:
            self._delay_tasks.pop(identity_key, None)

    async def dequeue(self) -> Event:
        """Wait for the next current event.

        Superseded entries are discarded.

        Returns:
            The next event to process.
        """
        while True:
            event = await self._queue.get()
            if self._pending.get(event.get_identity_key()) is event:
                return event
            self._queue.task_done()

    def mark_processing(self, event: Event) -> None:
        """Move an event from pending to processing."""
        identity_key = event.get_identity_key()
        self._pending.pop(identity_key, None)
        self._processing[identity_key] = event

    def mark_done(self, event: Event) -> None:
        """Finish an event dequeued earlier."""
        identity_key = event.get_identity_key()
        if self._pending.get(identity_key) is event:
            self._pending.pop(identity_key)
        self._processing.pop(identity_key, None)
        self._queue.task_done()

    def clear(self) -> None:
        """Drop pending events and cancel delayed ones."""
        for task in self._delay_tasks.values():
            task.cancel()
        self._delay_tasks.clear()
        self._pending.clear()
        self._processing.clear()
        logger.info("EventQueue cleared")
