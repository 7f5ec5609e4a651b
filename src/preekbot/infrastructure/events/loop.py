"""Event processing loop."""

import asyncio
import logging
from dataclasses import replace

from preekbot.infrastructure.events.dispatcher import EventDispatcher
from preekbot.infrastructure.events.queue import EventQueue

logger = logging.getLogger(__name__)

DEFAULT_MAX_DELIVERIES = 3
DEFAULT_REDELIVERY_DELAY = 2.0


class EventLoop:
    """Sequential event processing loop.

    Delivery is at-least-once: when a handler raises, the event is enqueued
    again after redelivery_delay x attempt seconds, up to max_deliveries
    attempts in total.
    """

    def __init__(
        self,
        queue: EventQueue,
        dispatcher: EventDispatcher,
        max_deliveries: int = DEFAULT_MAX_DELIVERIES,
        redelivery_delay: float = DEFAULT_REDELIVERY_DELAY,
    ) -> None:
        """Initialize the event loop.

        Args:
            queue: The event queue to read from.
            dispatcher: The dispatcher to send events to.
            max_deliveries: Total delivery attempts per event.
            redelivery_delay: Base redelivery delay in seconds.
        """
        self._queue = queue
        self._dispatcher = dispatcher
        self._max_deliveries = max_deliveries
        self._redelivery_delay = redelivery_delay
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def start(self) -> None:
        """Run until stop() is called."""
        if not self._stop_event.is_set():
            logger.warning("EventLoop already running")
            return

        self._stop_event.clear()
        logger.info("EventLoop started")

        while not self._stop_event.is_set():
            try:
                try:
                    event = await asyncio.wait_for(self._queue.dequeue(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue

                logger.debug("Processing event: %s", event.type.value)
                self._queue.mark_processing(event)
                try:
                    succeeded = await self._dispatcher.dispatch(event)
                finally:
                    self._queue.mark_done(event)

                if not succeeded:
                    attempt = event.attempt + 1
                    if attempt < self._max_deliveries:
                        delay = self._redelivery_delay * attempt
                        logger.warning(
                            "Redelivering %s in %.1fs (attempt %d/%d)",
                            event.type.value,
                            delay,
                            attempt + 1,
                            self._max_deliveries,
                        )
                        await self._queue.enqueue(
                            replace(event, attempt=attempt), delay=delay
                        )
                    else:
                        logger.error(
                            "Giving up on %s after %d attempts",
                            event.type.value,
                            attempt,
                        )

            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error in event loop")

        logger.info("EventLoop stopped")

    async def stop(self) -> None:
        """Stop the loop and drop queued events."""
        logger.info("Stopping EventLoop")
        self._stop_event.set()
        self._queue.clear()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()
