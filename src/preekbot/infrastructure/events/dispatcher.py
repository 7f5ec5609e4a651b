"""Event dispatcher for content-ready and incoming Signal message events."""

import logging
from collections.abc import Awaitable, Callable

from preekbot.domain.entities.event import Event, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[Event], Awaitable[None]]


def event_handler(event_type: EventType) -> Callable[[EventHandler], EventHandler]:
    """Mark a coroutine as the handler for an event type.

    Usage:
        @event_handler(EventType.CONTENT_READY)
        async def handle(event: Event) -> None:
            ...

    Args:
        event_type: The event type this handler processes.

    Returns:
        Decorator function.
    """

    def decorator(func: EventHandler) -> EventHandler:
        func._event_type = event_type  # type: ignore[attr-defined]
        return func

    return decorator


class EventDispatcher:
    """Routes events to the handlers registered for their type.

    serve registers ContentReadyEventHandler for CONTENT_READY and
    SignalMessageEventHandler for SIGNAL_MESSAGE_RECEIVED.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = {}

    def register(self, event_type: EventType, handler: EventHandler) -> None:
        """Register a handler for an event type.

        Args:
            event_type: The event type to handle.
            handler: The handler coroutine function.
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "Registered handler for %s: %s",
            event_type.value,
            getattr(handler, "__name__", str(handler)),
        )

    def register_handler(self, handler: EventHandler) -> None:
        """Register a handler decorated with @event_handler.

        Raises:
            ValueError: If the handler was not decorated.
        """
        event_type = getattr(handler, "_event_type", None)
        if event_type is None:
            raise ValueError(
                f"Handler {getattr(handler, '__name__', str(handler))} "
                "has no _event_type attribute. "
                "Use the @event_handler decorator."
            )
        self.register(event_type, handler)

    def has_handler(self, event_type: EventType) -> bool:
        return bool(self._handlers.get(event_type))

    async def dispatch(self, event: Event) -> bool:
        """Dispatch an event to all registered handlers.

        A failing handler is logged and does not stop the others.

        Args:
            event: The event to dispatch.

        Returns:
            True if every handler completed without raising.
        """
        handlers = self._handlers.get(event.type, [])
        if not handlers:
            logger.warning("No handler registered for event type: %s", event.type.value)
            return True

        succeeded = True
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                succeeded = False
                logger.exception(
                    "Error in event handler %s for event %s",
                    getattr(handler, "__name__", str(handler)),
                    event.type.value,
                )
        return succeeded
