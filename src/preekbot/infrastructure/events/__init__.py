"""Event system infrastructure."""

from preekbot.infrastructure.events.dispatcher import (
    EventDispatcher,
    EventHandler,
    event_handler,
)
from preekbot.infrastructure.events.loop import EventLoop
from preekbot.infrastructure.events.queue import EventQueue

__all__ = [
    "EventDispatcher",
    "EventHandler",
    "EventLoop",
    "EventQueue",
    "event_handler",
]
