"""Signal integration."""

from preekbot.infrastructure.signal.client import SignalNotificationChannel

__all__ = ["SignalNotificationChannel"]
