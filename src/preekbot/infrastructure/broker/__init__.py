"""Message broker integration."""

from preekbot.infrastructure.broker.publisher import (
    NOTIFICATION_ROUTING_KEY,
    RedisEventPublisher,
)

__all__ = ["NOTIFICATION_ROUTING_KEY", "RedisEventPublisher"]
