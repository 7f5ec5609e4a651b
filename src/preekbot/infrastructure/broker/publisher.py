"""Redis stream event publisher."""

import json
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from redis.asyncio import Redis
from redis.exceptions import RedisError

from preekbot.config import BrokerConfig
from preekbot.domain.services import NotificationResult

logger = logging.getLogger(__name__)

NOTIFICATION_ROUTING_KEY = "notification.send"


class RedisEventPublisher:
    """Publishes events to a Redis stream.

    The publisher owns a single connection handle. Each publish acquires it
    through a scoped context; on failure the handle is closed and dropped so
    the next publish reconnects.
    """

    def __init__(
        self,
        config: BrokerConfig,
        client_factory: Callable[[str], Redis] | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            config: Broker configuration.
            client_factory: Builds a client from a URL (defaults to Redis.from_url).
        """
        self._config = config
        self._client_factory = client_factory or (
            lambda url: Redis.from_url(url, decode_responses=True)
        )
        self._client: Redis | None = None

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Redis]:
        if self._client is None:
            client = self._client_factory(self._config.url)
            try:
                await client.ping()
            except RedisError:
                await client.aclose()
                raise
            self._client = client
            logger.info("Broker connection established: %s", self._config.stream)
        try:
            yield self._client
        except RedisError:
            await self.close()
            raise

    async def publish(self, routing_key: str, data: dict[str, Any]) -> str:
        """Append an event to the stream.

        Args:
            routing_key: Event routing key.
            data: Event body (JSON-serializable).

        Returns:
            Stream entry id.

        Raises:
            RedisError: Connection or command failure.
        """
        async with self._connection() as client:
            entry_id = await client.xadd(
                self._config.stream,
                {
                    "routing_key": routing_key,
                    "body": json.dumps(data, ensure_ascii=False),
                },
            )
        logger.info(
            "Event published: routing_key=%s, stream=%s", routing_key, self._config.stream
        )
        return str(entry_id)

    async def send_message(
        self,
        recipient: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> NotificationResult:
        """Publish a notification.send event (never raises)."""
        event = {
            "event_type": NOTIFICATION_ROUTING_KEY,
            "event_id": str(uuid4()),
            "timestamp": time.time(),
            "data": {
                "recipient": recipient,
                "message": text,
                "metadata": metadata or {},
            },
        }
        try:
            await self.publish(NOTIFICATION_ROUTING_KEY, event)
        except (RedisError, OSError) as e:
            logger.error(
                "Failed to publish notification: recipient=%s, error=%s", recipient, e
            )
            return NotificationResult(success=False, error=str(e))
        return NotificationResult(success=True)

    async def is_healthy(self) -> bool:
        """Check the broker connection."""
        try:
            async with self._connection() as client:
                return bool(await client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Broker health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close and drop the connection handle."""
        client, self._client = self._client, None
        if client is not None:
            try:
                await client.aclose()
            except RedisError as e:
                logger.warning("Error while closing broker connection: %s", e)
