"""HTTP server: health checks and event ingestion."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from aiohttp import web

from preekbot.domain.entities import ContentReady, Event, EventType

if TYPE_CHECKING:
    from preekbot.application.services.queue_runner import QueueRunner
    from preekbot.infrastructure.events.loop import EventLoop
    from preekbot.infrastructure.events.queue import EventQueue
    from preekbot.infrastructure.persistence.database import DatabaseManager

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Request body could not be turned into an event."""


def parse_content_ready(data: Any) -> ContentReady:
    """Build a ContentReady from a JSON body.

    Required: sermon_id, church_id, title. schedule_date is ISO 8601; a value
    without timezone is taken as UTC.

    Raises:
        PayloadError: Missing or malformed fields.
    """
    if not isinstance(data, dict):
        raise PayloadError("Body must be a JSON object")

    missing = [
        key for key in ("sermon_id", "church_id", "title") if data.get(key) in (None, "")
    ]
    if missing:
        raise PayloadError(f"Missing required fields: {', '.join(missing)}")

    try:
        church_id = int(data["church_id"])
    except (TypeError, ValueError) as e:
        raise PayloadError("church_id must be an integer") from e

    schedule_date = None
    if data.get("schedule_date"):
        try:
            schedule_date = datetime.fromisoformat(str(data["schedule_date"]))
        except ValueError as e:
            raise PayloadError("schedule_date must be an ISO 8601 datetime") from e
        if schedule_date.tzinfo is None:
            schedule_date = schedule_date.replace(tzinfo=timezone.utc)

    content_types = data.get("content_types") or []
    if not isinstance(content_types, list) or not all(
        isinstance(item, dict) for item in content_types
    ):
        raise PayloadError("content_types must be a list of objects")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise PayloadError("metadata must be an object")

    return ContentReady(
        sermon_id=str(data["sermon_id"]),
        church_id=church_id,
        title=str(data["title"]),
        uuid=data.get("uuid"),
        speaker=data.get("speaker"),
        service_date=data.get("service_date"),
        content_types=content_types,
        openai_file_id=data.get("openai_file_id"),
        metadata=metadata,
        schedule_date=schedule_date,
    )


class HttpServer:
    """HTTP server for health checks and inbound events.

    - GET /live, GET /ready: liveness and readiness checks
    - POST /events/content-ready: new content for a church
    - POST /webhooks/signal: inbound Signal message
    """

    def __init__(
        self,
        event_queue: EventQueue,
        event_loop: EventLoop,
        db_manager: DatabaseManager,
        queue_runner: QueueRunner | None = None,
        host: str = "0.0.0.0",
        port: int = 8080,
    ) -> None:
        """Initialize the server.

        Args:
            event_queue: Queue inbound events are put on.
            event_loop: EventLoop instance.
            db_manager: DatabaseManager instance.
            queue_runner: Periodic queue runner (checked by /ready when given).
            host: Interface to bind.
            port: Port to listen on. Use 0 for any available port.
        """
        self._event_queue = event_queue
        self._event_loop = event_loop
        self._db_manager = db_manager
        self._queue_runner = queue_runner
        self._host = host
        self._port = port
        self._actual_port = port
        self._server: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def port(self) -> int:
        """Get the port the server is listening on."""
        return self._actual_port

    async def check_liveness(self) -> dict[str, Any]:
        """Check if the application is alive."""
        is_alive = self._event_loop.is_running
        return {
            "status": "alive" if is_alive else "dead",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def check_readiness(self) -> dict[str, Any]:
        """Check if the application is ready to serve traffic."""
        event_loop_ok = self._event_loop.is_running
        queue_runner_ok = (
            self._queue_runner.is_running if self._queue_runner is not None else True
        )
        db_ok = await self._db_manager.is_healthy()

        return {
            "ready": event_loop_ok and queue_runner_ok and db_ok,
            "event_loop": event_loop_ok,
            "queue_runner": queue_runner_ok,
            "database": db_ok,
        }

    async def _handle_live(self, request: web.Request) -> web.Response:
        """Handle /live endpoint."""
        return web.json_response(await self.check_liveness())

    async def _handle_ready(self, request: web.Request) -> web.Response:
        """Handle /ready endpoint."""
        result = await self.check_readiness()
        status = 200 if result["ready"] else 503
        return web.json_response(result, status=status)

    async def _handle_content_ready(self, request: web.Request) -> web.Response:
        """Handle POST /events/content-ready."""
        try:
            content = parse_content_ready(await self._read_json(request))
        except PayloadError as e:
            logger.warning("Rejected content-ready request: %s", e)
            return web.json_response({"error": str(e)}, status=400)

        await self._event_queue.enqueue(
            Event(
                type=EventType.CONTENT_READY,
                payload={
                    "content": content,
                    "sermon_id": content.sermon_id,
                    "church_id": content.church_id,
                },
            )
        )
        logger.info(
            "Content-ready event accepted: sermon=%s, church=%d",
            content.sermon_id,
            content.church_id,
        )
        return web.json_response({"accepted": True}, status=202)

    async def _handle_signal_webhook(self, request: web.Request) -> web.Response:
        """Handle POST /webhooks/signal."""
        try:
            data = await self._read_json(request)
        except PayloadError as e:
            return web.json_response({"error": str(e)}, status=400)

        if not isinstance(data, dict):
            return web.json_response({"error": "Body must be a JSON object"}, status=400)
        sender = data.get("sender") or data.get("source")
        message = data.get("message")
        if not sender or not isinstance(message, str) or not message.strip():
            return web.json_response(
                {"error": "sender and message are required"}, status=400
            )

        await self._event_queue.enqueue(
            Event(
                type=EventType.SIGNAL_MESSAGE_RECEIVED,
                payload={
                    "sender": str(sender),
                    "recipient": data.get("recipient"),
                    "message": message,
                    "timestamp": data.get("timestamp"),
                },
            )
        )
        logger.info("Signal message accepted from %s", sender)
        return web.json_response({"accepted": True}, status=202)

    @staticmethod
    async def _read_json(request: web.Request) -> Any:
        try:
            return await request.json()
        except json.JSONDecodeError as e:
            raise PayloadError("Body must be valid JSON") from e

    def create_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application()
        app.router.add_get("/live", self._handle_live)
        app.router.add_get("/ready", self._handle_ready)
        app.router.add_post("/events/content-ready", self._handle_content_ready)
        app.router.add_post("/webhooks/signal", self._handle_signal_webhook)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._server = web.AppRunner(self.create_app())
        await self._server.setup()

        self._site = web.TCPSite(self._server, self._host, self._port)
        await self._site.start()

        # Get actual port (useful when port=0 for dynamic allocation)
        if self._site._server is not None:
            sockets = self._site._server.sockets  # type: ignore[union-attr]
            if sockets:
                self._actual_port = sockets[0].getsockname()[1]

        self._running = True
        logger.info("HTTP server started on %s:%d", self._host, self.port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._server is not None:
            await self._server.cleanup()
            self._server = None
            self._site = None

        self._running = False
        logger.info("HTTP server stopped")
