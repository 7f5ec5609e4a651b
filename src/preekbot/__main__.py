"""アプリケーションのエントリポイント

Usage:
    preekbot serve
    preekbot process-queue [--limit N] [--continuous] [--interval S]
    preekbot retry <ticket_id>
    preekbot release <ticket_id>
    preekbot register <phone> [--church-id ID ...]
    preekbot reset-conversation <phone>
"""

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from pathlib import Path

from preekbot.application.handlers import (
    ContentReadyEventHandler,
    SignalMessageEventHandler,
)
from preekbot.application.services import (
    ConversationSessionManager,
    MemberService,
    QueueRunner,
    ToolCallDispatcher,
)
from preekbot.application.tools import ToolExecutor, tool_definitions
from preekbot.application.use_cases import (
    ProcessQueueUseCase,
    PromoteScheduledUseCase,
    QueueContentUseCase,
    ReplyToMemberUseCase,
    RetryTicketUseCase,
)
from preekbot.config import Config, ConfigError, LoggingConfig, load_config
from preekbot.domain.exceptions import (
    InvalidStatusTransitionError,
    MemberNotFoundError,
    TicketNotFoundError,
)
from preekbot.domain.services import NotificationChannel
from preekbot.infrastructure.broker import RedisEventPublisher
from preekbot.infrastructure.content import ContentServiceClient
from preekbot.infrastructure.events import EventDispatcher, EventLoop, EventQueue
from preekbot.infrastructure.http.server import HttpServer
from preekbot.infrastructure.llm import (
    LLMClient,
    ResponsesConversationService,
    create_jinja_env,
)
from preekbot.infrastructure.persistence import (
    DatabaseManager,
    SQLiteChatHistoryRepository,
    SQLiteContentStatusRepository,
    SQLiteMemberRepository,
)
from preekbot.infrastructure.signal import SignalNotificationChannel

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


@dataclass
class Application:
    """Wired application components."""

    config: Config
    db_manager: DatabaseManager
    member_service: MemberService
    queue_content: QueueContentUseCase
    reply_to_member: ReplyToMemberUseCase
    retry_ticket: RetryTicketUseCase
    queue_runner: QueueRunner
    publisher: RedisEventPublisher | None = None

    async def close(self) -> None:
        if self.publisher is not None:
            await self.publisher.close()
        await self.db_manager.close()


def build_notification_channel(
    config: Config,
) -> tuple[NotificationChannel, RedisEventPublisher | None]:
    """Select the notification transport.

    Raises:
        ConfigError: broker transport without a broker section, or an
            unknown transport name.
    """
    transport = config.distribution.notification_transport
    if transport == "signal":
        return SignalNotificationChannel(config.signal), None
    if transport == "broker":
        if config.broker is None:
            raise ConfigError("notification_transport 'broker' requires a broker section")
        publisher = RedisEventPublisher(config.broker)
        return publisher, publisher
    raise ConfigError(f"Unknown notification transport: {transport}")


async def build_application(config: Config) -> Application:
    """Build all components from the config."""
    db_manager = DatabaseManager(config.database.path)
    await db_manager.create_tables()

    member_repository = SQLiteMemberRepository(db_manager.get_session)
    content_status_repository = SQLiteContentStatusRepository(db_manager.get_session)
    chat_history_repository = SQLiteChatHistoryRepository(db_manager.get_session)

    content_service = ContentServiceClient(config.content_service)
    notification_channel, publisher = build_notification_channel(config)

    debug_llm_messages = bool(config.logging and config.logging.debug_llm_messages)
    conversation_service = ResponsesConversationService(
        LLMClient(config.llm),
        tool_definitions(),
        content_service,
        chat_history_repository,
        jinja_env=create_jinja_env(),
        debug_llm_messages=debug_llm_messages,
    )
    dispatcher = ToolCallDispatcher(
        conversation_service,
        ToolExecutor(member_repository, content_service),
        max_depth=config.llm.max_tool_depth,
    )
    session_manager = ConversationSessionManager(
        conversation_service, member_repository
    )

    process_queue = ProcessQueueUseCase(
        content_status_repository,
        member_repository,
        session_manager,
        dispatcher,
        notification_channel,
        content_service,
        max_retries=config.distribution.max_retries,
        max_workers=config.distribution.max_workers,
    )
    queue_runner = QueueRunner(
        PromoteScheduledUseCase(content_status_repository),
        process_queue,
        config.distribution,
    )

    return Application(
        config=config,
        db_manager=db_manager,
        member_service=MemberService(member_repository),
        queue_content=QueueContentUseCase(
            member_repository, content_status_repository
        ),
        reply_to_member=ReplyToMemberUseCase(
            member_repository, conversation_service, dispatcher, notification_channel
        ),
        retry_ticket=RetryTicketUseCase(content_status_repository),
        queue_runner=queue_runner,
        publisher=publisher,
    )


def install_stop_handlers(stop_event: asyncio.Event) -> None:
    """Set stop_event on SIGINT / SIGTERM."""
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)


async def serve(app: Application) -> None:
    """Run the event bus, the HTTP server and the queue runner until stopped."""
    event_queue = EventQueue()
    event_dispatcher = EventDispatcher()
    event_dispatcher.register_handler(ContentReadyEventHandler(app.queue_content).handle)
    event_dispatcher.register_handler(
        SignalMessageEventHandler(app.reply_to_member).handle
    )
    event_loop = EventLoop(event_queue, event_dispatcher)

    http_server = HttpServer(
        event_queue,
        event_loop,
        app.db_manager,
        queue_runner=app.queue_runner,
        host=app.config.http.host,
        port=app.config.http.port,
    )

    stop_event = asyncio.Event()
    install_stop_handlers(stop_event)

    loop_task = asyncio.create_task(event_loop.start())
    runner_task = asyncio.create_task(app.queue_runner.start())
    await http_server.start()
    logger.info(
        "Serving (queue interval: %.1fs, transport: %s)",
        app.config.distribution.interval_seconds,
        app.config.distribution.notification_transport,
    )

    await stop_event.wait()

    logger.info("Shutting down...")
    await http_server.stop()
    await app.queue_runner.stop()
    await event_loop.stop()
    await asyncio.gather(loop_task, runner_task, return_exceptions=True)
    logger.info("Shutdown complete")


async def process_queue(app: Application, args: argparse.Namespace) -> None:
    """Promote and process the queue once, or continuously until stopped."""
    if not args.continuous:
        promoted, processed = await app.queue_runner.run_once(args.limit)
        logger.info("Promoted %d, processed %d ticket(s)", promoted, processed)
        return

    stop_event = asyncio.Event()
    install_stop_handlers(stop_event)
    runner_task = asyncio.create_task(app.queue_runner.start(args.limit))
    await stop_event.wait()
    await app.queue_runner.stop()
    await asyncio.gather(runner_task, return_exceptions=True)


async def retry(app: Application, args: argparse.Namespace) -> None:
    ticket = await app.retry_ticket.retry(args.ticket_id)
    print(f"{ticket.id}: {ticket.status.value} (retry_count={ticket.retry_count})")


async def release(app: Application, args: argparse.Namespace) -> None:
    ticket = await app.retry_ticket.release(args.ticket_id)
    print(f"{ticket.id}: {ticket.status.value}")


async def register(app: Application, args: argparse.Namespace) -> None:
    member = await app.member_service.find_or_create_by_phone(
        args.phone, tuple(args.church_id or ())
    )
    print(f"{member.id}: {member.phone_number}")


async def reset_conversation(app: Application, args: argparse.Namespace) -> None:
    member = await app.member_service.reset_conversation(args.phone)
    print(f"{member.id}: conversation reset")


COMMANDS: dict[str, Callable[[Application, argparse.Namespace], Awaitable[None]]] = {
    "process-queue": process_queue,
    "retry": retry,
    "release": release,
    "register": register,
    "reset-conversation": reset_conversation,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="preekbot")
    parser.add_argument(
        "--config", type=Path, default=Path("config.yaml"), help="Config file path"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the event bus, HTTP server and queue runner")

    queue = sub.add_parser("process-queue", help="Promote and process queued tickets")
    queue.add_argument("--limit", type=int, default=None)
    queue.add_argument("--continuous", action="store_true")
    queue.add_argument("--interval", type=float, default=None)

    for name, help_text in (
        ("retry", "Requeue a ticket in ERROR"),
        ("release", "Release a WAITING ticket"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("ticket_id")

    reg = sub.add_parser("register", help="Register a member by phone number")
    reg.add_argument("phone")
    reg.add_argument("--church-id", type=int, action="append")

    reset = sub.add_parser(
        "reset-conversation", help="Clear a member's conversation handle"
    )
    reset.add_argument("phone")

    return parser


async def main(argv: list[str] | None = None) -> int:
    """アプリケーションを起動する"""
    args = build_parser().parse_args(argv)

    if not args.config.exists():
        logger.error("%s not found", args.config)
        return 1

    try:
        config = load_config(args.config)
        configure_logging(config.logging)
        if getattr(args, "interval", None) is not None:
            config.distribution = replace(
                config.distribution, interval_seconds=args.interval
            )
        app = await build_application(config)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    try:
        if args.command == "serve":
            await serve(app)
        else:
            await COMMANDS[args.command](app, args)
    except (
        TicketNotFoundError,
        MemberNotFoundError,
        InvalidStatusTransitionError,
        ValueError,
    ) as e:
        logger.error("%s", e)
        return 1
    finally:
        await app.close()
    return 0


def run() -> None:
    """Run the async main function."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
