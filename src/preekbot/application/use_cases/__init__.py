"""Application use cases."""

from preekbot.application.use_cases.process_queue import ProcessQueueUseCase
from preekbot.application.use_cases.promote_scheduled import PromoteScheduledUseCase
from preekbot.application.use_cases.queue_content import QueueContentUseCase
from preekbot.application.use_cases.reply_to_member import (
    ERROR_NOTICE,
    NO_CONVERSATION_NOTICE,
    NOT_REGISTERED_NOTICE,
    ReplyToMemberUseCase,
)
from preekbot.application.use_cases.retry_ticket import RetryTicketUseCase

__all__ = [
    "ERROR_NOTICE",
    "NOT_REGISTERED_NOTICE",
    "NO_CONVERSATION_NOTICE",
    "ProcessQueueUseCase",
    "PromoteScheduledUseCase",
    "QueueContentUseCase",
    "ReplyToMemberUseCase",
    "RetryTicketUseCase",
]
