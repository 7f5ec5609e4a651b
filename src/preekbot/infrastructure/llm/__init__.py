"""LLM integration."""

from preekbot.infrastructure.llm.client import LLMClient
from preekbot.infrastructure.llm.conversation_service import (
    ResponsesConversationService,
    parse_response,
)
from preekbot.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMServerError,
    LLMTimeoutError,
)
from preekbot.infrastructure.llm.templates import create_jinja_env, render_instructions

__all__ = [
    "LLMAuthenticationError",
    "LLMClient",
    "LLMConnectionError",
    "LLMError",
    "LLMRateLimitError",
    "LLMServerError",
    "LLMTimeoutError",
    "ResponsesConversationService",
    "create_jinja_env",
    "parse_response",
    "render_instructions",
]
