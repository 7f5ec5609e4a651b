"""LLM client wrapper."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import litellm
from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    InternalServerError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)

from preekbot.config import LLMConfig
from preekbot.infrastructure.llm.exceptions import (
    TRANSIENT_ERRORS,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMServerError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LLMClient:
    """Responses API client.

    Model calls go through LiteLLM; conversation creation, which LiteLLM does
    not cover, is a plain HTTP call. Rate limits, server errors, timeouts and
    connection failures are retried with a linear backoff
    (retry_delay_seconds x attempt) up to max_retries attempts.
    """

    def __init__(
        self,
        config: LLMConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: LLM configuration.
            transport: Optional httpx transport (used in tests).
        """
        self._config = config
        self._transport = transport

    async def respond(
        self,
        conversation_id: str,
        input_items: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        instructions: str | None = None,
    ) -> dict[str, Any]:
        """Create a model response on a stored conversation.

        Args:
            conversation_id: Conversation handle.
            input_items: Responses API input items.
            tools: Tool definitions.
            instructions: System instructions (optional).

        Returns:
            Raw response as a dict (id, output, ...).

        Raises:
            LLMAuthenticationError: Invalid API key.
            LLMError: Non-transient error or retries exhausted.
        """
        params: dict[str, Any] = {
            "model": self._config.model,
            "input": input_items,
            "tools": tools,
            "tool_choice": "auto",
            "store": True,
            "extra_body": {"conversation": conversation_id},
            "api_key": self._config.api_key,
            "api_base": self._config.api_base,
            "timeout": self._config.timeout_seconds,
        }
        if instructions:
            params["instructions"] = instructions

        logger.debug(
            "LLM request: model=%s, conversation=%s",
            self._config.model,
            conversation_id,
        )

        async def call() -> dict[str, Any]:
            try:
                response = await litellm.aresponses(**params)
            except Exception as e:
                raise self._map_litellm_error(e) from e
            return _to_dict(response)

        result = await self._with_retry("respond", call)
        logger.debug("LLM response received: id=%s", result.get("id"))
        return result

    async def create_conversation(
        self,
        metadata: dict[str, str],
        items: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Create a server-side conversation.

        Args:
            metadata: Conversation metadata.
            items: Initial conversation items.

        Returns:
            Raw conversation object (contains "id").

        Raises:
            LLMAuthenticationError: Invalid API key.
            LLMError: Non-transient error or retries exhausted.
        """

        async def call() -> dict[str, Any]:
            try:
                async with httpx.AsyncClient(
                    base_url=self._config.api_base,
                    timeout=self._config.timeout_seconds,
                    transport=self._transport,
                ) as client:
                    response = await client.post(
                        "/conversations",
                        json={"metadata": metadata, "items": items},
                        headers={"Authorization": f"Bearer {self._config.api_key}"},
                    )
                    response.raise_for_status()
            except httpx.TimeoutException as e:
                raise LLMTimeoutError(str(e)) from e
            except httpx.HTTPStatusError as e:
                raise self._map_status_error(e) from e
            except httpx.RequestError as e:
                raise LLMConnectionError(str(e)) from e
            return response.json()

        return await self._with_retry("create_conversation", call)

    async def _with_retry(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        """Run a call, retrying transient failures."""
        attempts = max(1, self._config.max_retries)
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except TRANSIENT_ERRORS as e:
                if attempt >= attempts:
                    logger.error(
                        "LLM %s failed after %d attempts: %s", operation, attempt, e
                    )
                    raise
                delay = self._config.retry_delay_seconds * attempt
                logger.warning(
                    "LLM %s transient error (attempt %d/%d), retrying in %.1fs: %s",
                    operation,
                    attempt,
                    attempts,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
        raise LLMError(f"LLM {operation} failed")  # pragma: no cover

    @staticmethod
    def _map_litellm_error(error: Exception) -> LLMError:
        if isinstance(error, AuthenticationError):
            logger.error("LLM authentication error: %s", error)
            return LLMAuthenticationError(str(error))
        if isinstance(error, RateLimitError):
            return LLMRateLimitError(str(error))
        if isinstance(error, Timeout):
            return LLMTimeoutError(str(error))
        if isinstance(error, (InternalServerError, ServiceUnavailableError)):
            return LLMServerError(str(error))
        if isinstance(error, APIConnectionError):
            return LLMConnectionError(str(error))
        logger.error("LLM error: %s", error)
        return LLMError(str(error))

    @staticmethod
    def _map_status_error(error: httpx.HTTPStatusError) -> LLMError:
        status = error.response.status_code
        if status == 429:
            return LLMRateLimitError(str(error))
        if status >= 500:
            return LLMServerError(str(error))
        if status in (401, 403):
            logger.error("LLM authentication error: %s", error)
            return LLMAuthenticationError(str(error))
        logger.error("LLM request rejected: %s", error)
        return LLMError(str(error))


def _to_dict(response: Any) -> dict[str, Any]:
    """Normalize a LiteLLM response object to a dict."""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    raise LLMError(f"Unexpected response type: {type(response).__name__}")
