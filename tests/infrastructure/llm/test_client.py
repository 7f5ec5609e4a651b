"""Tests for LLMClient."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from litellm.exceptions import AuthenticationError, RateLimitError

from preekbot.config import LLMConfig
from preekbot.infrastructure.llm import (
    LLMAuthenticationError,
    LLMClient,
    LLMError,
    LLMRateLimitError,
    LLMServerError,
)


@pytest.fixture
def config() -> LLMConfig:
    """Create LLM config without retry delays."""
    return LLMConfig(
        model="gpt-4o",
        api_key="sk-test",
        api_base="https://llm.example.com/v1",
        max_retries=3,
        retry_delay_seconds=0,
    )


def rate_limit_error() -> RateLimitError:
    return RateLimitError(
        message="Rate limit exceeded", llm_provider="openai", model="gpt-4o"
    )


class TestRespond:
    """respond method tests."""

    async def test_request_shape(self, config: LLMConfig) -> None:
        """Test that the Responses API call carries the conversation and tools."""
        client = LLMClient(config)
        tools = [{"type": "function", "name": "manage_user"}]
        with patch(
            "litellm.aresponses",
            new=AsyncMock(return_value={"id": "resp_1", "output": []}),
        ) as mock_responses:
            result = await client.respond(
                "conv_1",
                [{"role": "user", "content": "Hallo"}],
                tools,
                instructions="Wees warm.",
            )

        assert result == {"id": "resp_1", "output": []}
        kwargs = mock_responses.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["tools"] == tools
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["store"] is True
        assert kwargs["extra_body"] == {"conversation": "conv_1"}
        assert kwargs["instructions"] == "Wees warm."
        assert kwargs["api_key"] == "sk-test"

    async def test_model_dump_response(self, config: LLMConfig) -> None:
        response = MagicMock()
        response.model_dump.return_value = {"id": "resp_2", "output": []}
        with patch("litellm.aresponses", new=AsyncMock(return_value=response)):
            result = await LLMClient(config).respond("conv_1", [], [])

        assert result["id"] == "resp_2"

    async def test_rate_limit_is_retried(self, config: LLMConfig) -> None:
        with patch(
            "litellm.aresponses",
            new=AsyncMock(side_effect=[rate_limit_error(), {"id": "resp_3"}]),
        ) as mock_responses:
            result = await LLMClient(config).respond("conv_1", [], [])

        assert result["id"] == "resp_3"
        assert mock_responses.await_count == 2

    async def test_retries_exhausted(self, config: LLMConfig) -> None:
        with patch(
            "litellm.aresponses", new=AsyncMock(side_effect=rate_limit_error())
        ) as mock_responses:
            with pytest.raises(LLMRateLimitError):
                await LLMClient(config).respond("conv_1", [], [])

        assert mock_responses.await_count == 3

    async def test_authentication_error_not_retried(self, config: LLMConfig) -> None:
        error = AuthenticationError(
            message="Invalid API key", llm_provider="openai", model="gpt-4o"
        )
        with patch(
            "litellm.aresponses", new=AsyncMock(side_effect=error)
        ) as mock_responses:
            with pytest.raises(LLMAuthenticationError):
                await LLMClient(config).respond("conv_1", [], [])

        assert mock_responses.await_count == 1

    async def test_generic_error(self, config: LLMConfig) -> None:
        with patch(
            "litellm.aresponses", new=AsyncMock(side_effect=Exception("Unknown"))
        ):
            with pytest.raises(LLMError):
                await LLMClient(config).respond("conv_1", [], [])


class TestCreateConversation:
    """create_conversation method tests."""

    async def test_posts_conversation(self, config: LLMConfig) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "conv_new"})

        client = LLMClient(config, transport=httpx.MockTransport(handler))

        result = await client.create_conversation(
            {"topic": "+31612345678"},
            [{"type": "message", "role": "assistant", "content": "Welkom"}],
        )

        assert result == {"id": "conv_new"}
        [request] = requests
        assert request.url.path == "/v1/conversations"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["metadata"] == {"topic": "+31612345678"}
        assert body["items"][0]["content"] == "Welkom"

    async def test_server_error_retried(self, config: LLMConfig) -> None:
        responses = iter(
            [httpx.Response(503), httpx.Response(200, json={"id": "conv_ok"})]
        )
        client = LLMClient(
            config, transport=httpx.MockTransport(lambda request: next(responses))
        )

        result = await client.create_conversation({}, [])

        assert result["id"] == "conv_ok"

    async def test_server_error_exhausted(self, config: LLMConfig) -> None:
        client = LLMClient(
            config, transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )

        with pytest.raises(LLMServerError):
            await client.create_conversation({}, [])

    async def test_client_error_not_retried(self, config: LLMConfig) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"error": "bad"})

        client = LLMClient(config, transport=httpx.MockTransport(handler))

        with pytest.raises(LLMError):
            await client.create_conversation({}, [])
        assert len(calls) == 1

    async def test_unauthorized(self, config: LLMConfig) -> None:
        client = LLMClient(
            config, transport=httpx.MockTransport(lambda request: httpx.Response(401))
        )

        with pytest.raises(LLMAuthenticationError):
            await client.create_conversation({}, [])
