"""LLM-related exceptions."""


class LLMError(Exception):
    """Base exception for LLM-related errors."""


class LLMRateLimitError(LLMError):
    """Rate limit exceeded error (HTTP 429)."""


class LLMAuthenticationError(LLMError):
    """Authentication error (invalid API key, etc.)."""


class LLMServerError(LLMError):
    """Upstream server error (HTTP 5xx)."""


class LLMTimeoutError(LLMError):
    """Request timed out."""


class LLMConnectionError(LLMError):
    """Network-level failure reaching the API."""


TRANSIENT_ERRORS: tuple[type[LLMError], ...] = (
    LLMRateLimitError,
    LLMServerError,
    LLMTimeoutError,
    LLMConnectionError,
)
