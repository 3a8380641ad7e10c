"""OpenAI client construction and SDK error mapping shared by the live providers.

Invariants:
    - Every openai SDK exception leaves this layer as a ProviderError
    - Timeouts and connection failures map to TRANSPORT; 5xx to SERVER_ERROR
"""

import openai
from openai import AsyncOpenAI

from slopguess.core.errors import ProviderError, ProviderErrorType


def build_openai_client(
    api_key: str, max_retries: int = 2, timeout_seconds: float = 120.0,
) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, max_retries=max_retries, timeout=timeout_seconds)


def _retry_after_ms(error: openai.APIStatusError) -> int | None:
    val = error.response.headers.get("retry-after")
    if val and val.isdigit():
        return int(val) * 1000
    return None


def map_openai_error(
    error: openai.OpenAIError,
    provider: str,
    bad_request_type: ProviderErrorType = ProviderErrorType.BAD_REQUEST,
) -> ProviderError:
    """Translate an SDK exception into the shared provider taxonomy."""
    if isinstance(error, openai.APIConnectionError):
        # APITimeoutError is a subclass of APIConnectionError
        return ProviderError(provider, ProviderErrorType.TRANSPORT, str(error))
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ProviderError(
            provider, ProviderErrorType.AUTH, "Invalid or unauthorized API key",
            status_code=error.status_code,
        )
    if isinstance(error, openai.RateLimitError):
        return ProviderError(
            provider, ProviderErrorType.RATE_LIMIT, "Rate limit exceeded",
            retry_after_ms=_retry_after_ms(error), status_code=429,
        )
    if isinstance(error, openai.BadRequestError):
        return ProviderError(provider, bad_request_type, error.message, status_code=400)
    if isinstance(error, openai.APIStatusError):
        error_type = (
            ProviderErrorType.SERVER_ERROR if error.status_code >= 500
            else ProviderErrorType.BAD_REQUEST
        )
        return ProviderError(provider, error_type, error.message, status_code=error.status_code)
    return ProviderError(provider, ProviderErrorType.SERVER_ERROR, str(error))
