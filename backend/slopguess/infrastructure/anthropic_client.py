"""Resilient Anthropic Client - wraps AsyncAnthropic with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, 529 overloaded, connection): retried up to max_retries
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to ProviderError(provider="anthropic") (core/errors.py)

Design Decisions:
    - Used only by the prompt generator, whose caller falls back to templates on any
      ProviderError, so retries are kept short
    - ±25% jitter on backoff
"""

import asyncio
import random
import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError,
)

from slopguess.core.errors import ErrorContext, ProviderError, ProviderErrorType

logger = logging.getLogger(__name__)

PROVIDER = "anthropic"

# OverloadedError (HTTP 529) is detected by status code on APIStatusError.
_OVERLOADED_STATUS = 529


def _is_overloaded(e: APIError) -> bool:
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 2,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 10_000,
        timeout_seconds: int = 30,
    ):
        # SDK-level retries disabled: this wrapper owns the retry policy.
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list[dict],
        temperature: float | None = None,
        context: ErrorContext | None = None,
    ):
        """Create message with automatic retry on transient failures."""
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.messages.create(**kwargs)
                self._log_success(response, attempt)
                return response

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)

            except APITimeoutError:
                raise ProviderError(
                    PROVIDER, ProviderErrorType.TRANSPORT, "API timeout", context=context,
                )

            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt, context)

            except (AuthenticationError, PermissionDeniedError) as e:
                raise ProviderError(
                    PROVIDER, ProviderErrorType.AUTH, str(e),
                    context=context, status_code=e.status_code,
                )

            except BadRequestError as e:
                raise ProviderError(
                    PROVIDER, ProviderErrorType.BAD_REQUEST, str(e),
                    context=context, status_code=e.status_code,
                )

            except APIError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt, context)
                    continue
                raise ProviderError(
                    PROVIDER, ProviderErrorType.SERVER_ERROR, str(e), context=context,
                )

    def _log_success(self, response, attempt: int) -> None:
        usage = getattr(response, "usage", None)
        logger.info(
            "Anthropic API success",
            extra={
                "provider": PROVIDER,
                "attempt": attempt + 1,
                "input_tokens": getattr(usage, "input_tokens", None),
                "output_tokens": getattr(usage, "output_tokens", None),
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise ProviderError(
                PROVIDER,
                ProviderErrorType.RATE_LIMIT,
                "Rate limit exceeded after retries",
                retry_after_ms=retry_after_ms,
                context=context,
                status_code=429,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            error_type = (
                ProviderErrorType.TRANSPORT
                if isinstance(e, APIConnectionError)
                else ProviderErrorType.SERVER_ERROR
            )
            raise ProviderError(
                PROVIDER,
                error_type,
                f"Transient failure after {self.max_retries} retries: {e}",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient error, retry after {delay}ms: {e}",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None
